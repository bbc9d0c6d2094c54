"""
Accounts
Registration, one-time tokens (email verification, password reset),
Google sign-in merge and bearer-token issue.
"""

import secrets
from datetime import datetime, timedelta, timezone

from flask_jwt_extended import create_access_token
from sqlalchemy.exc import IntegrityError

from storefront.extensions import db
from storefront.models.user import User, VerifyToken, PasswordReset

VERIFY_TOKEN_TTL = timedelta(hours=24)
RESET_TOKEN_TTL = timedelta(minutes=30)


class EmailTaken(Exception):
    pass


def normalize_email(email):
    return str(email or "").strip().lower()


def find_user_by_email(email):
    return User.query.filter_by(email=normalize_email(email)).first()


def issue_token(user, expires_delta=None):
    return create_access_token(
        identity=str(user.id),
        additional_claims={"email": user.email, "name": user.name or ""},
        expires_delta=expires_delta,
    )


def _new_one_time_token(model, user_id, ttl):
    row = model(
        user_id=user_id,
        token=secrets.token_hex(24),
        expires_at=datetime.now(timezone.utc) + ttl,
    )
    db.session.add(row)
    return row


def register_user(email, password, name="", phone="", city="", address=""):
    """Create an unverified password account plus its 24h verification token."""
    user = User(
        email=normalize_email(email),
        name=name or "",
        phone=phone or "",
        city=city or "",
        address=address or "",
        email_verified=False,
    )
    user.set_password(password)
    try:
        db.session.add(user)
        db.session.flush()
        token = _new_one_time_token(VerifyToken, user.id, VERIFY_TOKEN_TTL)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise EmailTaken(user.email)
    return user, token.token


def issue_password_reset(user):
    row = _new_one_time_token(PasswordReset, user.id, RESET_TOKEN_TTL)
    db.session.commit()
    return row.token


def _consume(model, token):
    """Return the unused, unexpired token row or None. Does not commit."""
    row = model.query.filter_by(token=token, used=False).first()
    if not row or row.is_expired():
        return None
    row.used = True
    return row


def reset_password(token, password):
    row = _consume(PasswordReset, token)
    if row is None:
        return False
    user = db.session.get(User, row.user_id)
    user.set_password(password)
    db.session.commit()
    return True


def verify_email(token):
    """Mark the owning user verified. Returns the user, or None for a bad token."""
    row = _consume(VerifyToken, token)
    if row is None:
        return None
    user = db.session.get(User, row.user_id)
    user.email_verified = True
    db.session.commit()
    return user


def upsert_google_user(claims):
    """
    First Google login creates the account; later logins (or an existing
    password account with the same email) refresh name/sub and mark it verified.
    """
    email = normalize_email(claims.get("email"))
    user = User.query.filter_by(email=email).first()
    if user is None:
        user = User(email=email)
        db.session.add(user)
    user.name = claims.get("name") or ""
    user.google_sub = claims.get("sub")
    user.email_verified = True
    db.session.commit()
    return user
