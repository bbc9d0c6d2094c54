import bcrypt
from datetime import datetime, timezone
from storefront.extensions import db


def _utcnow():
    return datetime.now(timezone.utc)


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    name = db.Column(db.String(255), default='')
    password_hash = db.Column(db.Text, nullable=True)
    google_sub = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), default='')
    city = db.Column(db.String(120), default='')
    address = db.Column(db.Text, default='')
    email_verified = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    def set_password(self, password):
        self.password_hash = bcrypt.hashpw(str(password).encode('utf-8'), bcrypt.gensalt(rounds=10)).decode('utf-8')

    def check_password(self, password):
        # Google-only accounts have no password
        if not self.password_hash:
            return False
        return bcrypt.checkpw(str(password).encode('utf-8'), self.password_hash.encode('utf-8'))

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name or '',
        }


class _OneTimeToken:
    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    user_id = db.Column(db.Integer, nullable=False, index=True)
    token = db.Column(db.String(64), unique=True, nullable=False)
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False)
    used = db.Column(db.Boolean, default=False, nullable=False)

    def is_expired(self, now=None):
        expires_at = self.expires_at
        # SQLite hands back naive datetimes
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return expires_at < (now or _utcnow())


class VerifyToken(_OneTimeToken, db.Model):
    __tablename__ = 'verify_tokens'


class PasswordReset(_OneTimeToken, db.Model):
    __tablename__ = 'password_resets'
