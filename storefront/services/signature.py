"""Razorpay callback signature check."""

import hmac
import hashlib


def expected_signature(order_id, payment_id, secret):
    msg = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), msg, hashlib.sha256).hexdigest()


def verify(order_id, payment_id, signature, secret) -> bool:
    """
    Return True when ``signature`` is the hex HMAC-SHA256 of
    ``"{order_id}|{payment_id}"`` keyed with ``secret``.

    Malformed input (missing values, non-strings, non-ASCII signatures)
    fails verification instead of raising.
    """
    if not secret or not order_id or not payment_id or not signature:
        return False
    if not all(isinstance(v, str) for v in (order_id, payment_id, signature, secret)):
        return False
    try:
        expected = expected_signature(order_id, payment_id, secret)
        return hmac.compare_digest(expected.encode("ascii"), signature.encode("ascii"))
    except (UnicodeError, TypeError):
        return False
