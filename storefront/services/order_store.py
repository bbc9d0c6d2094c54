"""
Order Store
Owns the orders table: create, lookups, cancel and payment results.
Every mutation is a single statement committed on its own.
"""

import logging
import random
import string
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from sqlalchemy.exc import SQLAlchemyError

from storefront.errors import ValidationError, ServerError
from storefront.models.order import (
    Order,
    GATEWAY_MODE,
    STATUS_COD,
    STATUS_CREATED,
    STATUS_CANCELLED,
    OFFLINE_MODES,
    CANCELLABLE,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ["model", "variant", "price", "qty", "total", "name", "phone", "address", "city", "pincode"]

ORDER_NO_PREFIX = "TP"
_SUFFIX_CHARS = string.ascii_uppercase + string.digits


def generate_order_no(now=None):
    """
    TP + UTC timestamp to the second + 4 random chars.
    A display label only; the integer id is the key.
    """
    now = now or datetime.now(timezone.utc)
    suffix = "".join(random.choices(_SUFFIX_CHARS, k=4))
    return f"{ORDER_NO_PREFIX}{now.strftime('%Y%m%d%H%M%S')}{suffix}"


def missing_fields(data, required=REQUIRED_FIELDS):
    return [f for f in required if not data.get(f)]


def _to_amount(field, value):
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field}")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid {field}")
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"Invalid {field}")
    return amount


def _to_qty(value):
    if isinstance(value, bool):
        raise ValidationError("Invalid qty")
    try:
        qty = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError("Invalid qty")
    if not qty.is_finite() or qty != qty.to_integral_value() or qty < 1:
        raise ValidationError("Invalid qty")
    return int(qty)


class OrderStore:
    def __init__(self, db):
        self.db = db

    @property
    def session(self):
        return self.db.session

    def validate(self, fields):
        """
        Check an order's fields without touching the database.
        Returns the normalized column values; raises ValidationError.
        """
        missing = missing_fields(fields)
        if missing:
            raise ValidationError(f"Missing fields: {', '.join(missing)}")

        payment_mode = fields.get("payment_mode") or STATUS_COD
        if payment_mode == GATEWAY_MODE:
            status = STATUS_CREATED
        elif payment_mode in OFFLINE_MODES:
            status = payment_mode
        else:
            raise ValidationError(f"Invalid payment_mode ({', '.join(OFFLINE_MODES + (GATEWAY_MODE,))})")

        return {
            "user_id": fields.get("user_id"),
            "model": str(fields["model"]),
            "variant": str(fields["variant"]),
            "unit_price": _to_amount("price", fields["price"]),
            "qty": _to_qty(fields["qty"]),
            "total": _to_amount("total", fields["total"]),
            "name": str(fields["name"]),
            "phone": str(fields["phone"]),
            "address": str(fields["address"]),
            "city": str(fields["city"]),
            "pincode": str(fields["pincode"]),
            "payment_mode": payment_mode,
            "status": status,
        }

    def create(self, fields):
        """
        Insert a new order.
        Status is 'created' for gateway orders, otherwise the offline mode itself (default 'cod').
        """
        values = self.validate(fields)
        gateway_ref = fields.get("razorpay_order_id")
        if values["payment_mode"] == GATEWAY_MODE and not gateway_ref:
            raise ValidationError("Gateway orders need a razorpay_order_id")

        order = Order(order_no=generate_order_no(), razorpay_order_id=gateway_ref, **values)
        try:
            self.session.add(order)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise ServerError(f"Store error: {e}") from e
        logger.info("Order %s created (%s, status=%s)", order.id, order.order_no, order.status)
        return order

    def get_by_id(self, order_id):
        return self.session.get(Order, order_id)

    def get_by_gateway_ref(self, ref):
        return Order.query.filter_by(razorpay_order_id=ref).first()

    def list_by_user(self, user_id):
        return Order.query.filter_by(user_id=user_id).order_by(Order.id.desc()).all()

    def cancel(self, order_id, user_id):
        """Cancel only the caller's own order and only while it is created/cod."""
        return self._update(
            Order.query.filter(
                Order.id == order_id,
                Order.user_id == user_id,
                Order.status.in_(CANCELLABLE),
            ),
            {Order.status: STATUS_CANCELLED},
        )

    def apply_payment_result(self, gateway_ref, outcome_status, payment_ref, signature):
        """
        Record a verified/failed callback for a gateway order.
        Only a row still in 'created' is touched, so re-delivery of a callback
        leaves the first recorded outcome in place. No matching row is a no-op.
        """
        return self._update(
            Order.query.filter(
                Order.razorpay_order_id == gateway_ref,
                Order.status == STATUS_CREATED,
            ),
            {
                Order.status: outcome_status,
                Order.razorpay_payment_id: payment_ref,
                Order.razorpay_signature: signature,
            },
        )

    def _update(self, query, values):
        try:
            changed = query.update(values, synchronize_session=False)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise ServerError(f"Store error: {e}") from e
        return changed > 0
