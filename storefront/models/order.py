"""
Order Model
Status: created | cod | upi | paid | failed | cancelled
"""

from datetime import datetime, timezone
from storefront.extensions import db

GATEWAY_MODE = "razorpay"

STATUS_CREATED = "created"
STATUS_COD = "cod"
STATUS_UPI = "upi"
STATUS_PAID = "paid"
STATUS_FAILED = "failed"
STATUS_CANCELLED = "cancelled"

# offline modes double as the initial status of their orders
OFFLINE_MODES = (STATUS_COD, STATUS_UPI)

CANCELLABLE = (STATUS_CREATED,) + OFFLINE_MODES


class Order(db.Model):
    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    order_no = db.Column(db.String(32), nullable=False)
    user_id = db.Column(db.Integer, nullable=True, index=True)
    model = db.Column(db.String(120), nullable=False)
    variant = db.Column(db.String(120), nullable=False)
    unit_price = db.Column(db.Numeric(12, 2), nullable=False)
    qty = db.Column(db.Integer, nullable=False)
    total = db.Column(db.Numeric(12, 2), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(32), nullable=False)
    address = db.Column(db.Text, nullable=False)
    city = db.Column(db.String(120), nullable=False)
    pincode = db.Column(db.String(16), nullable=False)
    payment_mode = db.Column(db.String(32), nullable=False, default=STATUS_COD)
    status = db.Column(db.String(32), nullable=False, default=STATUS_COD)
    razorpay_order_id = db.Column(db.String(64), nullable=True, index=True)
    razorpay_payment_id = db.Column(db.String(64), nullable=True)
    razorpay_signature = db.Column(db.String(128), nullable=True)
    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )

    def to_dict(self):
        return {
            "id":                  self.id,
            "order_no":            self.order_no,
            "user_id":             self.user_id,
            "model":               self.model,
            "variant":             self.variant,
            "unit_price":          float(self.unit_price),
            "qty":                 self.qty,
            "total":               float(self.total),
            "name":                self.name,
            "phone":               self.phone,
            "address":             self.address,
            "city":                self.city,
            "pincode":             self.pincode,
            "payment_mode":        self.payment_mode,
            "status":              self.status,
            "razorpay_order_id":   self.razorpay_order_id,
            "razorpay_payment_id": self.razorpay_payment_id,
            "razorpay_signature":  self.razorpay_signature,
            "created_at":          self.created_at.isoformat() if self.created_at else None,
        }
