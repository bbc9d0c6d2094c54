import unittest

from storefront import create_app
from storefront.extensions import db
from storefront.models import User, Order
from storefront.services import accounts
from storefront.services.gateway import RazorpayGateway
from storefront.services.identity import InvalidIdentityToken
from storefront.services.signature import expected_signature

KEY_ID = "rzp_test_key"
KEY_SECRET = "rzp_test_secret"
FRONTEND = "http://shop.test"

ORDER_BODY = {
    "model": "TP-Elite",
    "variant": "Elite Black",
    "price": 14394,
    "qty": 1,
    "total": 14394,
    "name": "A",
    "phone": "999",
    "address": "X",
    "city": "Y",
    "pincode": "1",
}


class FakeIdentityVerifier:
    """Accepts 'good-token' and 'other-token', rejects anything else."""

    CLAIMS = {
        "good-token": {"email": "Google.User@Example.com", "name": "Google User", "sub": "sub-123"},
        "other-token": {"email": "google.user@example.com", "name": "Renamed", "sub": "sub-456"},
    }

    def verify(self, token):
        if token not in self.CLAIMS:
            raise InvalidIdentityToken("bad token")
        return dict(self.CLAIMS[token])


class AppTestCase(unittest.TestCase):
    gateway_key_id = KEY_ID
    gateway_key_secret = KEY_SECRET

    def setUp(self):
        self.gateway = RazorpayGateway(
            key_id=self.gateway_key_id,
            key_secret=self.gateway_key_secret,
            api_base="https://rzp.test/v1",
        )
        self.app = create_app(
            {
                "TESTING": True,
                "SQLALCHEMY_DATABASE_URI": "sqlite://",
                "FRONTEND_BASE": FRONTEND,
                "JWT_SECRET_KEY": "test-jwt-secret",
                "JWT_EXPIRES": "1h",
                "GOOGLE_CLIENT_ID": "client-id.apps.googleusercontent.com",
            },
            gateway=self.gateway,
            identity=FakeIdentityVerifier(),
        )
        self.client = self.app.test_client()
        self.ctx = self.app.app_context()
        self.ctx.push()
        self.store = self.app.extensions["storefront"].store

    def tearDown(self):
        db.session.remove()
        db.drop_all()
        self.ctx.pop()

    # --- helpers ---------------------------------------------------------

    def make_user(self, email="buyer@example.com", password="password123", verified=True):
        user = User(email=email, name="Buyer", email_verified=verified)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user

    def auth_headers(self, user):
        return {"Authorization": f"Bearer {accounts.issue_token(user)}"}

    def make_gateway_order(self, user, ref="order_RZP1"):
        fields = dict(ORDER_BODY, user_id=user.id, payment_mode="razorpay", razorpay_order_id=ref)
        return self.store.create(fields)

    def reload(self, order_id):
        return db.session.get(Order, order_id)

    @staticmethod
    def sign(order_id, payment_id, secret=KEY_SECRET):
        return expected_signature(order_id, payment_id, secret)
