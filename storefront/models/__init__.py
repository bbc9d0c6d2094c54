from storefront.models.user import User, VerifyToken, PasswordReset
from storefront.models.order import Order

__all__ = ["User", "VerifyToken", "PasswordReset", "Order"]
