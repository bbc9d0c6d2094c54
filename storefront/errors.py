"""
Error taxonomy shared by routes and services.
Each error carries the HTTP status it is rendered with.
"""

import logging
from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class StorefrontError(Exception):
    status_code = 500
    message = "Server error"

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self):
        return {"error": self.message}


class ValidationError(StorefrontError):
    status_code = 400
    message = "Invalid input"


class Unauthorized(StorefrontError):
    status_code = 401
    message = "Unauthorized"


class NotFound(StorefrontError):
    status_code = 404
    message = "Not found"


class GatewayUnavailable(StorefrontError):
    status_code = 503
    message = "Razorpay not configured"


class GatewayError(StorefrontError):
    """Remote payment gateway call failed. Never retried."""

    status_code = 502
    message = "Razorpay order create failed"

    def __init__(self, code="RZP_ERR", description=None, status=None):
        super().__init__()
        self.code = code
        self.description = description or "Order create failed"
        self.status = status

    def to_dict(self):
        return {
            "error": self.message,
            "code": self.code,
            "status": self.status,
            "desc": self.description,
        }


class ServerError(StorefrontError):
    status_code = 500


def register_error_handlers(app):
    @app.errorhandler(StorefrontError)
    def handle_storefront_error(e):
        if e.status_code >= 500:
            logger.error("%s: %s", type(e).__name__, e)
        if isinstance(e, ServerError):
            return jsonify({"error": StorefrontError.message}), 500
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_store_error(e):
        logger.exception("Store error")
        return jsonify({"error": "Server error"}), 500
