"""
Storefront — Flask application
Orders, Razorpay reconciliation and customer accounts in one process.
"""

import logging
import os
import re
from datetime import datetime, timedelta, timezone

from dotenv import load_dotenv
from flask import Flask, jsonify
from flasgger import Swagger

from storefront.errors import register_error_handlers
from storefront.extensions import db, jwt
from storefront.models import Order, User, VerifyToken, PasswordReset  # noqa: F401 register models
from storefront.services.gateway import RazorpayGateway
from storefront.services.identity import GoogleIdentityVerifier
from storefront.services.order_store import OrderStore
from storefront.services.reconciliation import Reconciler

load_dotenv()

logger = logging.getLogger(__name__)

_DURATION_UNITS = {"s": "seconds", "m": "minutes", "h": "hours", "d": "days", "w": "weeks"}


def parse_expires(value):
    """'7d', '12h', '30m', '45s' or plain seconds -> timedelta."""
    if isinstance(value, timedelta):
        return value
    raw = str(value).strip().lower()
    match = re.fullmatch(r"(\d+)\s*([smhdw]?)", raw)
    if not match:
        raise ValueError(f"Unrecognised JWT_EXPIRES value: {value!r}")
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit or "s"]: int(amount)})


def load_config(overrides=None):
    port = int(os.environ.get("PORT", 3001))
    config = {
        "PORT": port,
        "FRONTEND_BASE": os.environ.get("FRONTEND_BASE", f"http://localhost:{port}"),
        "SQLALCHEMY_DATABASE_URI": os.environ.get("DATABASE_URL", "sqlite:///orders.db"),
        "SQLALCHEMY_TRACK_MODIFICATIONS": False,
        "JWT_SECRET_KEY": os.environ.get("JWT_SECRET") or "dev-secret-change-me",
        "JWT_EXPIRES": os.environ.get("JWT_EXPIRES") or "7d",
        "RAZORPAY_KEY_ID": os.environ.get("RAZORPAY_KEY_ID"),
        "RAZORPAY_KEY_SECRET": os.environ.get("RAZORPAY_KEY_SECRET"),
        "RAZORPAY_API_BASE": os.environ.get("RAZORPAY_API_BASE"),
        "RAZORPAY_TIMEOUT": os.environ.get("RAZORPAY_TIMEOUT", 60),
        "GOOGLE_CLIENT_ID": os.environ.get("GOOGLE_CLIENT_ID"),
        "LOG_LEVEL": os.environ.get("LOG_LEVEL", "INFO"),
    }
    config.update(overrides or {})
    config["JWT_ACCESS_TOKEN_EXPIRES"] = parse_expires(config["JWT_EXPIRES"])
    return config


class Services:
    """Per-app collaborators handed to request handlers through current_app."""

    def __init__(self, store, gateway, reconciler, identity):
        self.store = store
        self.gateway = gateway
        self.reconciler = reconciler
        self.identity = identity


def create_app(config=None, gateway=None, identity=None):
    app = Flask(__name__)
    app.config.update(load_config(config))

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize Extensions
    db.init_app(app)
    jwt.init_app(app)
    register_error_handlers(app)

    Swagger(app)

    if gateway is None:
        gateway = RazorpayGateway.from_config(app.config)
    if identity is None and app.config.get("GOOGLE_CLIENT_ID"):
        identity = GoogleIdentityVerifier(app.config["GOOGLE_CLIENT_ID"])
    store = OrderStore(db)
    app.extensions["storefront"] = Services(
        store=store,
        gateway=gateway,
        reconciler=Reconciler(store, gateway),
        identity=identity,
    )

    with app.app_context():
        db.create_all()

    # Register Blueprints
    from storefront.routes.auth import auth_bp
    app.register_blueprint(auth_bp, url_prefix='/api/auth')

    from storefront.routes.orders import orders_bp
    app.register_blueprint(orders_bp, url_prefix='/api')

    from storefront.routes.payments import payments_bp
    app.register_blueprint(payments_bp, url_prefix='/api')

    from storefront.routes.meta import meta_bp
    app.register_blueprint(meta_bp, url_prefix='/api')

    @app.route('/health')
    def health():
        try:
            db.session.execute(db.text('SELECT 1'))
            return jsonify({
                "service": "storefront",
                "status": "healthy",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }), 200
        except Exception as e:
            logger.error("Health check failed: %s", e)
            return jsonify({"service": "storefront", "status": "unhealthy"}), 503

    return app


if __name__ == '__main__':
    app = create_app()
    logger.info("True Purity server running at %s", app.config["FRONTEND_BASE"])
    app.run(host='0.0.0.0', port=app.config["PORT"])
