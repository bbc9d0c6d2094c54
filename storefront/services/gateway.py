"""
Razorpay gateway adapter.
Opens remote orders over the Razorpay REST API and holds the key pair
needed to verify callback signatures.
"""

import logging
import requests
from requests.auth import HTTPBasicAuth

from storefront.errors import ValidationError, GatewayUnavailable, GatewayError

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.razorpay.com/v1"
SUPPORTED_CURRENCY = "INR"
MIN_AMOUNT = 100  # paise
COMMON_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}


def mask(value):
    if not value:
        return "(empty)"
    return "****" if len(value) <= 6 else value[:4] + "****" + value[-2:]


class RazorpayGateway:
    def __init__(self, key_id=None, key_secret=None, api_base=DEFAULT_API_BASE,
                 timeout=60, min_amount=MIN_AMOUNT, currency=SUPPORTED_CURRENCY):
        self.key_id = key_id or None
        self.key_secret = key_secret or None
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.min_amount = min_amount
        self.currency = currency

        logger.info("RZP key present: %s id: %s", bool(self.key_id), mask(self.key_id))
        logger.info("RZP secret present: %s", bool(self.key_secret))
        if not self.enabled:
            logger.warning("Razorpay keys missing - online payments disabled")

    @classmethod
    def from_config(cls, config):
        return cls(
            key_id=config.get("RAZORPAY_KEY_ID"),
            key_secret=config.get("RAZORPAY_KEY_SECRET"),
            api_base=config.get("RAZORPAY_API_BASE") or DEFAULT_API_BASE,
            timeout=float(config.get("RAZORPAY_TIMEOUT") or 60),
            min_amount=int(config.get("RAZORPAY_MIN_AMOUNT") or MIN_AMOUNT),
        )

    @property
    def enabled(self):
        return bool(self.key_id and self.key_secret)

    def validate(self, amount, currency):
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < self.min_amount:
            raise ValidationError(f"Invalid amount (paise >= {self.min_amount})")
        if currency != self.currency:
            raise ValidationError(f"Invalid currency ({self.currency} only)")

    def create_remote_order(self, amount, currency=SUPPORTED_CURRENCY, notes=None, receipt=None):
        """
        POST /orders on the gateway.
        Returns {"gateway_order_id", "currency", "amount"}; never retried.
        """
        self.validate(amount, currency)
        if not self.enabled:
            raise GatewayUnavailable()

        payload = {"amount": amount, "currency": currency, "notes": notes or {}}
        if receipt:
            payload["receipt"] = receipt

        try:
            resp = requests.post(
                f"{self.api_base}/orders",
                json=payload,
                headers=COMMON_HEADERS,
                auth=HTTPBasicAuth(self.key_id, self.key_secret),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("Razorpay order create failed: %s", e)
            raise GatewayError(code="RZP_ERR", description=str(e))

        if resp.status_code >= 400:
            raise self._error_from_response(resp)

        try:
            data = resp.json()
            gateway_order_id = data["id"]
        except (ValueError, TypeError, KeyError):
            logger.error("Razorpay order create returned no order id: status=%s body=%s", resp.status_code, resp.text)
            raise GatewayError(description="Malformed order response", status=resp.status_code)

        return {
            "gateway_order_id": gateway_order_id,
            "currency": data.get("currency", currency),
            "amount": data.get("amount", amount),
        }

    @staticmethod
    def _error_from_response(resp):
        try:
            err = (resp.json() or {}).get("error") or {}
        except ValueError:
            err = {}
        code = err.get("code") or "RZP_ERR"
        desc = err.get("description") or resp.text or "Order create failed"
        logger.error("Razorpay order create failed: code=%s status=%s desc=%s", code, resp.status_code, desc)
        return GatewayError(code=code, description=desc, status=resp.status_code)
