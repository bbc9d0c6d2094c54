"""
Reconciliation
Matches a gateway callback to the local order and records paid/failed.
Shared by the AJAX verify endpoint and the redirect verify endpoint.
"""

import logging
from collections import namedtuple

from storefront.models.order import STATUS_PAID, STATUS_FAILED
from storefront.services import signature

logger = logging.getLogger(__name__)

CALLBACK_FIELDS = ("razorpay_order_id", "razorpay_payment_id", "razorpay_signature")

Reconciliation = namedtuple("Reconciliation", ["ok", "order"])


def callback_fields(params):
    """Pull the three gateway identifiers out of a mapping; None if any is missing or not a string."""
    if not isinstance(params, dict):
        return None
    values = [params.get(f) for f in CALLBACK_FIELDS]
    if not all(isinstance(v, str) and v for v in values):
        return None
    return values


class Reconciler:
    def __init__(self, store, gateway):
        self.store = store
        self.gateway = gateway

    def reconcile(self, gateway_order_id, gateway_payment_id, sig):
        """
        Verify the callback signature and apply the outcome.
        A failed signature is a normal result (ok=False), not an error.
        The order is None when no local row carries this gateway reference.
        """
        ok = signature.verify(gateway_order_id, gateway_payment_id, sig, self.gateway.key_secret)
        outcome = STATUS_PAID if ok else STATUS_FAILED

        applied = self.store.apply_payment_result(gateway_order_id, outcome, gateway_payment_id, sig)
        order = self.store.get_by_gateway_ref(gateway_order_id)

        if order is None:
            logger.warning("Callback for unknown gateway order %s (verified=%s)", gateway_order_id, ok)
        elif applied:
            logger.info("Order %s marked %s via %s", order.id, outcome, gateway_order_id)
        elif ok and order.status == STATUS_FAILED:
            logger.warning(
                "Verified payment %s for order %s arrived after it was marked failed; needs manual review",
                gateway_payment_id, order.id,
            )
        else:
            logger.info("Order %s already %s; callback for %s ignored", order.id, order.status, gateway_order_id)

        return Reconciliation(ok=ok, order=order)
