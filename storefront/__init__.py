"""
True Purity storefront backend.
Orders, Razorpay payment reconciliation and customer accounts.
"""

from storefront.app import create_app

__all__ = ["create_app"]
