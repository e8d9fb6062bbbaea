"""
Payments Package - DSP
======================

Provider integrations used by the e-learning purchase flow. The package is
located in ``core`` so that billing is not tied to courses only.

Structure
---------
- base.py              -> shared types, minor unit conversion, gateway interface
- exceptions.py        -> PaymentException hierarchy
- stripe_gateway.py    -> Stripe Checkout + webhook verification
- razorpay_gateway.py  -> Razorpay Orders + webhook verification

``get_gateway`` builds a configured client from Django settings; callers
inject the result into the reconciliation engine.

Author: DSP Development Team
Date: 2025-09-03
"""

from django.conf import settings

from .base import CheckoutSession, GatewayEvent, PaymentGateway
from .exceptions import AuthenticityFailure, GatewayUnavailable, PaymentException
from .razorpay_gateway import RazorpayGateway
from .stripe_gateway import StripeGateway

STRIPE = "stripe"
RAZORPAY = "razorpay"


def get_gateway(method: str = None) -> PaymentGateway:
    """
    Return a gateway client for ``method`` (defaults to DEFAULT_PAYMENT_METHOD).

    Raises:
        ValueError: for an unknown payment method
    """
    method = method or settings.DEFAULT_PAYMENT_METHOD
    if method == STRIPE:
        return StripeGateway(
            secret_key=settings.STRIPE_SECRET_KEY,
            webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
        )
    if method == RAZORPAY:
        return RazorpayGateway(
            key_id=settings.RAZORPAY_KEY_ID,
            key_secret=settings.RAZORPAY_KEY_SECRET,
            webhook_secret=settings.RAZORPAY_WEBHOOK_SECRET,
            timeout=settings.PAYMENT_GATEWAY_TIMEOUT,
        )
    raise ValueError(f"Unknown payment method: {method}")


__all__ = [
    "AuthenticityFailure",
    "CheckoutSession",
    "GatewayEvent",
    "GatewayUnavailable",
    "PaymentException",
    "PaymentGateway",
    "RazorpayGateway",
    "StripeGateway",
    "get_gateway",
]
