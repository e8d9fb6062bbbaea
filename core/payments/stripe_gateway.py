"""
Stripe Gateway
==============

Stripe Checkout integration used for one-off course purchases.

- Checkout Sessions are created with inline ``price_data`` so the amount
  always matches the price snapshot stored on the purchase record.
- Webhooks are authenticated with Stripe's timestamped signature scheme
  (``Stripe-Signature`` header) before the body is decoded.

Handled event types:
- ``checkout.session.completed``               -> succeeded (once paid)
- ``checkout.session.async_payment_succeeded`` -> succeeded
- ``checkout.session.async_payment_failed``    -> failed
- ``checkout.session.expired``                 -> failed

Everything else is acknowledged and ignored.

Author: DSP Development Team
Date: 2025-09-03
"""

import json
import logging
from decimal import Decimal
from typing import Any, Dict, Optional

import stripe

from .base import (
    CheckoutSession,
    GatewayEvent,
    PaymentGateway,
    OUTCOME_FAILED,
    OUTCOME_IGNORED,
    OUTCOME_SUCCEEDED,
    to_minor_units,
)
from .exceptions import AuthenticityFailure, GatewayUnavailable

logger = logging.getLogger(__name__)

PAID_STATUSES = {"paid", "no_payment_required"}

SUCCESS_EVENTS = {
    "checkout.session.completed",
    "checkout.session.async_payment_succeeded",
}
FAILURE_EVENTS = {
    "checkout.session.async_payment_failed",
    "checkout.session.expired",
}


class StripeGateway(PaymentGateway):
    name = "stripe"

    def __init__(
        self,
        secret_key: str,
        webhook_secret: str,
        tolerance: int = stripe.Webhook.DEFAULT_TOLERANCE,
    ) -> None:
        self.secret_key = secret_key
        self.webhook_secret = webhook_secret
        self.tolerance = tolerance

    def create_session(
        self,
        amount: Decimal,
        currency: str,
        metadata: Dict[str, str],
        *,
        title: str = "",
        success_url: Optional[str] = None,
        cancel_url: Optional[str] = None,
        idempotency_key: Optional[str] = None,
    ) -> CheckoutSession:
        params = dict(
            mode="payment",
            line_items=[
                {
                    "price_data": {
                        "currency": currency.lower(),
                        "product_data": {"name": title or "Course"},
                        "unit_amount": to_minor_units(amount),
                    },
                    "quantity": 1,
                }
            ],
            success_url=success_url,
            cancel_url=cancel_url,
            metadata=metadata,
            client_reference_id=metadata.get("purchase_id"),
        )

        try:
            session = stripe.checkout.Session.create(
                api_key=self.secret_key,
                idempotency_key=idempotency_key,
                **params,
            )
        except stripe.StripeError as e:
            logger.error("Stripe checkout session could not be created: %s", e)
            raise GatewayUnavailable(
                "Stripe checkout could not be created.",
                details={"stripe_error": getattr(e, "user_message", None) or str(e)},
            ) from e

        if not getattr(session, "id", None) or not getattr(session, "url", None):
            raise GatewayUnavailable("Stripe returned an incomplete checkout session.")

        logger.info("Created Stripe checkout session %s", session.id)
        return CheckoutSession(session_id=session.id, redirect_url=session.url)

    def verify_signature(
        self, raw_payload: bytes, signature_header: Optional[str], secret: str
    ) -> bool:
        if not signature_header or not secret:
            return False
        if isinstance(raw_payload, bytes):
            try:
                raw_payload = raw_payload.decode("utf-8")
            except UnicodeDecodeError:
                return False
        try:
            stripe.WebhookSignature.verify_header(
                raw_payload, signature_header, secret, self.tolerance
            )
        except stripe.SignatureVerificationError:
            return False
        return True

    def parse_event(
        self, raw_payload: bytes, signature_header: Optional[str]
    ) -> GatewayEvent:
        if not self.verify_signature(raw_payload, signature_header, self.webhook_secret):
            logger.warning("Rejected Stripe webhook with invalid signature")
            raise AuthenticityFailure("Invalid Stripe signature.")

        try:
            payload: Dict[str, Any] = json.loads(raw_payload)
        except ValueError as e:
            raise AuthenticityFailure("Malformed Stripe payload.") from e

        event_type = payload.get("type", "")
        session = (payload.get("data") or {}).get("object") or {}

        if event_type in SUCCESS_EVENTS:
            if session.get("payment_status") in PAID_STATUSES:
                outcome = OUTCOME_SUCCEEDED
            else:
                # async payment methods complete later via async_payment_succeeded
                outcome = OUTCOME_IGNORED
        elif event_type in FAILURE_EVENTS:
            outcome = OUTCOME_FAILED
        else:
            outcome = OUTCOME_IGNORED

        return GatewayEvent(
            event_type=event_type,
            outcome=outcome,
            external_payment_id=session.get("id"),
            amount_minor=session.get("amount_total"),
            currency=session.get("currency"),
            raw=payload,
        )
