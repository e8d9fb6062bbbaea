"""
Razorpay Gateway
================

Razorpay Orders integration talking to the REST API with ``requests``
(HTTP basic auth with key id / key secret).

Razorpay has no hosted redirect page: the order id and public key are
returned as ``client_payload`` and the frontend opens Razorpay Checkout
with them. Confirmation arrives either through the webhook
(``X-Razorpay-Signature``: hex HMAC-SHA256 of the raw body keyed with the
webhook secret) or through the checkout callback, whose signature is the
HMAC of ``"<order_id>|<payment_id>"`` keyed with the key secret.

Handled event types:
- ``order.paid``        -> succeeded
- ``payment.captured``  -> succeeded
- ``payment.failed``    -> ignored (one attempt failed, the order can still be paid)

Author: DSP Development Team
Version: 1.0.0
"""

import hmac
import json
import logging
from decimal import Decimal
from typing import Any, Dict, Optional

import requests

from .base import (
    CheckoutSession,
    GatewayEvent,
    PaymentGateway,
    OUTCOME_IGNORED,
    OUTCOME_SUCCEEDED,
    hmac_sha256_hex,
    to_minor_units,
)
from .exceptions import AuthenticityFailure, GatewayUnavailable

logger = logging.getLogger(__name__)

RAZORPAY_API_BASE = "https://api.razorpay.com/v1"


class RazorpayGateway(PaymentGateway):
    name = "razorpay"

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        webhook_secret: str,
        timeout: int = 30,
        api_base: str = RAZORPAY_API_BASE,
    ) -> None:
        self.key_id = key_id
        self.key_secret = key_secret
        self.webhook_secret = webhook_secret
        self.timeout = timeout
        self.api_base = api_base.rstrip("/")

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
        amount_minor = to_minor_units(amount)
        data = {
            "amount": amount_minor,
            "currency": currency.upper(),
            "receipt": idempotency_key or metadata.get("purchase_id", ""),
            "notes": metadata,
        }

        try:
            response = requests.post(
                f"{self.api_base}/orders",
                json=data,
                auth=(self.key_id, self.key_secret),
                timeout=self.timeout,
            )
            response.raise_for_status()
            order = response.json()
        except requests.exceptions.RequestException as e:
            logger.error("Razorpay order could not be created: %s", e)
            raise GatewayUnavailable(
                "Razorpay order could not be created.", details={"error": str(e)}
            ) from e
        except ValueError as e:
            raise GatewayUnavailable("Razorpay returned an invalid response.") from e

        order_id = order.get("id")
        if not order_id:
            raise GatewayUnavailable("Razorpay returned an order without id.")

        logger.info("Created Razorpay order %s", order_id)
        return CheckoutSession(
            session_id=order_id,
            redirect_url=None,
            client_payload={
                "key_id": self.key_id,
                "order_id": order_id,
                "amount": amount_minor,
                "currency": currency.upper(),
                "name": title,
            },
        )

    def verify_signature(
        self, raw_payload: bytes, signature_header: Optional[str], secret: str
    ) -> bool:
        if not signature_header or not secret:
            return False
        if isinstance(raw_payload, str):
            raw_payload = raw_payload.encode("utf-8")
        expected = hmac_sha256_hex(secret, raw_payload)
        return hmac.compare_digest(expected, signature_header)

    def verify_payment_signature(
        self, order_id: str, payment_id: str, signature: Optional[str]
    ) -> bool:
        """Verify the signature Razorpay Checkout hands to the frontend."""
        message = f"{order_id}|{payment_id}".encode("utf-8")
        return self.verify_signature(message, signature, self.key_secret)

    def parse_event(
        self, raw_payload: bytes, signature_header: Optional[str]
    ) -> GatewayEvent:
        if not self.verify_signature(raw_payload, signature_header, self.webhook_secret):
            logger.warning("Rejected Razorpay webhook with invalid signature")
            raise AuthenticityFailure("Invalid Razorpay signature.")

        try:
            payload: Dict[str, Any] = json.loads(raw_payload)
        except ValueError as e:
            raise AuthenticityFailure("Malformed Razorpay payload.") from e

        event_type = payload.get("event", "")
        body = payload.get("payload") or {}
        order = (body.get("order") or {}).get("entity") or {}
        payment = (body.get("payment") or {}).get("entity") or {}

        if event_type == "order.paid":
            return GatewayEvent(
                event_type=event_type,
                outcome=OUTCOME_SUCCEEDED,
                external_payment_id=order.get("id") or payment.get("order_id"),
                amount_minor=order.get("amount_paid") or payment.get("amount"),
                currency=order.get("currency") or payment.get("currency"),
                raw=payload,
            )
        if event_type == "payment.captured":
            return GatewayEvent(
                event_type=event_type,
                outcome=OUTCOME_SUCCEEDED,
                external_payment_id=payment.get("order_id"),
                amount_minor=payment.get("amount"),
                currency=payment.get("currency"),
                raw=payload,
            )
        if event_type == "payment.failed":
            # Only this attempt failed, the order stays payable
            logger.info(
                "Razorpay payment %s for order %s failed, waiting for a retry",
                payment.get("id"),
                payment.get("order_id"),
            )

        return GatewayEvent(event_type=event_type, outcome=OUTCOME_IGNORED, raw=payload)
