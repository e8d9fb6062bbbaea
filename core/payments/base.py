"""
Payment Gateway Contract

Shared types for the payment provider integrations:

- CheckoutSession: what a provider hands back when a checkout is opened
- GatewayEvent: a verified, provider-neutral view of a webhook notification
- PaymentGateway: the interface the reconciliation engine talks to

Amounts cross the provider boundary as integers in the currency's minor
unit (cents, paise). Everything on our side of the boundary uses Decimal
major units.

Author: DSP Development Team
Version: 1.0.0
"""

import hashlib
import hmac
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

MINOR_UNITS_PER_MAJOR = 100

OUTCOME_SUCCEEDED = "succeeded"
OUTCOME_FAILED = "failed"
OUTCOME_IGNORED = "ignored"


def to_minor_units(amount: Decimal) -> int:
    """Convert a major unit amount (e.g. 49.99) into minor units (4999)."""
    value = (Decimal(amount) * MINOR_UNITS_PER_MAJOR).quantize(
        Decimal("1"), rounding=ROUND_HALF_UP
    )
    return int(value)


def from_minor_units(amount: Optional[int]) -> Optional[Decimal]:
    """Convert a provider amount in minor units back into major units."""
    if amount is None:
        return None
    return (Decimal(int(amount)) / MINOR_UNITS_PER_MAJOR).quantize(Decimal("0.01"))


def hmac_sha256_hex(secret: str, message: bytes) -> str:
    """Hex encoded HMAC-SHA256 of ``message`` keyed with ``secret``."""
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


@dataclass
class CheckoutSession:
    """Result of opening a checkout with a provider."""

    session_id: str
    redirect_url: Optional[str] = None
    client_payload: Dict[str, Any] = field(default_factory=dict)


@dataclass
class GatewayEvent:
    """A verified webhook notification reduced to what reconciliation needs."""

    event_type: str
    outcome: str
    external_payment_id: Optional[str] = None
    amount_minor: Optional[int] = None
    currency: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def amount(self) -> Optional[Decimal]:
        return from_minor_units(self.amount_minor)

    @property
    def is_actionable(self) -> bool:
        return self.outcome != OUTCOME_IGNORED and bool(self.external_payment_id)


class PaymentGateway(ABC):
    """
    Interface of a payment provider client.

    Implementations must raise GatewayUnavailable for transport or provider
    errors while opening a session and AuthenticityFailure when a webhook
    signature does not verify.
    """

    #: value stored in PurchaseRecord.payment_method
    name: str = ""

    @abstractmethod
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
        """Open a checkout for ``amount`` (major units) and return its handle."""

    @abstractmethod
    def verify_signature(
        self, raw_payload: bytes, signature_header: Optional[str], secret: str
    ) -> bool:
        """Return True when ``signature_header`` authenticates ``raw_payload``."""

    @abstractmethod
    def parse_event(
        self, raw_payload: bytes, signature_header: Optional[str]
    ) -> GatewayEvent:
        """Verify and decode a webhook body into a GatewayEvent."""
