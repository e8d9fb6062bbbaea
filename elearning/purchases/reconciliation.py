"""
Purchase Reconciliation Engine
==============================

Orchestrates the purchase flow between the ledger, the payment gateway
and the enrollment edge.

Checkout (``initiate``)
-----------------------
1. Load the course (NotFound) and refuse courses the user already owns.
2. Create a pending ledger record with the price snapshot.
3. Open a gateway session, passing the record id as metadata and as the
   gateway idempotency key.
4. Attach the provider id to the record. If the gateway is unavailable the
   pending record is simply left behind; it never completes.

Webhook (``reconcile``)
-----------------------
1. Verify authenticity before anything is parsed (AuthenticityFailure).
2. Look the record up by provider id (NotFound).
3. Idempotency gate: an already completed record is a successful no-op.
4. Compare-and-set ``pending -> completed``; losing the race (StaleState)
   re-reads the record and reports what the winner left behind.
5. Only the caller that won the transition grants the enrollment, in the
   same database transaction.

Failure notifications move ``pending -> failed``. A failed record stays
failed unless PURCHASE_ALLOW_RETRY_AFTER_FAILURE is enabled.

Author: DSP Development Team
Date: 2025-09-03
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.db import transaction

from core.payments.base import (
    CheckoutSession,
    GatewayEvent,
    PaymentGateway,
    OUTCOME_SUCCEEDED,
)
from core.payments.exceptions import AuthenticityFailure, PaymentException

from ..courses.models import Course, Enrollment
from ..progress.models import CourseProgress
from ..services.notifications import send_purchase_confirmation_email
from .exceptions import (
    AlreadyPurchased,
    DuplicateCompletion,
    NotFound,
    PurchaseException,
    StaleState,
)
from .ledger import PurchaseLedger
from .models import PurchaseRecord, PurchaseStatus

logger = logging.getLogger(__name__)

ACTION_COMPLETED = "completed"
ACTION_ALREADY_COMPLETED = "already_completed"
ACTION_FAILED = "failed"
ACTION_IGNORED = "ignored"
ACTION_NO_OP = "no_op"
ACTION_DUPLICATE_PURCHASE = "duplicate_purchase"


@dataclass
class CheckoutResult:
    purchase: PurchaseRecord
    session: CheckoutSession


@dataclass
class ReconciliationResult:
    action: str
    purchase_id: Optional[int] = None
    status: Optional[str] = None


class ReconciliationEngine:
    """
    Purchase orchestration for one payment gateway.

    Args:
        gateway: Payment provider client, see ``core.payments.get_gateway``
        ledger: Purchase ledger; a default one is created if omitted
    """

    def __init__(
        self, gateway: PaymentGateway, ledger: Optional[PurchaseLedger] = None
    ) -> None:
        self.gateway = gateway
        self.ledger = ledger or PurchaseLedger()

    # --- checkout ---

    def initiate(
        self,
        user,
        course_id,
        success_url: Optional[str] = None,
        cancel_url: Optional[str] = None,
    ) -> CheckoutResult:
        """
        Start a checkout for ``course_id``.

        Raises:
            NotFound: course does not exist or is not published
            AlreadyPurchased: the user already owns the course
            GatewayUnavailable: the provider could not open a session
        """
        try:
            course = Course.objects.get(pk=course_id, is_published=True)
        except (Course.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"Course {course_id} not found.")

        if self.ledger.has_completed(user.pk, course.pk):
            raise AlreadyPurchased("You have already purchased this course.")

        record = self.ledger.create_pending(
            user_id=user.pk,
            course_id=course.pk,
            amount=course.price,
            currency=settings.DEFAULT_CURRENCY,
            payment_method=self.gateway.name,
        )

        session = self.gateway.create_session(
            amount=record.amount,
            currency=record.currency,
            metadata={
                "purchase_id": str(record.pk),
                "course_id": str(course.pk),
                "user_id": str(user.pk),
            },
            title=course.title,
            success_url=success_url
            or (
                f"{settings.FRONTEND_URL}"
                f"/payments/checkout/success?session_id={{CHECKOUT_SESSION_ID}}&course={course.pk}"
            ),
            cancel_url=cancel_url
            or f"{settings.FRONTEND_URL}/payments/cancel?course={course.pk}",
            idempotency_key=f"purchase-{record.pk}",
        )

        record = self.ledger.attach_external_id(record.pk, session.session_id)
        return CheckoutResult(purchase=record, session=session)

    # --- webhooks ---

    def reconcile(self, raw_payload: bytes, signature_header: Optional[str]) -> ReconciliationResult:
        """
        Process one webhook delivery.

        Raises:
            AuthenticityFailure: signature did not verify, nothing was changed
            NotFound: no purchase carries the event's provider id
        """
        event = self.gateway.parse_event(raw_payload, signature_header)
        logger.info(
            "[webhook] %s %s (external_id=%s)",
            self.gateway.name,
            event.event_type,
            event.external_payment_id,
        )

        if not event.is_actionable:
            logger.debug("Ignoring %s event %s", self.gateway.name, event.event_type)
            return ReconciliationResult(action=ACTION_IGNORED)

        return self.apply_event(event)

    def verify_client_payment(
        self, order_id: str, payment_id: str, signature: Optional[str]
    ) -> ReconciliationResult:
        """
        Confirm a payment from the provider's checkout callback.

        Only gateways with client side signatures (Razorpay) support this.
        """
        verify = getattr(self.gateway, "verify_payment_signature", None)
        if verify is None:
            raise PaymentException(
                f"{self.gateway.name} does not support client side confirmation."
            )
        if not order_id or not payment_id or not verify(order_id, payment_id, signature):
            logger.warning("Rejected %s payment confirmation for %s", self.gateway.name, order_id)
            raise AuthenticityFailure("Invalid payment signature.")

        return self.apply_event(
            GatewayEvent(
                event_type="checkout.callback",
                outcome=OUTCOME_SUCCEEDED,
                external_payment_id=order_id,
            )
        )

    def apply_event(self, event: GatewayEvent) -> ReconciliationResult:
        record = self.ledger.find_by_external_id(event.external_payment_id)
        if record is None:
            logger.error(
                "No purchase found for %s external id %s (%s)",
                self.gateway.name,
                event.external_payment_id,
                event.event_type,
            )
            raise NotFound(
                "No purchase found for this payment.",
                details={"external_payment_id": event.external_payment_id},
            )

        if event.outcome == OUTCOME_SUCCEEDED:
            return self._complete(record, event)
        return self._fail(record)

    def _complete(self, record: PurchaseRecord, event: GatewayEvent) -> ReconciliationResult:
        if record.status == PurchaseStatus.COMPLETED:
            logger.info("Purchase %s already completed, duplicate notification", record.pk)
            return ReconciliationResult(ACTION_ALREADY_COMPLETED, record.pk, record.status)

        if record.status == PurchaseStatus.REFUNDED or (
            record.status == PurchaseStatus.FAILED
            and not self.ledger.allow_retry_after_failure
        ):
            logger.warning(
                "Ignoring success notification for %s purchase %s", record.status, record.pk
            )
            return ReconciliationResult(ACTION_NO_OP, record.pk, record.status)

        if event.currency and event.currency.lower() != record.currency.lower():
            logger.warning(
                "Purchase %s captured in %s but was priced in %s",
                record.pk,
                event.currency,
                record.currency,
            )

        patch = {}
        if event.amount is not None:
            patch["amount"] = event.amount

        try:
            with transaction.atomic():
                completed = self.ledger.transition(
                    record.pk, record.status, PurchaseStatus.COMPLETED, patch
                )
                self._grant_access(completed)
        except StaleState:
            current = self.ledger.get(record.pk)
            logger.info("Purchase %s moved to %s concurrently", record.pk, current.status)
            if current.status == PurchaseStatus.COMPLETED:
                return ReconciliationResult(ACTION_ALREADY_COMPLETED, current.pk, current.status)
            return ReconciliationResult(ACTION_NO_OP, current.pk, current.status)
        except DuplicateCompletion:
            logger.error(
                "Purchase %s was paid but user %s already owns course %s, refund required",
                record.pk,
                record.user_id,
                record.course_id,
            )
            return ReconciliationResult(ACTION_DUPLICATE_PURCHASE, record.pk, record.status)

        transaction.on_commit(lambda: send_purchase_confirmation_email(completed))
        return ReconciliationResult(ACTION_COMPLETED, completed.pk, completed.status)

    def _fail(self, record: PurchaseRecord) -> ReconciliationResult:
        if record.status != PurchaseStatus.PENDING:
            return ReconciliationResult(ACTION_NO_OP, record.pk, record.status)
        try:
            failed = self.ledger.transition(record.pk, PurchaseStatus.PENDING, PurchaseStatus.FAILED)
        except StaleState:
            return ReconciliationResult(ACTION_NO_OP, record.pk)
        return ReconciliationResult(ACTION_FAILED, failed.pk, failed.status)

    def _grant_access(self, record: PurchaseRecord) -> None:
        enrollment, created = Enrollment.grant(record.user, record.course, purchase=record)
        CourseProgress.objects.get_or_create(user=record.user, course=record.course)
        if created:
            logger.info(
                "Enrolled user %s into course %s (purchase=%s)",
                record.user_id,
                record.course_id,
                record.pk,
            )
        else:
            logger.info(
                "Enrollment already exists for user %s and course %s",
                record.user_id,
                record.course_id,
            )

    # --- refunds ---

    def refund(
        self, record_id: int, amount: Optional[Decimal] = None, reason: str = ""
    ) -> PurchaseRecord:
        """
        Record a refund and revoke the enrollment it paid for.

        Raises:
            NotFound: unknown purchase
            StaleState: the purchase is not completed
            PurchaseException: refund amount out of range
        """
        record = self.ledger.get(record_id)
        refund_amount = record.amount if amount is None else Decimal(amount)
        if refund_amount <= 0 or refund_amount > record.amount:
            raise PurchaseException(
                "Refund amount must be positive and not exceed the paid amount.",
                details={"paid": str(record.amount), "requested": str(refund_amount)},
            )

        with transaction.atomic():
            refunded = self.ledger.transition(
                record.pk,
                PurchaseStatus.COMPLETED,
                PurchaseStatus.REFUNDED,
                {"refund_amount": refund_amount, "refund_reason": reason},
            )
            Enrollment.revoke(refunded.user, refunded.course)

        logger.info("Refunded purchase %s (%s %s)", record.pk, refund_amount, record.currency)
        return refunded
