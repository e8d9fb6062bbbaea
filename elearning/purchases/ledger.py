"""
Purchase Ledger

Sole writer of ``PurchaseRecord`` rows. Every status change is a
compare-and-set: a conditional ``UPDATE ... WHERE status = <expected>``
executed by the database, so two concurrent writers can never both win.

Operations:
- create_pending: open a new pending record (never talks to a gateway)
- attach_external_id: attach the provider id exactly once (idempotent)
- find_by_external_id: reconciliation lookup
- transition: compare-and-set status change with an optional field patch

Author: DSP Development Team
Version: 1.0.0
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import QuerySet
from django.utils import timezone

from ..courses.models import Course
from .exceptions import (
    ConflictingExternalId,
    DuplicateCompletion,
    InvalidReference,
    InvalidTransition,
    NotFound,
    StaleState,
)
from .models import PurchaseRecord, PurchaseStatus

logger = logging.getLogger(__name__)
User = get_user_model()

TRANSITIONS = {
    PurchaseStatus.PENDING: {PurchaseStatus.COMPLETED, PurchaseStatus.FAILED},
    PurchaseStatus.COMPLETED: {PurchaseStatus.REFUNDED},
    PurchaseStatus.FAILED: set(),
    PurchaseStatus.REFUNDED: set(),
}

PATCHABLE_FIELDS = {"amount", "refund_amount", "refund_reason"}


class PurchaseLedger:
    """
    Persistence boundary for purchase records.

    Args:
        allow_retry_after_failure: permit ``failed -> completed`` when a late
            success notification arrives. Defaults to the
            PURCHASE_ALLOW_RETRY_AFTER_FAILURE setting (False).
    """

    def __init__(self, allow_retry_after_failure: Optional[bool] = None) -> None:
        if allow_retry_after_failure is None:
            allow_retry_after_failure = getattr(
                settings, "PURCHASE_ALLOW_RETRY_AFTER_FAILURE", False
            )
        self.allow_retry_after_failure = allow_retry_after_failure

    def allowed_transitions(self) -> Dict[str, set]:
        transitions = {status: set(targets) for status, targets in TRANSITIONS.items()}
        if self.allow_retry_after_failure:
            transitions[PurchaseStatus.FAILED].add(PurchaseStatus.COMPLETED)
        return transitions

    # --- reads ---

    def get(self, record_id: int) -> PurchaseRecord:
        try:
            return PurchaseRecord.objects.select_related("course", "user").get(pk=record_id)
        except PurchaseRecord.DoesNotExist:
            raise NotFound(f"Purchase {record_id} does not exist.")

    def find_by_external_id(self, external_payment_id: str) -> Optional[PurchaseRecord]:
        if not external_payment_id:
            return None
        return (
            PurchaseRecord.objects.select_related("course", "user")
            .filter(external_payment_id=external_payment_id)
            .first()
        )

    def latest_for(self, user_id: int, course_id: int) -> Optional[PurchaseRecord]:
        return (
            PurchaseRecord.objects.filter(user_id=user_id, course_id=course_id)
            .order_by("-created_at", "-pk")
            .first()
        )

    def has_completed(self, user_id: int, course_id: int) -> bool:
        return PurchaseRecord.objects.filter(
            user_id=user_id, course_id=course_id, status=PurchaseStatus.COMPLETED
        ).exists()

    def completed_for_user(self, user_id: int) -> QuerySet:
        return PurchaseRecord.objects.filter(
            user_id=user_id, status=PurchaseStatus.COMPLETED
        ).select_related("course")

    # --- writes ---

    def create_pending(
        self,
        user_id: int,
        course_id: int,
        amount: Decimal,
        currency: str,
        payment_method: str,
    ) -> PurchaseRecord:
        """
        Create a pending record with the price snapshot.

        Raises:
            InvalidReference: unknown user or course
        """
        if not User.objects.filter(pk=user_id).exists():
            raise InvalidReference(f"User {user_id} does not exist.")
        if not Course.objects.filter(pk=course_id).exists():
            raise InvalidReference(f"Course {course_id} does not exist.")

        record = PurchaseRecord.objects.create(
            user_id=user_id,
            course_id=course_id,
            amount=amount,
            currency=currency.lower(),
            payment_method=payment_method,
            status=PurchaseStatus.PENDING,
        )
        logger.info(
            "Created pending purchase %s (user=%s, course=%s, amount=%s %s)",
            record.pk,
            user_id,
            course_id,
            amount,
            currency,
        )
        return record

    def attach_external_id(self, record_id: int, external_payment_id: str) -> PurchaseRecord:
        """
        Attach the provider id to a record exactly once.

        Attaching the same value again is a no-op.

        Raises:
            NotFound: unknown record
            ConflictingExternalId: a different id is already attached, or the
                id belongs to another record
        """
        if not external_payment_id:
            raise InvalidReference("External payment id must not be empty.")

        try:
            with transaction.atomic():
                updated = PurchaseRecord.objects.filter(
                    pk=record_id, external_payment_id__isnull=True
                ).update(
                    external_payment_id=external_payment_id,
                    updated_at=timezone.now(),
                )
        except IntegrityError as e:
            raise ConflictingExternalId(
                "External payment id is already attached to another purchase.",
                details={"external_payment_id": external_payment_id},
            ) from e

        record = self.get(record_id)
        if updated:
            logger.info(
                "Attached external id %s to purchase %s", external_payment_id, record_id
            )
            return record

        if record.external_payment_id == external_payment_id:
            return record

        raise ConflictingExternalId(
            f"Purchase {record_id} already has a different external payment id.",
            details={
                "current": record.external_payment_id,
                "requested": external_payment_id,
            },
        )

    def transition(
        self,
        record_id: int,
        from_status: str,
        to_status: str,
        patch: Optional[Dict[str, Any]] = None,
    ) -> PurchaseRecord:
        """
        Move a record from ``from_status`` to ``to_status`` atomically.

        Raises:
            InvalidTransition: edge not in the status machine
            NotFound: unknown record
            StaleState: the record is not in ``from_status`` anymore
            DuplicateCompletion: another completed record exists for the
                same user and course
        """
        if to_status not in self.allowed_transitions().get(from_status, set()):
            raise InvalidTransition(
                f"Transition {from_status} -> {to_status} is not allowed."
            )

        patch = dict(patch or {})
        unknown = set(patch) - PATCHABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be patched: {', '.join(sorted(unknown))}")

        try:
            with transaction.atomic():
                updated = PurchaseRecord.objects.filter(
                    pk=record_id, status=from_status
                ).update(status=to_status, updated_at=timezone.now(), **patch)
        except IntegrityError as e:
            raise DuplicateCompletion(
                f"Purchase {record_id} cannot complete, the course is already owned."
            ) from e

        if not updated:
            record = self.get(record_id)
            raise StaleState(
                f"Purchase {record_id} is {record.status}, expected {from_status}.",
                details={"current_status": record.status, "expected_status": from_status},
            )

        logger.info("Purchase %s: %s -> %s", record_id, from_status, to_status)
        return self.get(record_id)
