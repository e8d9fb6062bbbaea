"""
E-Learning Purchase Ledger Models

Models:
- PurchaseRecord: Durable record of one checkout attempt and its outcome

A record is created ``pending`` before the payment provider is contacted,
gets the provider's session/order id attached exactly once, and is moved
to its final status by webhook reconciliation. Records are never deleted.

Status machine::

    pending   -> completed | failed
    completed -> refunded

All writes go through ``elearning.purchases.ledger.PurchaseLedger``.

Author: DSP Development Team
Version: 1.0.0
"""

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _


class PurchaseStatus(models.TextChoices):
    PENDING = "pending", _("Pending")
    COMPLETED = "completed", _("Completed")
    FAILED = "failed", _("Failed")
    REFUNDED = "refunded", _("Refunded")


class PaymentMethod(models.TextChoices):
    STRIPE = "stripe", _("Stripe")
    RAZORPAY = "razorpay", _("Razorpay")


class PurchaseRecord(models.Model):
    """
    One purchase attempt of a course by a user.

    Attributes:
        user: Buyer, immutable after creation
        course: Purchased course, immutable after creation
        amount: Price snapshot in major units, overwritten by the captured amount
        currency: ISO currency code of ``amount``
        status: Position in the status machine
        payment_method: Provider that handles the payment
        external_payment_id: Provider session/order id, the reconciliation key
        refund_amount: Refunded amount, only set on refund
        refund_reason: Free text reason, only set on refund
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="purchases",
        verbose_name=_("User"),
    )
    course = models.ForeignKey(
        "elearning.Course",
        on_delete=models.PROTECT,
        related_name="purchases",
        verbose_name=_("Course"),
    )
    amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
        verbose_name=_("Amount"),
    )
    currency = models.CharField(
        max_length=3,
        verbose_name=_("Currency"),
    )
    status = models.CharField(
        max_length=20,
        choices=PurchaseStatus.choices,
        default=PurchaseStatus.PENDING,
        verbose_name=_("Status"),
    )
    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        verbose_name=_("Payment Method"),
    )
    external_payment_id = models.CharField(
        max_length=255,
        unique=True,
        null=True,
        blank=True,
        verbose_name=_("External Payment ID"),
        help_text=_("Checkout session or order id issued by the payment provider"),
    )
    refund_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        verbose_name=_("Refund Amount"),
    )
    refund_reason = models.TextField(
        blank=True,
        verbose_name=_("Refund Reason"),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Purchase Record")
        verbose_name_plural = _("Purchase Records")
        ordering = ["-created_at"]
        db_table = "elearning_purchase_record"
        indexes = [
            models.Index(
                fields=["user", "course", "status"], name="elearning_purchase_usr_crs_idx"
            ),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "course"],
                condition=Q(status="completed"),
                name="unique_completed_purchase_per_user_course",
            ),
        ]

    def __str__(self) -> str:
        return f"Purchase #{self.pk} {self.user} / {self.course} ({self.status})"

    @property
    def is_refundable(self) -> bool:
        return self.status == PurchaseStatus.COMPLETED
