"""
E-Mail Notifications

Transactional e-mails sent with Django's mail framework (EMAIL_* settings).

Author: DSP Development Team
Version: 1.0.0
"""

import logging

from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


def send_password_reset_email(user, reset_url: str) -> None:
    """Send the password reset link. Errors propagate to the caller."""
    send_mail(
        subject="Password reset request",
        message=(
            f"Hello {user.get_full_name() or user.username},\n\n"
            f"use the following link to reset your password:\n{reset_url}\n\n"
            f"The link expires in {settings.PASSWORD_RESET_TIMEOUT // 60} minutes. "
            "If you did not request a reset you can ignore this e-mail."
        ),
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[user.email],
    )
    logger.info("Sent password reset e-mail to user %s", user.pk)


def send_purchase_confirmation_email(purchase) -> None:
    """
    Confirm a completed purchase to the buyer.

    Runs after the reconciliation transaction has committed. Mail errors are
    logged, not raised.
    """
    user = purchase.user
    if not user.email:
        return
    try:
        send_mail(
            subject=f"Enrollment confirmed: {purchase.course.title}",
            message=(
                f"Hello {user.get_full_name() or user.username},\n\n"
                f"your payment of {purchase.amount} {purchase.currency.upper()} was "
                f"received and you are now enrolled in \"{purchase.course.title}\".\n\n"
                f"{settings.FRONTEND_URL}/courses/{purchase.course_id}"
            ),
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[user.email],
        )
    except Exception:
        logger.exception("Purchase confirmation e-mail for purchase %s failed", purchase.pk)
        return
    logger.info("Sent purchase confirmation for purchase %s", purchase.pk)
