"""
Purchase Ledger Exceptions

Ledger and reconciliation errors. They share the ``PaymentException`` base
with the gateway errors so API views can handle the whole family with one
``except`` clause.

Author: DSP Development Team
Version: 1.0.0
"""

from core.payments.exceptions import PaymentException


class PurchaseException(PaymentException):
    """Base exception class for purchase ledger errors."""

    default_status_code = 400
    default_error_code = "purchase_error"


class InvalidReference(PurchaseException):
    """A purchase was requested for a user or course that does not exist."""

    default_error_code = "invalid_reference"


class NotFound(PurchaseException):
    """The referenced purchase record or course does not exist."""

    default_status_code = 404
    default_error_code = "not_found"


class AlreadyPurchased(PurchaseException):
    """The user already owns the course through a completed purchase."""

    default_status_code = 409
    default_error_code = "already_purchased"


class ConflictingExternalId(PurchaseException):
    """A different external payment id is already attached to the record."""

    default_status_code = 409
    default_error_code = "conflicting_external_id"


class StaleState(PurchaseException):
    """Compare-and-set lost: the record is no longer in the expected status."""

    default_status_code = 409
    default_error_code = "stale_state"


class InvalidTransition(PurchaseException):
    """The requested status change is not part of the status machine."""

    default_status_code = 409
    default_error_code = "invalid_transition"


class DuplicateCompletion(PurchaseException):
    """Another completed purchase already exists for the same user and course."""

    default_status_code = 409
    default_error_code = "duplicate_completion"
