"""
Payment Gateway Exceptions

Exception hierarchy shared by every payment integration. Each exception
carries an HTTP status code and a machine readable error code so that API
views can turn it into a response without knowing which gateway raised it.

Author: DSP Development Team
Version: 1.0.0
"""

from typing import Optional, Dict, Any


class PaymentException(Exception):
    """
    Base exception class for all payment related errors.

    Attributes:
        message (str): Human-readable error message
        status_code (int): HTTP status code the API should answer with
        error_code (str): Stable identifier for clients and logs
        details (Dict[str, Any]): Additional error context

    Example:
        >>> try:
        ...     gateway.create_session(...)
        ... except PaymentException as e:
        ...     return Response(e.to_dict(), status=e.status_code)
    """

    default_status_code: int = 400
    default_error_code: str = "payment_error"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.status_code = status_code or self.default_status_code
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for serialization.

        Returns:
            Dictionary representation of the exception
        """
        return {
            "detail": self.message,
            "error_code": self.error_code,
            "details": self.details,
            "exception_type": self.__class__.__name__,
        }


class GatewayUnavailable(PaymentException):
    """
    The payment provider could not be reached or rejected the request.

    Transient from the client's point of view: the purchase stays pending
    and checkout may simply be retried.
    """

    default_status_code = 503
    default_error_code = "gateway_unavailable"


class AuthenticityFailure(PaymentException):
    """
    A webhook payload failed signature verification.

    Raised before the payload is parsed, so nothing may be mutated after it.
    """

    default_status_code = 400
    default_error_code = "invalid_signature"
