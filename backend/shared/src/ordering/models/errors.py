"""Standard error codes for the ordering handlers.

Every failure surfaced to an HTTP caller is an OrderingError carrying one
of these codes; the API layer maps the code to a status.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    """Error codes returned in error response bodies."""

    # Request errors
    INVALID_INPUT = "ERR_001"
    INVALID_ACTION = "ERR_002"
    PAYMENT_NOT_CONFIRMED = "ERR_003"
    ORDER_MISMATCH = "ERR_004"
    TOTAL_MISMATCH = "ERR_005"

    # Stripe errors
    INVALID_WEBHOOK_SIGNATURE = "ERR_STRIPE_001"
    STRIPE_API_ERROR = "ERR_STRIPE_002"
    SESSION_VERIFICATION_FAILED = "ERR_STRIPE_003"

    # Notification errors
    EMAIL_DELIVERY_FAILED = "ERR_NOTIFY_001"

    # Server configuration
    CONFIGURATION_ERROR = "ERR_CONFIG_001"


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.INVALID_INPUT: "Invalid request data",
    ErrorCode.INVALID_ACTION: "Invalid action",
    ErrorCode.PAYMENT_NOT_CONFIRMED: "Payment not confirmed",
    ErrorCode.ORDER_MISMATCH: "Order mismatch",
    ErrorCode.TOTAL_MISMATCH: "Total mismatch",
    ErrorCode.INVALID_WEBHOOK_SIGNATURE: "Invalid webhook signature",
    ErrorCode.STRIPE_API_ERROR: "Payment provider request failed",
    ErrorCode.SESSION_VERIFICATION_FAILED: "Failed to verify session",
    ErrorCode.EMAIL_DELIVERY_FAILED: "Failed to send order emails",
    ErrorCode.CONFIGURATION_ERROR: "Server is not configured for this operation",
}


class ErrorResponse(BaseModel):
    """JSON body returned for every handled failure."""

    model_config = ConfigDict(strict=True)

    success: bool = False
    error_code: ErrorCode
    message: str
    details: Optional[dict[str, Any]] = None

    @classmethod
    def from_code(
        cls,
        code: ErrorCode,
        details: Optional[dict[str, Any]] = None,
    ) -> "ErrorResponse":
        """Create an ErrorResponse from an error code.

        Args:
            code: The error code
            details: Optional additional context about the error

        Returns:
            An ErrorResponse with the standard message for the code.
        """
        return cls(error_code=code, message=ERROR_MESSAGES[code], details=details)


class OrderingError(Exception):
    """Exception raised by ordering operations.

    Caught at the HTTP boundary and converted to an ErrorResponse.
    """

    def __init__(
        self,
        code: ErrorCode,
        details: Optional[dict[str, Any]] = None,
    ):
        self.code = code
        self.message = ERROR_MESSAGES[code]
        self.details = details
        super().__init__(self.message)

    def to_response(self) -> ErrorResponse:
        """Convert this exception to the JSON error body."""
        return ErrorResponse.from_code(self.code, self.details)
