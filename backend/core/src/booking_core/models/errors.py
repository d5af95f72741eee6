"""Standard error codes for booking operations.

Every failure surfaces as a message plus a numeric status code. Codes are
grouped by category; the category decides the HTTP status.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorCategory(str, Enum):
    """Failure categories and their HTTP status codes."""

    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    VALIDATION = "validation"
    INVENTORY_CONFLICT = "inventory_conflict"
    AUTH = "auth"
    PAYMENT = "payment"
    INTERNAL = "internal"


CATEGORY_STATUS: dict[ErrorCategory, int] = {
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.FORBIDDEN: 403,
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.INVENTORY_CONFLICT: 400,
    ErrorCategory.AUTH: 401,
    ErrorCategory.PAYMENT: 402,
    ErrorCategory.INTERNAL: 500,
}


class ErrorCode(str, Enum):
    """Booking error codes."""

    # Not found (ERR_NF_*)
    LISTING_NOT_FOUND = "ERR_NF_001"
    UNIT_NOT_FOUND = "ERR_NF_002"
    BOOKING_NOT_FOUND = "ERR_NF_003"
    PROMO_NOT_FOUND = "ERR_NF_004"
    PAYMENT_NOT_FOUND = "ERR_NF_005"

    # Forbidden (ERR_FB_*)
    SELF_BOOKING = "ERR_FB_001"
    NOT_LISTING_OWNER = "ERR_FB_002"
    NOT_BOOKING_GUEST = "ERR_FB_003"

    # Validation (ERR_VAL_*)
    INVALID_REQUEST = "ERR_VAL_001"
    INVALID_DATE = "ERR_VAL_002"
    CHECK_IN_IN_PAST = "ERR_VAL_003"
    CHECK_OUT_BEFORE_CHECK_IN = "ERR_VAL_004"
    NIGHTS_OUT_OF_RANGE = "ERR_VAL_005"
    ADULT_REQUIRED = "ERR_VAL_006"
    MAX_GUESTS_EXCEEDED = "ERR_VAL_007"
    INVALID_QUANTITY = "ERR_VAL_008"
    NO_UNITS_SELECTED = "ERR_VAL_009"
    UNIT_NOT_IN_LISTING = "ERR_VAL_010"
    ALREADY_CANCELLED = "ERR_VAL_011"
    BOOKING_FINISHED = "ERR_VAL_012"
    INVALID_STATUS_TRANSITION = "ERR_VAL_013"

    # Inventory conflicts (ERR_INV_*)
    INSUFFICIENT_INVENTORY = "ERR_INV_001"
    UNIT_UNAVAILABLE = "ERR_INV_002"
    INVENTORY_CONFLICT = "ERR_INV_003"

    # Session (ERR_AUTH_*)
    AUTH_REQUIRED = "ERR_AUTH_001"

    # Payment gateway (ERR_PAY_*)
    PAYMENT_FAILED = "ERR_PAY_001"

    # Internal (ERR_INT_*)
    INTERNAL = "ERR_INT_001"
    CURRENCY_RATE_MISSING = "ERR_INT_002"


ERROR_CATEGORIES: dict[ErrorCode, ErrorCategory] = {
    ErrorCode.LISTING_NOT_FOUND: ErrorCategory.NOT_FOUND,
    ErrorCode.UNIT_NOT_FOUND: ErrorCategory.NOT_FOUND,
    ErrorCode.BOOKING_NOT_FOUND: ErrorCategory.NOT_FOUND,
    ErrorCode.PROMO_NOT_FOUND: ErrorCategory.NOT_FOUND,
    ErrorCode.PAYMENT_NOT_FOUND: ErrorCategory.NOT_FOUND,
    ErrorCode.SELF_BOOKING: ErrorCategory.FORBIDDEN,
    ErrorCode.NOT_LISTING_OWNER: ErrorCategory.FORBIDDEN,
    ErrorCode.NOT_BOOKING_GUEST: ErrorCategory.FORBIDDEN,
    ErrorCode.INVALID_REQUEST: ErrorCategory.VALIDATION,
    ErrorCode.INVALID_DATE: ErrorCategory.VALIDATION,
    ErrorCode.CHECK_IN_IN_PAST: ErrorCategory.VALIDATION,
    ErrorCode.CHECK_OUT_BEFORE_CHECK_IN: ErrorCategory.VALIDATION,
    ErrorCode.NIGHTS_OUT_OF_RANGE: ErrorCategory.VALIDATION,
    ErrorCode.ADULT_REQUIRED: ErrorCategory.VALIDATION,
    ErrorCode.MAX_GUESTS_EXCEEDED: ErrorCategory.VALIDATION,
    ErrorCode.INVALID_QUANTITY: ErrorCategory.VALIDATION,
    ErrorCode.NO_UNITS_SELECTED: ErrorCategory.VALIDATION,
    ErrorCode.UNIT_NOT_IN_LISTING: ErrorCategory.VALIDATION,
    ErrorCode.ALREADY_CANCELLED: ErrorCategory.VALIDATION,
    ErrorCode.BOOKING_FINISHED: ErrorCategory.VALIDATION,
    ErrorCode.INVALID_STATUS_TRANSITION: ErrorCategory.VALIDATION,
    ErrorCode.INSUFFICIENT_INVENTORY: ErrorCategory.INVENTORY_CONFLICT,
    ErrorCode.UNIT_UNAVAILABLE: ErrorCategory.INVENTORY_CONFLICT,
    ErrorCode.INVENTORY_CONFLICT: ErrorCategory.INVENTORY_CONFLICT,
    ErrorCode.AUTH_REQUIRED: ErrorCategory.AUTH,
    ErrorCode.PAYMENT_FAILED: ErrorCategory.PAYMENT,
    ErrorCode.INTERNAL: ErrorCategory.INTERNAL,
    ErrorCode.CURRENCY_RATE_MISSING: ErrorCategory.INTERNAL,
}

# Human-readable error messages
ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.LISTING_NOT_FOUND: "Listing not found",
    ErrorCode.UNIT_NOT_FOUND: "Unit not found",
    ErrorCode.BOOKING_NOT_FOUND: "Booking not found",
    ErrorCode.PROMO_NOT_FOUND: "No such code",
    ErrorCode.PAYMENT_NOT_FOUND: "Payment not found",
    ErrorCode.SELF_BOOKING: "You cannot book your own listing",
    ErrorCode.NOT_LISTING_OWNER: "You are not the owner of this listing",
    ErrorCode.NOT_BOOKING_GUEST: "You are not the guest of this booking",
    ErrorCode.INVALID_REQUEST: "Invalid request",
    ErrorCode.INVALID_DATE: "Invalid date",
    ErrorCode.CHECK_IN_IN_PAST: "checkIn must be in the future",
    ErrorCode.CHECK_OUT_BEFORE_CHECK_IN: "checkOut must be after checkIn",
    ErrorCode.NIGHTS_OUT_OF_RANGE: "max or min nights not met",
    ErrorCode.ADULT_REQUIRED: "One adult is required",
    ErrorCode.MAX_GUESTS_EXCEEDED: "Guests are more than allowed",
    ErrorCode.INVALID_QUANTITY: "Quantity must be greater than 0",
    ErrorCode.NO_UNITS_SELECTED: "No units selected",
    ErrorCode.UNIT_NOT_IN_LISTING: "Unit is not part of this listing",
    ErrorCode.ALREADY_CANCELLED: "Booking already cancelled",
    ErrorCode.BOOKING_FINISHED: "Booking is already finished",
    ErrorCode.INVALID_STATUS_TRANSITION: "Booking status cannot be changed",
    ErrorCode.INSUFFICIENT_INVENTORY: "Not enough units available",
    ErrorCode.UNIT_UNAVAILABLE: "Unit is not available",
    ErrorCode.INVENTORY_CONFLICT: "Inventory changed while booking, please try again",
    ErrorCode.AUTH_REQUIRED: "Session not found",
    ErrorCode.PAYMENT_FAILED: "Payment processing failed",
    ErrorCode.INTERNAL: "Internal error",
    ErrorCode.CURRENCY_RATE_MISSING: "Currency rate not available",
}


def get_status_for_error(code: ErrorCode) -> int:
    """Get the HTTP status code for an ErrorCode."""
    return CATEGORY_STATUS[ERROR_CATEGORIES[code]]


class ErrorResponse(BaseModel):
    """Same-shape JSON body returned for every failure."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = False
    error_code: str
    message: str
    status_code: int = Field(..., alias="statusCode")
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
            An ErrorResponse with the message and status for the code.
        """
        return cls(
            error_code=code.value,
            message=ERROR_MESSAGES[code],
            status_code=get_status_for_error(code),
            details=details,
        )


class BookingError(Exception):
    """Exception raised by booking operations.

    Converted to an ErrorResponse at the API boundary.
    """

    def __init__(
        self,
        code: ErrorCode,
        details: Optional[dict[str, Any]] = None,
    ):
        self.code = code
        self.message = ERROR_MESSAGES[code]
        self.status_code = get_status_for_error(code)
        self.details = details
        super().__init__(self.message)

    @property
    def category(self) -> ErrorCategory:
        return ERROR_CATEGORIES[self.code]

    def to_response(self) -> ErrorResponse:
        """Convert this exception to an ErrorResponse."""
        return ErrorResponse.from_code(self.code, self.details)
