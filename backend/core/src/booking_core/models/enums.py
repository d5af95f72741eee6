"""Enumeration types for rstays data models."""

from enum import Enum


class InventoryKind(str, Enum):
    """Form of a listing's inventory."""

    UNIT = "unit"
    MULTIUNIT = "multiunit"


class ListingStatus(str, Enum):
    """Publication status of a listing."""

    ACTIVE = "active"
    DRAFT = "draft"
    BLOCKED = "blocked"


class BookingStatus(str, Enum):
    """Status of a booking."""

    PENDING = "pending"
    PAID = "paid"
    CONFIRMED = "confirmed"
    DECLINED = "declined"
    CANCELLED = "cancelled"


# Allowed booking status transitions; cancelled and declined are terminal.
BOOKING_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.PAID, BookingStatus.CANCELLED}),
    BookingStatus.PAID: frozenset(
        {BookingStatus.CONFIRMED, BookingStatus.DECLINED, BookingStatus.CANCELLED}
    ),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED}),
    BookingStatus.DECLINED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    """Check whether a booking may move from ``current`` to ``target``."""
    return target in BOOKING_TRANSITIONS[current]


class PaymentStatus(str, Enum):
    """Status of a payment record."""

    PENDING = "pending"
    AUTHORIZED = "authorized"
    CAPTURED = "captured"
    DECLINED = "declined"
    CANCELLED = "cancelled"


class FeeType(str, Enum):
    """How a fee or tax amount is interpreted."""

    FIXED = "fixed"
    PERCENTAGE = "percentage"


class AdjustmentType(str, Enum):
    """Direction of a discount rule."""

    REDUCE = "reduce"
    INCREASE = "increase"


class ReviewDecision(str, Enum):
    """Host decision on a paid booking."""

    CONFIRMED = "confirmed"
    DECLINED = "declined"


class SessionMode(str, Enum):
    """Access mode of a client session."""

    GUEST = "guest"
    HOST = "host"
    UNREGISTERED = "unregistered"
    PUBLIC = "public"
