"""Pydantic models for rstays booking entities."""

from .booking import (
    Booking,
    BookingRequest,
    BookingUnit,
    CalendarEvent,
    Guests,
    Informal,
    PaymentInfo,
    ServiceSelection,
    UnitSelection,
)
from .enums import (
    AdjustmentType,
    BookingStatus,
    FeeType,
    InventoryKind,
    ListingStatus,
    PaymentStatus,
    ReviewDecision,
    SessionMode,
    can_transition,
)
from .errors import BookingError, ErrorCategory, ErrorCode, ErrorResponse
from .inventory import (
    BLOCKED_BOOKING_ID,
    BookingRequirements,
    CancellationPolicy,
    DatePrice,
    Fee,
    Inventory,
    LedgerEntry,
    PoolLedgerEntry,
    Prices,
    PricingRules,
    RoomClaim,
    RoomType,
    Unit,
)
from .listing import Listing, Promo, RatePlan
from .payment import GatewayFee, Payment
from .pricing import NightRate, PriceLine, PriceQuote, UnitQuote
from .session import Session

__all__ = [
    # Enums
    "AdjustmentType",
    "BookingStatus",
    "FeeType",
    "InventoryKind",
    "ListingStatus",
    "PaymentStatus",
    "ReviewDecision",
    "SessionMode",
    "can_transition",
    # Errors
    "BookingError",
    "ErrorCategory",
    "ErrorCode",
    "ErrorResponse",
    # Inventory
    "BLOCKED_BOOKING_ID",
    "BookingRequirements",
    "CancellationPolicy",
    "DatePrice",
    "Fee",
    "Inventory",
    "LedgerEntry",
    "PoolLedgerEntry",
    "Prices",
    "PricingRules",
    "RoomClaim",
    "RoomType",
    "Unit",
    # Listing
    "Listing",
    "Promo",
    "RatePlan",
    # Booking
    "Booking",
    "BookingRequest",
    "BookingUnit",
    "CalendarEvent",
    "Guests",
    "Informal",
    "PaymentInfo",
    "ServiceSelection",
    "UnitSelection",
    # Payment
    "GatewayFee",
    "Payment",
    # Pricing
    "NightRate",
    "PriceLine",
    "PriceQuote",
    "UnitQuote",
    # Session
    "Session",
]
