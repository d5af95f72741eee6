"""Booking models: requests, the persisted booking record and calendar events."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import BookingStatus, InventoryKind
from .pricing import PriceLine


class Guests(BaseModel):
    """Guest counts of a booking."""

    adults: int = Field(default=1, ge=0)
    children: int = Field(default=0, ge=0)
    infants: int = Field(default=0, ge=0)

    @property
    def total(self) -> int:
        return self.adults + self.children + self.infants


class ServiceSelection(BaseModel):
    """Optional service picked by the guest; ``quantity`` counts for reusable fees."""

    id: str
    quantity: int = Field(default=1, ge=1)


class UnitSelection(BaseModel):
    """One unit or room type chosen for a booking."""

    id: str | None = Field(
        default=None, description="Unit/room type ID; optional for unit listings"
    )
    quantity: int = Field(default=1, description="Rooms requested (pools only)")
    services: list[ServiceSelection] = Field(default_factory=list)
    rate_plan_id: str = "basic"


class BookingRequest(BaseModel):
    """Input of a booking create or price quote."""

    listing_id: str
    units: list[UnitSelection] = Field(default_factory=list)
    check_in: str
    check_out: str
    guests: Guests = Field(default_factory=Guests)
    promo: str | None = None
    comment: str | None = None
    with_pets: bool = False
    name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    country: str | None = None


class BookingUnit(BaseModel):
    """Per-unit price breakdown stored on a booking."""

    id: str
    quantity: int = 1
    total_price: Decimal = Decimal(0)
    numbers: list[int] = Field(
        default_factory=list, description="Allocated room numbers (pools only)"
    )
    service_prices: list[PriceLine] = Field(default_factory=list)


class Informal(BaseModel):
    """Check-in/out timestamps combining the date and the unit's time of day."""

    check_in: str
    check_out: str


class PaymentInfo(BaseModel):
    payment_intent_id: str | None = None


class Booking(BaseModel):
    """Reservation record. Never deleted; cancellation is a status change."""

    id: str = Field(..., description="Numeric booking ID")
    type: InventoryKind
    listing_id: str
    listing_owner: str
    user: str = Field(..., description="Guest user ID")
    title: str = ""
    units: list[BookingUnit] = Field(default_factory=list)
    check_in: str
    check_out: str
    informal: Informal
    guests: Guests
    discounts: list[PriceLine] = Field(default_factory=list)
    services: list[PriceLine] = Field(default_factory=list)
    taxes: list[PriceLine] = Field(default_factory=list)
    total_price: Decimal
    currency: str
    status: BookingStatus = BookingStatus.PENDING
    promo: str | None = None
    comment: str | None = None
    with_pets: bool = False
    name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    country: str | None = None
    read: bool = False
    payment_info: PaymentInfo | None = None
    created_at: str = Field(default_factory=lambda: datetime.now().isoformat())
    updated_at: str | None = None

    @property
    def unit_ids(self) -> list[str]:
        return [u.id for u in self.units]


class CalendarEvent(BaseModel):
    """VEVENT appended to the guest's personal calendar."""

    model_config = ConfigDict(populate_by_name=True)

    uid: str = Field(..., alias="UID")
    dtstamp: str = Field(..., alias="DTSTAMP")
    dtstart: str = Field(..., alias="DTSTART")
    tzid: str | None = Field(default=None, alias="TZID")
    summary: str = Field(..., alias="SUMMARY")
    description: str = Field(default="", alias="DESCRIPTION")

    @field_validator("dtstart", "dtstamp")
    @classmethod
    def _basic_format(cls, value: str) -> str:
        if "-" in value or ":" in value:
            raise ValueError("calendar timestamps use the basic YYYYMMDDTHHMMSS format")
        return value
