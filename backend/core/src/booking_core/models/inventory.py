"""Inventory models: single units, pooled room types and their ledgers.

A unit's ``not_available`` ledger is sparse: a date only has an entry when it
is booked/blocked or carries a custom price. Room types keep one entry per
date listing the room-number claims made for that date.
"""

from decimal import Decimal
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from .enums import AdjustmentType, FeeType

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

# Booking id used for manual host blocks.
BLOCKED_BOOKING_ID = "Blocked"


class DatePrice(BaseModel):
    """Custom price for a single date.

    Either a fixed ``rate`` in ``currency`` or a ``percentage`` of the
    base rate. An override with neither falls back to the base rate.
    """

    rate: Decimal | None = None
    currency: str | None = None
    percentage: Decimal | None = None


class LedgerEntry(BaseModel):
    """Ledger entry of a single unit for one date."""

    date: str = Field(..., pattern=DATE_PATTERN)
    booking_id: str | None = None
    source: str | None = None
    price: DatePrice | None = None
    notes: str | None = None

    @property
    def is_booked(self) -> bool:
        return self.booking_id is not None

    @property
    def is_empty(self) -> bool:
        return self.booking_id is None and self.price is None and not self.notes


class RoomClaim(BaseModel):
    """Room numbers claimed by one booking (or block) on one date."""

    numbers: list[int] = Field(default_factory=list)
    booking_id: str
    source: str | None = None


class PoolLedgerEntry(BaseModel):
    """Ledger entry of a room type for one date."""

    date: str = Field(..., pattern=DATE_PATTERN)
    units: list[RoomClaim] = Field(default_factory=list)
    price: DatePrice | None = None
    notes: str | None = None

    @property
    def claimed_numbers(self) -> list[int]:
        return [n for claim in self.units for n in claim.numbers]

    @property
    def is_empty(self) -> bool:
        return not self.units and self.price is None and not self.notes

    @field_validator("units")
    @classmethod
    def _unique_numbers(cls, units: list[RoomClaim]) -> list[RoomClaim]:
        numbers = [n for claim in units for n in claim.numbers]
        if len(numbers) != len(set(numbers)):
            raise ValueError("room number claimed twice on the same date")
        return units


class Fee(BaseModel):
    """Extra service fee or tax."""

    id: str
    name: str
    price: Decimal = Decimal(0)
    type: FeeType = FeeType.FIXED
    reuse: bool = False


class HolidayRule(BaseModel):
    """Price adjustment applied on a named holiday."""

    name: str
    discount: Decimal
    type: AdjustmentType = AdjustmentType.INCREASE


class DaysDiscount(BaseModel):
    """Length-of-stay deal, applies from ``days`` nights upward."""

    days: int = Field(..., ge=1)
    discount: Decimal
    type: AdjustmentType = AdjustmentType.REDUCE


class CountryDiscount(BaseModel):
    country: str
    discount: Decimal
    type: AdjustmentType = AdjustmentType.REDUCE


class GuestsDiscount(BaseModel):
    guests: int
    discount: Decimal
    type: AdjustmentType = AdjustmentType.REDUCE


class PricingRules(BaseModel):
    """Deal and discount rules of a unit. Fractions, e.g. 0.1 for 10%."""

    weekends_deal: Decimal | None = None
    holidays: list[HolidayRule] = Field(default_factory=list)
    base_discount: Decimal | None = None
    last_minute_discount: Decimal | None = None
    days_discounts: list[DaysDiscount] = Field(default_factory=list)
    countries_discounts: list[CountryDiscount] = Field(default_factory=list)
    guests_discounts: list[GuestsDiscount] = Field(default_factory=list)


class Prices(BaseModel):
    rate: Decimal = Field(..., ge=0)
    currency: str = "USD"
    other_fee: list[Fee] = Field(default_factory=list)
    taxes: list[Fee] = Field(default_factory=list)
    rules: PricingRules = Field(default_factory=PricingRules)


class CancellationPolicy(BaseModel):
    """Refund threshold in days and the non-refundable fraction."""

    days: int = Field(default=7, ge=0)
    percent: Decimal = Field(default=Decimal(1), ge=0, le=1)


class BookingRequirements(BaseModel):
    min_nights: int = Field(default=1, ge=1)
    max_nights: int = Field(default=365, ge=1)


class InventoryBase(BaseModel):
    """Fields shared by single units and room types."""

    id: str
    listing_id: str | None = None
    title: str | None = None
    guests: int = Field(default=1, ge=0)
    check_in_time: str = Field(default="14:00", pattern=TIME_PATTERN)
    check_out_time: str = Field(default="11:00", pattern=TIME_PATTERN)
    booking_requirements: BookingRequirements = Field(default_factory=BookingRequirements)
    prices: Prices
    cancellation: CancellationPolicy | None = None
    rate_plans: list[str] = Field(default_factory=list)
    version: int = 0


class Unit(InventoryBase):
    """Single rentable entity tied 1:1 to a listing."""

    kind: Literal["unit"] = "unit"
    not_available: list[LedgerEntry] = Field(default_factory=list)

    @field_validator("not_available")
    @classmethod
    def _one_entry_per_date(cls, entries: list[LedgerEntry]) -> list[LedgerEntry]:
        dates = [e.date for e in entries]
        if len(dates) != len(set(dates)):
            raise ValueError("duplicate ledger date")
        return entries

    def entry_for(self, day: str) -> LedgerEntry | None:
        return next((e for e in self.not_available if e.date == day), None)


class RoomType(InventoryBase):
    """Pool of identical numbered rooms within a multiunit listing."""

    kind: Literal["multiunit"] = "multiunit"
    units: list[int] = Field(default_factory=list)
    not_available: list[PoolLedgerEntry] = Field(default_factory=list)

    @field_validator("not_available")
    @classmethod
    def _one_entry_per_date(
        cls, entries: list[PoolLedgerEntry]
    ) -> list[PoolLedgerEntry]:
        dates = [e.date for e in entries]
        if len(dates) != len(set(dates)):
            raise ValueError("duplicate ledger date")
        return entries

    @model_validator(mode="after")
    def _claims_within_pool(self) -> "RoomType":
        pool = set(self.units)
        for entry in self.not_available:
            unknown = set(entry.claimed_numbers) - pool
            if unknown:
                raise ValueError(
                    f"room numbers {sorted(unknown)} on {entry.date} are not in the pool"
                )
        return self

    @property
    def capacity(self) -> int:
        return len(self.units)

    def entry_for(self, day: str) -> PoolLedgerEntry | None:
        return next((e for e in self.not_available if e.date == day), None)


Inventory = Annotated[Union[Unit, RoomType], Field(discriminator="kind")]
