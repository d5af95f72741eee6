"""API models for booking endpoints."""

from typing import Any

from pydantic import BaseModel, Field

from booking_api.models.common import ApiModel, TokenRequest
from booking_core.models import (
    Booking,
    BookingRequest,
    Guests,
    PriceQuote,
    ReviewDecision,
    ServiceSelection,
    UnitSelection,
)


class ServiceBody(ApiModel):
    id: str
    quantity: int = Field(default=1, ge=1)


class UnitBody(ApiModel):
    """Unit or room type picked by the guest."""

    id: str | None = Field(default=None, description="Omit for single-unit listings")
    quantity: int = Field(default=1, description="Rooms requested (room types only)")
    services: list[ServiceBody] = Field(default_factory=list)
    rate_plan_id: str = "basic"


class CreateBookingRequest(TokenRequest):
    """Request to book (or quote) a stay."""

    listing_id: str
    units: list[UnitBody] = Field(default_factory=list)
    check_in: str = Field(..., examples=["2025-07-15"])
    check_out: str = Field(..., examples=["2025-07-22"])
    guests: Guests = Field(default_factory=Guests)
    promo: str | None = None
    comment: str | None = Field(default=None, max_length=500)
    with_pets: bool = False
    name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    country: str | None = None

    def to_domain(self) -> BookingRequest:
        return BookingRequest(
            listing_id=self.listing_id,
            units=[
                UnitSelection(
                    id=unit.id,
                    quantity=unit.quantity,
                    services=[
                        ServiceSelection(id=s.id, quantity=s.quantity) for s in unit.services
                    ],
                    rate_plan_id=unit.rate_plan_id,
                )
                for unit in self.units
            ],
            check_in=self.check_in,
            check_out=self.check_out,
            guests=self.guests,
            promo=self.promo or None,
            comment=self.comment,
            with_pets=self.with_pets,
            name=self.name,
            last_name=self.last_name,
            email=self.email,
            phone=self.phone,
            country=self.country,
        )


class BookingIdRequest(TokenRequest):
    booking_id: str


class ListingIdRequest(TokenRequest):
    listing_id: str


class UpdateGuestsRequest(BookingIdRequest):
    guests: Guests


class ReviewStatusRequest(BookingIdRequest):
    """Host decision on a paid booking."""

    status: ReviewDecision


class PromoCheckRequest(TokenRequest):
    code: str = Field(..., min_length=1)


class BookingResponse(BaseModel):
    message: str
    booking: Booking


class BookingListResponse(BaseModel):
    bookings: list[Booking]


class QuoteResponse(BaseModel):
    quote: PriceQuote


class CancelResponse(BaseModel):
    """Cancellation outcome; ``refund`` is null when nothing was paid."""

    message: str
    booking: Booking
    refund: dict[str, Any] | None = None


class ReviewResponse(BaseModel):
    message: str
    booking: Booking
    intent: dict[str, Any]
