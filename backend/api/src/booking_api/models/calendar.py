"""API models for host calendar endpoints."""

from decimal import Decimal

from pydantic import BaseModel, Field

from booking_api.models.common import TokenRequest
from booking_core.models import Inventory


class CalendarRequest(TokenRequest):
    """Dates of a listing's unit, or of one of its room types."""

    listing_id: str
    dates: list[str] = Field(..., examples=[["2025-07-15", "2025-07-16"]])
    unit_id: str | None = Field(default=None, description="Room type ID (multiunit listings)")


class BlockDatesRequest(CalendarRequest):
    count: int = Field(default=0, ge=0, description="Rooms per date (room types only)")


class AdjustPricesRequest(CalendarRequest):
    rate: Decimal = Field(..., ge=0)
    currency: str = Field(..., min_length=3, max_length=3)


class InventoryResponse(BaseModel):
    message: str
    inventory: Inventory
