"""Price breakdown models produced by the pricing engine.

All amounts are in the booking currency. Line items carry the already-rounded
integer amount; ``UnitQuote.total_price`` and ``PriceQuote.total_price`` are
rounded only once, at the end of aggregation.
"""

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from .enums import FeeType

NightSource = Literal["override", "weekend", "holiday", "base"]


class NightRate(BaseModel):
    """Rate charged for a single night and where it came from."""

    date: str
    rate: Decimal
    source: NightSource = "base"


class PriceLine(BaseModel):
    """Itemized discount, service fee or tax.

    Discount lines are signed: negative reduces the price, positive increases.
    """

    name: str
    price: Decimal
    id: str | None = None
    type: FeeType | None = None
    percentage: Decimal | None = None
    quantity: int | None = None
    unit_id: str | None = None
    label: str | None = Field(
        default=None, description="Localized display label, set on read"
    )


class UnitQuote(BaseModel):
    """Price of one unit or room-type selection across the stay."""

    unit_id: str
    quantity: int = 1
    nights: int
    rates_total: Decimal = Field(..., description="Night rates before discounts")
    discount_total: Decimal = Field(
        default=Decimal(0), description="Amount removed by the discount stack"
    )
    total_price: Decimal
    night_rates: list[NightRate] = Field(default_factory=list)
    discounts: list[PriceLine] = Field(default_factory=list)
    services: list[PriceLine] = Field(default_factory=list)
    taxes: list[PriceLine] = Field(default_factory=list)


class PriceQuote(BaseModel):
    """Aggregate price of a booking."""

    currency: str
    total_price: Decimal
    units: list[UnitQuote] = Field(default_factory=list)
    discounts: list[PriceLine] = Field(default_factory=list)
    services: list[PriceLine] = Field(default_factory=list)
    taxes: list[PriceLine] = Field(default_factory=list)
    promo: PriceLine | None = None
