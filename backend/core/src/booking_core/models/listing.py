"""Listing, rate plan and promo code models."""

from decimal import Decimal

from pydantic import BaseModel, Field

from .enums import InventoryKind, ListingStatus
from .inventory import Fee


class Listing(BaseModel):
    """A marketplace listing.

    A ``unit`` listing points at exactly one Unit document; a ``multiunit``
    listing owns one or more room types.
    """

    id: str = Field(..., description="Listing ID")
    owner_uid: str = Field(..., description="Host user ID")
    managers: list[str] = Field(default_factory=list, description="Co-host user IDs")
    status: ListingStatus = ListingStatus.DRAFT
    form: InventoryKind = InventoryKind.UNIT
    unit: str | None = Field(default=None, description="Unit ID for unit listings")
    multiunit: list[str] = Field(
        default_factory=list, description="Room type IDs for multiunit listings"
    )
    title: str = ""

    def can_manage(self, uid: str) -> bool:
        """Check whether ``uid`` is the owner or a manager of the listing."""
        return uid == self.owner_uid or uid in self.managers


class RatePlanPrices(BaseModel):
    rate: Decimal = Field(..., ge=0)
    other_fee: list[Fee] = Field(default_factory=list)


class RatePlan(BaseModel):
    """Named alternate pricing a guest may pick instead of the base price."""

    id: str
    name: str
    prices: RatePlanPrices


class Promo(BaseModel):
    """Global promo code; ``discount`` is a percentage (20 = 20%)."""

    code: str
    discount: Decimal = Field(..., ge=0, le=100)
