"""Payment record linked 1:1 to a booking."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from .enums import PaymentStatus


class GatewayFee(BaseModel):
    """Fee withheld by the payment gateway on capture."""

    name: str
    price: Decimal


class Payment(BaseModel):
    """A guest payment for a booking.

    Owned by the billing collaborator; the booking engine reads it and
    updates status, fees and amounts on confirm and cancel.
    """

    id: str = Field(..., description="Numeric payment ID")
    booking_id: str = Field(..., description="Reference to Booking")
    payout_amount: Decimal = Field(
        ..., description="Amount owed to the host after fees"
    )
    currency: str = "USD"
    status: PaymentStatus = PaymentStatus.PENDING
    payment_intent_id: str | None = Field(
        default=None, description="Gateway PaymentIntent ID (pi_xxx)"
    )
    stripe_fee: list[GatewayFee] = Field(default_factory=list)
    amount_after_cancelling: Decimal | None = Field(
        default=None, description="Host payout kept after a cancellation"
    )
    refund_amount: Decimal | None = None
    use_balance: bool = False
    balance: Decimal = Field(
        default=Decimal(0), description="Account balance spent on this booking"
    )
    created_at: str = Field(default_factory=lambda: datetime.now().isoformat())
    updated_at: str | None = None
