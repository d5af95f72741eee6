"""Refund policy service for calculating refund amounts on cancellation.

Each unit carries a single-tier policy ``{days, percent}``:
- Booking not yet confirmed by the host: full refund
- Cancelled ``days`` or more before check-in: refund ``1 - percent`` of the payout
- Cancelled later than that: no refund

A booking spanning several units uses the most restrictive policy among
them. Amounts are rounded half away from zero to whole currency units.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import TypedDict

from ..config import BookingSettings, get_settings
from ..models import CancellationPolicy


class RefundCalculation(TypedDict):
    """Result of refund policy calculation."""

    refund_fraction: Decimal  # 0..1, sent to the payment gateway
    refund_amount: Decimal
    amount_after_cancelling: Decimal  # payout the host keeps
    policy_tier: str  # "full", "partial", or "none"
    days_until_check_in: float
    description: str


class RefundPolicyService:
    """Service for calculating refunds from a unit's cancellation policy."""

    def __init__(self, settings: BookingSettings | None = None) -> None:
        self.settings = settings or get_settings()

    @property
    def default_policy(self) -> CancellationPolicy:
        return CancellationPolicy(
            days=self.settings.default_cancellation_days,
            percent=self.settings.default_cancellation_percent,
        )

    def most_restrictive(
        self, policies: list[CancellationPolicy | None]
    ) -> CancellationPolicy:
        """Merge per-unit policies into the one applied to the whole booking.

        Takes the largest day threshold and the smallest non-refundable
        fraction. Units without a policy are ignored; with none at all the
        default policy applies.

        Args:
            policies: Policy of each booked unit, None where a unit has none

        Returns:
            Merged CancellationPolicy
        """
        present = [p for p in policies if p is not None]
        if not present:
            return self.default_policy

        return CancellationPolicy(
            days=max(p.days for p in present),
            percent=min(p.percent for p in present),
        )

    def evaluate(
        self,
        payout_amount: Decimal,
        days_until_check_in: float,
        policy: CancellationPolicy | None = None,
        confirmed: bool = True,
    ) -> RefundCalculation:
        """Calculate the refund owed to a guest who cancels.

        Args:
            payout_amount: Amount paid for the booking
            days_until_check_in: Days left before check-in, negative once passed
            policy: Cancellation policy; defaults to days=7, percent=1
            confirmed: Whether the host already confirmed the booking

        Returns:
            RefundCalculation with refund fraction, amounts and description
        """
        policy = policy or self.default_policy
        payout_amount = Decimal(payout_amount)

        if not confirmed:
            fraction = Decimal(1)
            tier = "full"
            description = "Full refund: booking was not confirmed by the host"
        elif days_until_check_in >= policy.days:
            fraction = Decimal(1) - policy.percent
            tier = "full" if fraction == 1 else "partial" if fraction > 0 else "none"
            description = (
                f"Refund of {fraction * 100:.0f}%: cancelled "
                f"{days_until_check_in:.0f} days before check-in "
                f"(policy: {policy.days}+ days)"
            )
        else:
            fraction = Decimal(0)
            tier = "none"
            if days_until_check_in < 0:
                description = "No refund: cancelled after check-in date"
            else:
                description = (
                    f"No refund: cancelled {days_until_check_in:.0f} days before "
                    f"check-in (policy: less than {policy.days} days)"
                )

        refund_amount = (payout_amount * fraction).quantize(
            Decimal(1), rounding=ROUND_HALF_UP
        )
        refund_amount = min(max(refund_amount, Decimal(0)), max(payout_amount, Decimal(0)))

        return RefundCalculation(
            refund_fraction=fraction,
            refund_amount=refund_amount,
            amount_after_cancelling=payout_amount - refund_amount,
            policy_tier=tier,
            days_until_check_in=days_until_check_in,
            description=description,
        )

    def get_policy_description(self, policy: CancellationPolicy | None = None) -> str:
        """Get human-readable description of a cancellation policy."""
        policy = policy or self.default_policy
        refundable = (Decimal(1) - policy.percent) * 100
        return (
            "Cancellation Policy:\n"
            f"• Before confirmation: Full refund\n"
            f"• {policy.days}+ days before check-in: {refundable:.0f}% refund\n"
            f"• Less than {policy.days} days before check-in: No refund"
        )
