"""Booking engine settings read from the environment."""

import os
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache


@dataclass(frozen=True)
class BookingSettings:
    """Tunables of the booking engine.

    Attributes:
        environment: Deployment environment (dev/prod)
        last_minute_window_days: A stay starting within this many days gets
            the unit's last-minute discount
        default_cancellation_days: Refund threshold used when a unit has no policy
        default_cancellation_percent: Non-refundable fraction used when a unit
            has no policy
        booking_source: ``source`` tag written on ledger entries
    """

    environment: str = "dev"
    last_minute_window_days: int = 14
    default_cancellation_days: int = 7
    default_cancellation_percent: Decimal = Decimal(1)
    booking_source: str = "rstays"

    @classmethod
    def from_env(cls) -> "BookingSettings":
        """Build settings from environment variables."""
        return cls(
            environment=os.getenv("ENVIRONMENT", "dev"),
            last_minute_window_days=int(os.getenv("LAST_MINUTE_WINDOW_DAYS", "14")),
            default_cancellation_days=int(os.getenv("DEFAULT_CANCELLATION_DAYS", "7")),
            default_cancellation_percent=Decimal(
                os.getenv("DEFAULT_CANCELLATION_PERCENT", "1")
            ),
            booking_source=os.getenv("BOOKING_SOURCE", "rstays"),
        )


@lru_cache
def get_settings() -> BookingSettings:
    """Get cached settings for the current process."""
    return BookingSettings.from_env()
