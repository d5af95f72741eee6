"""API-specific request/response models.

Domain models (Booking, Unit, Promo, ...) live in booking_core.models and
are reused in responses.

Modules:
- common: Request base classes and validation error formatting
- booking: Booking, cancellation and review bodies
- calendar: Host calendar bodies
"""

__all__: list[str] = []
