"""FastAPI dependency injection providers for booking services.

Factory functions use @lru_cache so each service is built once per process.

Service Dependency Graph:
    DynamoDBService (singleton via get_dynamodb_service)
        ├── CurrencyRateService
        │       └── PricingService (+ HolidayService)
        │               └── BookingService (+ RefundPolicyService, LocalizationService)
        └── SessionService

Testing:
    Use reset_services() to clear cached instances between tests.
"""

from functools import lru_cache

from fastapi import WebSocket

from booking_core.config import get_settings
from booking_core.services.booking import BookingService
from booking_core.services.connections import ConnectionRegistry
from booking_core.services.currency import CurrencyRateService
from booking_core.services.dynamodb import get_dynamodb_service
from booking_core.services.holidays import HolidayService
from booking_core.services.localization import LocalizationService
from booking_core.services.pricing import PricingService
from booking_core.services.refund_policy_service import RefundPolicyService
from booking_core.services.sessions import SessionService


@lru_cache
def get_holiday_service() -> HolidayService:
    return HolidayService()


@lru_cache
def get_currency_service() -> CurrencyRateService:
    return CurrencyRateService(db=get_dynamodb_service())


@lru_cache
def get_pricing_service() -> PricingService:
    """Get cached PricingService instance."""
    return PricingService(
        holidays=get_holiday_service(),
        currency=get_currency_service(),
        settings=get_settings(),
    )


@lru_cache
def get_booking_service() -> BookingService:
    """Get cached BookingService instance.

    The Stripe client is resolved on first use, so routes that never touch
    payments work without gateway credentials.
    """
    settings = get_settings()
    return BookingService(
        db=get_dynamodb_service(),
        pricing=get_pricing_service(),
        refund_policy=RefundPolicyService(settings),
        localization=LocalizationService(),
        settings=settings,
    )


@lru_cache
def get_session_service() -> SessionService:
    return SessionService(db=get_dynamodb_service())


def get_connection_registry(websocket: WebSocket) -> ConnectionRegistry[WebSocket]:
    """Registry of live sockets, owned by the application."""
    registry: ConnectionRegistry[WebSocket] = websocket.app.state.connections
    return registry


def reset_services() -> None:
    """Clear all cached service instances.

    Call this in test fixtures to ensure clean state between tests.
    Also resets the underlying DynamoDB singleton and settings.
    """
    from booking_core.services.dynamodb import reset_dynamodb_service

    get_holiday_service.cache_clear()
    get_currency_service.cache_clear()
    get_pricing_service.cache_clear()
    get_booking_service.cache_clear()
    get_session_service.cache_clear()
    get_settings.cache_clear()

    reset_dynamodb_service()
