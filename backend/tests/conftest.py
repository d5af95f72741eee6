"""Pytest configuration and fixtures for rstays booking backend tests.

This module provides reusable fixtures for testing:
- DynamoDB mocking with moto
- Sample listings, units, room types and sessions
- A BookingService wired to mocked tables, a fixed clock and a mocked Stripe
"""

import datetime as dt
import os
from collections.abc import Callable, Generator
from decimal import Decimal
from typing import Any
from unittest.mock import MagicMock

import boto3
import pytest
from moto import mock_aws

# === Environment Setup ===

# Set environment variables for testing before imports
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-1")
os.environ.setdefault("DYNAMODB_TABLE_PREFIX", "test-rstays")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

from booking_core.config import BookingSettings  # noqa: E402
from booking_core.models import (  # noqa: E402
    GatewayFee,
    InventoryKind,
    Listing,
    ListingStatus,
    Prices,
    RoomType,
    Session,
    SessionMode,
    Unit,
)
from booking_core.services.booking import BookingService  # noqa: E402
from booking_core.services.currency import CurrencyRateService  # noqa: E402
from booking_core.services.dynamodb import DynamoDBService  # noqa: E402
from booking_core.services.holidays import HolidayService  # noqa: E402
from booking_core.services.pricing import PricingService  # noqa: E402
from booking_core.services.repositories import (  # noqa: E402
    InventoryRepository,
    ListingRepository,
    SessionRepository,
)
from booking_core.services.stripe_service import StripeService  # noqa: E402

TABLE_PREFIX = os.environ["DYNAMODB_TABLE_PREFIX"]

# Every test runs "now" at this moment unless it builds its own clock
FIXED_NOW = dt.datetime(2025, 5, 1, 12, 0, 0)

GUEST_UID = "guest-1"
HOST_UID = "host-1"
MANAGER_UID = "manager-1"
GUEST_TOKEN = "guest-token"
HOST_TOKEN = "host-token"
MANAGER_TOKEN = "manager-token"


# === DynamoDB Fixtures ===


@pytest.fixture(autouse=True)
def reset_service_singletons() -> Generator[None, None, None]:
    """Reset cached services before and after each test.

    Tests using mock_aws need a fresh DynamoDB service created inside the
    mock context rather than one left over from a previous test.
    """
    from booking_api.dependencies import reset_services

    reset_services()
    yield
    reset_services()


@pytest.fixture
def aws_credentials() -> None:
    """Mocked AWS Credentials for moto."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "eu-west-1"


@pytest.fixture
def dynamodb_client(aws_credentials: None) -> Generator[Any, None, None]:
    """Create a mocked DynamoDB client."""
    with mock_aws():
        client = boto3.client("dynamodb", region_name="eu-west-1")
        yield client


def _simple_table(name: str, key: str) -> dict[str, Any]:
    return {
        "TableName": f"{TABLE_PREFIX}-{name}",
        "KeySchema": [{"AttributeName": key, "KeyType": "HASH"}],
        "AttributeDefinitions": [{"AttributeName": key, "AttributeType": "S"}],
        "BillingMode": "PAY_PER_REQUEST",
    }


def _gsi(attribute: str, index_name: str) -> dict[str, Any]:
    return {
        "IndexName": index_name,
        "KeySchema": [{"AttributeName": attribute, "KeyType": "HASH"}],
        "Projection": {"ProjectionType": "ALL"},
    }


@pytest.fixture
def create_tables(dynamodb_client: Any) -> None:
    """Create all required DynamoDB tables for testing."""
    tables = [
        _simple_table("listings", "id"),
        _simple_table("units", "id"),
        _simple_table("multiunits", "id"),
        _simple_table("rate-plans", "id"),
        _simple_table("promos", "code"),
        _simple_table("calendars", "owner"),
        _simple_table("currency-rates", "pair"),
        _simple_table("sessions", "token"),
        _simple_table("users", "uid"),
        {
            "TableName": f"{TABLE_PREFIX}-bookings",
            "KeySchema": [{"AttributeName": "id", "KeyType": "HASH"}],
            "AttributeDefinitions": [
                {"AttributeName": "id", "AttributeType": "S"},
                {"AttributeName": "user", "AttributeType": "S"},
                {"AttributeName": "listing_id", "AttributeType": "S"},
            ],
            "GlobalSecondaryIndexes": [
                _gsi("user", "user-index"),
                _gsi("listing_id", "listing-index"),
            ],
            "BillingMode": "PAY_PER_REQUEST",
        },
        {
            "TableName": f"{TABLE_PREFIX}-payments",
            "KeySchema": [{"AttributeName": "id", "KeyType": "HASH"}],
            "AttributeDefinitions": [
                {"AttributeName": "id", "AttributeType": "S"},
                {"AttributeName": "booking_id", "AttributeType": "S"},
            ],
            "GlobalSecondaryIndexes": [_gsi("booking_id", "booking_id-index")],
            "BillingMode": "PAY_PER_REQUEST",
        },
    ]

    for table_config in tables:
        dynamodb_client.create_table(**table_config)


@pytest.fixture
def db(create_tables: None) -> DynamoDBService:
    """DynamoDB service bound to the mocked tables."""
    return DynamoDBService(environment="test")


# === Service Fixtures ===


@pytest.fixture
def settings() -> BookingSettings:
    return BookingSettings(environment="test")


@pytest.fixture
def clock() -> Callable[[], dt.datetime]:
    return lambda: FIXED_NOW


@pytest.fixture
def pricing(db: DynamoDBService, settings: BookingSettings) -> PricingService:
    return PricingService(HolidayService(), CurrencyRateService(db), settings)


@pytest.fixture
def stripe_mock() -> MagicMock:
    """Stripe gateway double returning successful results."""
    mock = MagicMock(spec=StripeService)
    mock.capture_payment.return_value = {
        "payment_intent_id": "pi_123",
        "status": "succeeded",
        "amount_received": Decimal("300"),
        "fees": [GatewayFee(name="stripe_fee", price=Decimal("9"))],
    }
    mock.decline_payment.return_value = {"payment_intent_id": "pi_123", "status": "canceled"}
    mock.refund_booking.return_value = {
        "status": "refunded",
        "refund_id": "re_123",
        "amount": Decimal("150"),
    }
    return mock


@pytest.fixture
def booking_service(
    db: DynamoDBService,
    pricing: PricingService,
    stripe_mock: MagicMock,
    settings: BookingSettings,
    clock: Callable[[], dt.datetime],
) -> BookingService:
    return BookingService(db, pricing, stripe=stripe_mock, settings=settings, clock=clock)


# === Sample Data Fixtures ===


@pytest.fixture
def make_unit() -> Callable[..., Unit]:
    """Factory for single units; keyword arguments override the defaults."""

    def factory(**overrides: Any) -> Unit:
        data: dict[str, Any] = {
            "id": "unit-1",
            "listing_id": "listing-1",
            "title": "Sea view apartment",
            "guests": 4,
            "prices": Prices(rate=Decimal("100"), currency="USD"),
        }
        data.update(overrides)
        return Unit(**data)

    return factory


@pytest.fixture
def make_room_type() -> Callable[..., RoomType]:
    """Factory for room-type pools; keyword arguments override the defaults."""

    def factory(**overrides: Any) -> RoomType:
        data: dict[str, Any] = {
            "id": "room-1",
            "listing_id": "listing-2",
            "title": "Double room",
            "guests": 2,
            "units": [1, 2, 3, 4, 5],
            "prices": Prices(rate=Decimal("50"), currency="USD"),
        }
        data.update(overrides)
        return RoomType(**data)

    return factory


@pytest.fixture
def unit_listing(db: DynamoDBService, make_unit: Callable[..., Unit]) -> Listing:
    """Active single-unit listing owned by the host, with one manager."""
    listing = Listing(
        id="listing-1",
        owner_uid=HOST_UID,
        managers=[MANAGER_UID],
        status=ListingStatus.ACTIVE,
        form=InventoryKind.UNIT,
        unit="unit-1",
        title="Sea view apartment",
    )
    ListingRepository(db).put(listing)
    InventoryRepository(db).put(make_unit())
    return listing


@pytest.fixture
def pool_listing(db: DynamoDBService, make_room_type: Callable[..., RoomType]) -> Listing:
    """Active multiunit listing with one pool of five rooms."""
    listing = Listing(
        id="listing-2",
        owner_uid=HOST_UID,
        status=ListingStatus.ACTIVE,
        form=InventoryKind.MULTIUNIT,
        multiunit=["room-1"],
        title="Harbour hotel",
    )
    ListingRepository(db).put(listing)
    InventoryRepository(db).put(make_room_type())
    return listing


@pytest.fixture
def guest_session(db: DynamoDBService) -> Session:
    session = Session(token=GUEST_TOKEN, uid=GUEST_UID, currency="USD", timezone="Europe/Madrid")
    SessionRepository(db).put(session)
    return session


@pytest.fixture
def host_session(db: DynamoDBService) -> Session:
    session = Session(token=HOST_TOKEN, uid=HOST_UID, currency="USD", mode=SessionMode.HOST)
    SessionRepository(db).put(session)
    return session


@pytest.fixture
def manager_session(db: DynamoDBService) -> Session:
    session = Session(
        token=MANAGER_TOKEN, uid=MANAGER_UID, currency="USD", mode=SessionMode.HOST
    )
    SessionRepository(db).put(session)
    return session
