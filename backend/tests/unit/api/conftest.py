"""Fixtures for API tests: the app wired to the moto-backed BookingService."""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from booking_api.dependencies import get_booking_service, get_session_service
from booking_api.main import app
from booking_core.services.sessions import SessionService


@pytest.fixture
def client(booking_service, db) -> Generator[TestClient, None, None]:
    """Test client whose routes use the test BookingService and session table."""
    app.dependency_overrides[get_booking_service] = lambda: booking_service
    app.dependency_overrides[get_session_service] = lambda: SessionService(db)
    yield TestClient(app)
    app.dependency_overrides.clear()
