"""Unit tests for host calendar edits through BookingService.

Ledger mutation details are covered in test_availability; these tests cover
permissions, unit resolution and persistence with the version check.
"""

from decimal import Decimal

import pytest

from booking_core.models import (
    BLOCKED_BOOKING_ID,
    BookingError,
    BookingRequest,
    ErrorCode,
    Guests,
    InventoryKind,
)
from booking_core.services.repositories import InventoryRepository

DATES = ["2025-06-10", "2025-06-11"]


def stored(db, kind: InventoryKind, inventory_id: str):
    return InventoryRepository(db).get(kind, inventory_id)


class TestUnitCalendar:
    """Calendar edits on a single-unit listing."""

    def test_block_dates_persists_blocks(
        self, booking_service, db, unit_listing, host_session
    ) -> None:
        updated = booking_service.block_dates(host_session, "listing-1", DATES)

        assert updated.version == 1
        unit = stored(db, InventoryKind.UNIT, "unit-1")
        assert unit.version == 1
        assert [(e.date, e.booking_id) for e in unit.not_available] == [
            ("2025-06-10", BLOCKED_BOOKING_ID),
            ("2025-06-11", BLOCKED_BOOKING_ID),
        ]

    def test_blocked_dates_cannot_be_booked(
        self, booking_service, unit_listing, host_session, guest_session
    ) -> None:
        booking_service.block_dates(host_session, "listing-1", ["2025-06-11"])

        with pytest.raises(BookingError) as exc_info:
            booking_service.create_booking(
                guest_session,
                BookingRequest(
                    listing_id="listing-1",
                    check_in="2025-06-10",
                    check_out="2025-06-12",
                    guests=Guests(adults=1),
                ),
            )
        assert exc_info.value.code == ErrorCode.UNIT_UNAVAILABLE

    def test_unblock_keeps_bookings(
        self, booking_service, db, unit_listing, host_session, guest_session
    ) -> None:
        booking = booking_service.create_booking(
            guest_session,
            BookingRequest(
                listing_id="listing-1",
                check_in="2025-06-11",
                check_out="2025-06-12",
                guests=Guests(adults=1),
            ),
        )
        booking_service.block_dates(host_session, "listing-1", DATES)

        booking_service.unblock_dates(host_session, "listing-1", DATES)

        unit = stored(db, InventoryKind.UNIT, "unit-1")
        assert [(e.date, e.booking_id) for e in unit.not_available] == [
            ("2025-06-11", booking.id)
        ]

    def test_manager_adjusts_and_resets_prices(
        self, booking_service, db, unit_listing, manager_session
    ) -> None:
        booking_service.adjust_prices(
            manager_session, "listing-1", DATES, Decimal("180"), "EUR"
        )
        unit = stored(db, InventoryKind.UNIT, "unit-1")
        assert [(e.price.rate, e.price.currency) for e in unit.not_available] == [
            (Decimal("180"), "EUR"),
            (Decimal("180"), "EUR"),
        ]

        updated = booking_service.reset_prices(manager_session, "listing-1", DATES)

        assert updated.version == 2
        assert stored(db, InventoryKind.UNIT, "unit-1").not_available == []

    def test_guest_cannot_edit(self, booking_service, unit_listing, guest_session) -> None:
        with pytest.raises(BookingError) as exc_info:
            booking_service.block_dates(guest_session, "listing-1", DATES)
        assert exc_info.value.code == ErrorCode.NOT_LISTING_OWNER

    def test_unknown_listing(self, booking_service, host_session) -> None:
        with pytest.raises(BookingError) as exc_info:
            booking_service.block_dates(host_session, "missing", DATES)
        assert exc_info.value.code == ErrorCode.LISTING_NOT_FOUND

    def test_adjust_requires_dates(self, booking_service, unit_listing, host_session) -> None:
        with pytest.raises(BookingError) as exc_info:
            booking_service.adjust_prices(host_session, "listing-1", [], Decimal("10"), "USD")
        assert exc_info.value.code == ErrorCode.INVALID_REQUEST

    def test_adjust_rejects_bad_date(self, booking_service, unit_listing, host_session) -> None:
        with pytest.raises(BookingError) as exc_info:
            booking_service.adjust_prices(
                host_session, "listing-1", ["2025-13-01"], Decimal("10"), "USD"
            )
        assert exc_info.value.code == ErrorCode.INVALID_DATE

    def test_reset_requires_dates(self, booking_service, unit_listing, host_session) -> None:
        with pytest.raises(BookingError) as exc_info:
            booking_service.reset_prices(host_session, "listing-1", [])
        assert exc_info.value.code == ErrorCode.INVALID_REQUEST

    def test_repeated_version_conflicts_give_up(
        self, booking_service, unit_listing, host_session, monkeypatch
    ) -> None:
        monkeypatch.setattr(booking_service.inventory, "save_ledger", lambda inv, version: False)

        with pytest.raises(BookingError) as exc_info:
            booking_service.block_dates(host_session, "listing-1", DATES)
        assert exc_info.value.code == ErrorCode.INVENTORY_CONFLICT


class TestPoolCalendar:
    """Calendar edits on a multiunit listing."""

    def test_block_rooms_of_room_type(
        self, booking_service, db, pool_listing, host_session
    ) -> None:
        booking_service.block_dates(host_session, "listing-2", DATES, unit_id="room-1", count=2)

        room_type = stored(db, InventoryKind.MULTIUNIT, "room-1")
        for entry in room_type.not_available:
            assert [(c.booking_id, c.numbers) for c in entry.units] == [
                (BLOCKED_BOOKING_ID, [1, 2])
            ]

    def test_partial_unblock(self, booking_service, db, pool_listing, host_session) -> None:
        booking_service.block_dates(host_session, "listing-2", DATES, unit_id="room-1", count=3)

        booking_service.unblock_dates(
            host_session, "listing-2", DATES, unit_id="room-1", count=1
        )

        room_type = stored(db, InventoryKind.MULTIUNIT, "room-1")
        assert all(entry.claimed_numbers == [1, 2] for entry in room_type.not_available)

    def test_room_type_is_required(self, booking_service, pool_listing, host_session) -> None:
        with pytest.raises(BookingError) as exc_info:
            booking_service.block_dates(host_session, "listing-2", DATES, count=1)
        assert exc_info.value.code == ErrorCode.UNIT_NOT_FOUND

    def test_room_type_must_belong_to_listing(
        self, booking_service, pool_listing, host_session
    ) -> None:
        with pytest.raises(BookingError) as exc_info:
            booking_service.block_dates(
                host_session, "listing-2", DATES, unit_id="room-9", count=1
            )
        assert exc_info.value.code == ErrorCode.UNIT_NOT_IN_LISTING

    def test_block_count_must_be_positive(
        self, booking_service, pool_listing, host_session
    ) -> None:
        with pytest.raises(BookingError) as exc_info:
            booking_service.block_dates(host_session, "listing-2", DATES, unit_id="room-1")
        assert exc_info.value.code == ErrorCode.INVALID_QUANTITY
