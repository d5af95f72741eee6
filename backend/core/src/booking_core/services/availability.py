"""Availability resolution and ledger mutations for units and room types.

Functions here are pure: they read a document and return a result or a
mutated copy. Persisting the copies (with the optimistic version check) is
the booking service's job.

A single unit is free for a stay only if no night carries a booking ID.
A room type is free for ``quantity`` rooms if at least that many room
numbers are unclaimed on every night of the stay; allocation is first-fit
in ascending room-number order.
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, Field

from ..models import (
    BLOCKED_BOOKING_ID,
    BookingError,
    DatePrice,
    ErrorCode,
    LedgerEntry,
    PoolLedgerEntry,
    RoomClaim,
    RoomType,
    Unit,
)


class UnitAvailability(BaseModel):
    """Availability of a single unit for a set of nights."""

    available: bool
    booked_dates: list[str] = Field(default_factory=list)
    date_rates: dict[str, DatePrice] = Field(
        default_factory=dict, description="Price overrides found in range"
    )


class PoolAvailability(BaseModel):
    """Room numbers free on every night of a stay."""

    free_numbers: list[int] = Field(default_factory=list)
    date_rates: dict[str, DatePrice] = Field(default_factory=dict)

    @property
    def free_count(self) -> int:
        return len(self.free_numbers)


def parse_date(value: str) -> dt.date:
    """Parse a ``YYYY-MM-DD`` string.

    Raises:
        BookingError: INVALID_DATE if the string is not a real calendar date
    """
    try:
        return dt.datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise BookingError(ErrorCode.INVALID_DATE, {"date": value}) from None


def is_valid_date(value: str) -> bool:
    try:
        parse_date(value)
    except BookingError:
        return False
    return True


def stay_dates(check_in: dt.date, check_out: dt.date) -> list[str]:
    """List the nights of a stay, check-out excluded.

    Args:
        check_in: First night
        check_out: Departure day

    Returns:
        ISO date strings, empty if check_out is not after check_in
    """
    nights = (check_out - check_in).days
    return [(check_in + dt.timedelta(days=i)).isoformat() for i in range(nights)]


def resolve_unit(unit: Unit, dates: list[str]) -> UnitAvailability:
    """Check whether a single unit is free on all ``dates``."""
    booked: list[str] = []
    date_rates: dict[str, DatePrice] = {}
    for day in dates:
        entry = unit.entry_for(day)
        if entry is None:
            continue
        if entry.price is not None:
            date_rates[day] = entry.price
        if entry.is_booked:
            booked.append(day)
    return UnitAvailability(
        available=not booked, booked_dates=booked, date_rates=date_rates
    )


def resolve_pool(room_type: RoomType, dates: list[str]) -> PoolAvailability:
    """Find room numbers of a room type free on every one of ``dates``.

    Starts from the full pool and intersects it with the numbers free on
    each night in turn.
    """
    free = sorted(set(room_type.units))
    date_rates: dict[str, DatePrice] = {}
    for day in dates:
        entry = room_type.entry_for(day)
        if entry is None:
            continue
        if entry.price is not None:
            date_rates[day] = entry.price
        claimed = set(entry.claimed_numbers)
        free = [n for n in free if n not in claimed]
    return PoolAvailability(free_numbers=free, date_rates=date_rates)


def allocate_pool(room_type: RoomType, dates: list[str], quantity: int) -> list[int]:
    """Pick ``quantity`` room numbers free across all ``dates``.

    Raises:
        BookingError: INVALID_QUANTITY for quantity <= 0,
            INSUFFICIENT_INVENTORY if fewer rooms are free
    """
    if quantity <= 0:
        raise BookingError(ErrorCode.INVALID_QUANTITY, {"unit_id": room_type.id})
    availability = resolve_pool(room_type, dates)
    if availability.free_count < quantity:
        raise BookingError(
            ErrorCode.INSUFFICIENT_INVENTORY,
            {
                "unit_id": room_type.id,
                "requested": quantity,
                "available": availability.free_count,
            },
        )
    return availability.free_numbers[:quantity]


def claim_unit(unit: Unit, dates: list[str], booking_id: str, source: str) -> Unit:
    """Mark ``dates`` as booked on a copy of ``unit``.

    Existing entries keep their price override and notes.

    Raises:
        BookingError: UNIT_UNAVAILABLE if any date already carries a booking
    """
    availability = resolve_unit(unit, dates)
    if not availability.available:
        raise BookingError(
            ErrorCode.UNIT_UNAVAILABLE,
            {"unit_id": unit.id, "dates": availability.booked_dates},
        )
    ledger = {e.date: e.model_copy() for e in unit.not_available}
    for day in dates:
        entry = ledger.get(day)
        if entry is None:
            ledger[day] = LedgerEntry(date=day, booking_id=booking_id, source=source)
        else:
            ledger[day] = entry.model_copy(
                update={"booking_id": booking_id, "source": source}
            )
    return unit.model_copy(update={"not_available": _sorted(ledger)})


def claim_pool(
    room_type: RoomType,
    dates: list[str],
    numbers: list[int],
    booking_id: str,
    source: str,
) -> RoomType:
    """Attach a claim of ``numbers`` for ``booking_id`` on every one of ``dates``.

    Raises:
        BookingError: INSUFFICIENT_INVENTORY if a number is not free on some date
    """
    free = set(resolve_pool(room_type, dates).free_numbers)
    taken = [n for n in numbers if n not in free]
    if taken:
        raise BookingError(
            ErrorCode.INSUFFICIENT_INVENTORY,
            {"unit_id": room_type.id, "numbers": taken},
        )
    claim = RoomClaim(numbers=list(numbers), booking_id=booking_id, source=source)
    return _add_pool_claims(room_type, {day: claim for day in dates})


def release_unit(unit: Unit, booking_id: str) -> Unit:
    """Remove the booking marks of ``booking_id`` from a copy of ``unit``.

    Entries that still carry a price override or notes are kept.
    """
    ledger: dict[str, LedgerEntry] = {}
    for entry in unit.not_available:
        if entry.booking_id == booking_id:
            entry = entry.model_copy(update={"booking_id": None, "source": None})
            if entry.is_empty:
                continue
        ledger[entry.date] = entry
    return unit.model_copy(update={"not_available": _sorted(ledger)})


def release_pool(room_type: RoomType, booking_id: str) -> RoomType:
    """Remove every claim made by ``booking_id``; drop entries left empty."""
    ledger: dict[str, PoolLedgerEntry] = {}
    for entry in room_type.not_available:
        claims = [c for c in entry.units if c.booking_id != booking_id]
        updated = entry.model_copy(update={"units": claims})
        if not updated.is_empty:
            ledger[entry.date] = updated
    return room_type.model_copy(update={"not_available": _sorted(ledger)})


def block_dates(
    inventory: Unit | RoomType, dates: list[str], count: int = 0, source: str = "rstays"
) -> Unit | RoomType:
    """Manually block ``dates``.

    A single unit gets a ``Blocked`` mark on every free date; booked dates
    are left alone. A room type gets a ``Blocked`` claim of up to ``count``
    free room numbers per date. Invalid date strings are skipped.

    Raises:
        BookingError: INVALID_QUANTITY if ``count`` <= 0 for a room type
    """
    valid = [day for day in dict.fromkeys(dates) if is_valid_date(day)]
    if isinstance(inventory, Unit):
        ledger = {e.date: e for e in inventory.not_available}
        for day in valid:
            entry = ledger.get(day)
            if entry is None:
                ledger[day] = LedgerEntry(
                    date=day, booking_id=BLOCKED_BOOKING_ID, source=source
                )
            elif not entry.is_booked:
                ledger[day] = entry.model_copy(
                    update={"booking_id": BLOCKED_BOOKING_ID, "source": source}
                )
        return inventory.model_copy(update={"not_available": _sorted(ledger)})

    if count <= 0:
        raise BookingError(ErrorCode.INVALID_QUANTITY, {"count": count})
    claims: dict[str, RoomClaim] = {}
    for day in valid:
        free = resolve_pool(inventory, [day]).free_numbers[:count]
        if free:
            claims[day] = RoomClaim(
                numbers=free, booking_id=BLOCKED_BOOKING_ID, source=source
            )
    return _add_pool_claims(inventory, claims)


def unblock_dates(
    inventory: Unit | RoomType, dates: list[str], count: int = 0
) -> Unit | RoomType:
    """Undo manual blocks on ``dates``.

    On a single unit only ``Blocked`` marks are removed; bookings and price
    overrides stay. On a room type up to ``count`` numbers per date are
    released from ``Blocked`` claims, most recently added first.

    Raises:
        BookingError: INVALID_QUANTITY if ``count`` <= 0 for a room type
    """
    targets = set(dates)
    if isinstance(inventory, Unit):
        ledger: dict[str, LedgerEntry] = {}
        for entry in inventory.not_available:
            if entry.date in targets and entry.booking_id == BLOCKED_BOOKING_ID:
                entry = entry.model_copy(update={"booking_id": None, "source": None})
                if entry.is_empty:
                    continue
            ledger[entry.date] = entry
        return inventory.model_copy(update={"not_available": _sorted(ledger)})

    if count <= 0:
        raise BookingError(ErrorCode.INVALID_QUANTITY, {"count": count})
    pool_ledger: dict[str, PoolLedgerEntry] = {}
    for pool_entry in inventory.not_available:
        if pool_entry.date in targets:
            pool_entry = pool_entry.model_copy(
                update={"units": _release_blocked(pool_entry.units, count)}
            )
            if pool_entry.is_empty:
                continue
        pool_ledger[pool_entry.date] = pool_entry
    return inventory.model_copy(update={"not_available": _sorted(pool_ledger)})


def adjust_prices(
    inventory: Unit | RoomType, dates: list[str], rate: Decimal, currency: str
) -> Unit | RoomType:
    """Set a fixed custom ``rate`` in ``currency`` on each of ``dates``."""
    price = DatePrice(rate=rate, currency=currency)
    entry_type = LedgerEntry if isinstance(inventory, Unit) else PoolLedgerEntry
    ledger = {e.date: e for e in inventory.not_available}
    for day in dict.fromkeys(dates):
        entry = ledger.get(day)
        if entry is None:
            ledger[day] = entry_type(date=day, price=price)
        else:
            ledger[day] = entry.model_copy(update={"price": price})
    return inventory.model_copy(update={"not_available": _sorted(ledger)})


def reset_prices(inventory: Unit | RoomType, dates: list[str]) -> Unit | RoomType:
    """Clear custom prices on ``dates``; entries left empty are dropped."""
    targets = set(dates)
    ledger = {}
    for entry in inventory.not_available:
        if entry.date in targets:
            entry = entry.model_copy(update={"price": None})
            if entry.is_empty:
                continue
        ledger[entry.date] = entry
    return inventory.model_copy(update={"not_available": _sorted(ledger)})


def _release_blocked(claims: list[RoomClaim], count: int) -> list[RoomClaim]:
    """Drop up to ``count`` numbers from ``Blocked`` claims, newest claim first."""
    remaining = count
    released: list[RoomClaim] = []
    for claim in reversed(claims):
        if claim.booking_id == BLOCKED_BOOKING_ID and remaining > 0:
            keep = max(len(claim.numbers) - remaining, 0)
            remaining -= len(claim.numbers) - keep
            claim = claim.model_copy(update={"numbers": claim.numbers[:keep]})
        if claim.numbers:
            released.append(claim)
    released.reverse()
    return released


def _add_pool_claims(room_type: RoomType, claims: dict[str, RoomClaim]) -> RoomType:
    ledger = {e.date: e for e in room_type.not_available}
    for day, claim in claims.items():
        entry = ledger.get(day)
        if entry is None:
            ledger[day] = PoolLedgerEntry(date=day, units=[claim])
        else:
            ledger[day] = entry.model_copy(update={"units": [*entry.units, claim]})
    return room_type.model_copy(update={"not_available": _sorted(ledger)})


def _sorted(ledger: dict) -> list:
    return [ledger[day] for day in sorted(ledger)]
