"""Host calendar endpoints: manual blocks and custom nightly prices.

Only the listing owner or its managers may edit a calendar. For multiunit
listings ``unitId`` selects the room type and ``count`` the number of rooms
to block or unblock per date.
"""

from fastapi import APIRouter, Depends

from booking_api.dependencies import get_booking_service, get_session_service
from booking_api.models.calendar import (
    AdjustPricesRequest,
    BlockDatesRequest,
    CalendarRequest,
    InventoryResponse,
)
from booking_api.routes.actions import Action
from booking_core.models import Session
from booking_core.services.booking import BookingService
from booking_core.services.sessions import SessionService

router = APIRouter(prefix="/calendar", tags=["calendar"])


def block_dates(
    service: BookingService, session: Session, body: BlockDatesRequest
) -> InventoryResponse:
    inventory = service.block_dates(
        session, body.listing_id, body.dates, unit_id=body.unit_id, count=body.count
    )
    return InventoryResponse(message="Dates blocked", inventory=inventory)


def unblock_dates(
    service: BookingService, session: Session, body: BlockDatesRequest
) -> InventoryResponse:
    inventory = service.unblock_dates(
        session, body.listing_id, body.dates, unit_id=body.unit_id, count=body.count
    )
    return InventoryResponse(message="Dates unblocked", inventory=inventory)


def adjust_prices(
    service: BookingService, session: Session, body: AdjustPricesRequest
) -> InventoryResponse:
    inventory = service.adjust_prices(
        session,
        body.listing_id,
        body.dates,
        body.rate,
        body.currency,
        unit_id=body.unit_id,
    )
    return InventoryResponse(message="Prices adjusted", inventory=inventory)


def reset_prices(
    service: BookingService, session: Session, body: CalendarRequest
) -> InventoryResponse:
    inventory = service.reset_prices(
        session, body.listing_id, body.dates, unit_id=body.unit_id
    )
    return InventoryResponse(message="Prices reset", inventory=inventory)


@router.post("/dates/block", summary="Block dates", response_model=InventoryResponse)
async def block_dates_endpoint(
    body: BlockDatesRequest,
    service: BookingService = Depends(get_booking_service),
    sessions: SessionService = Depends(get_session_service),
) -> InventoryResponse:
    return block_dates(service, sessions.restore(body.token), body)


@router.post("/dates/unblock", summary="Unblock dates", response_model=InventoryResponse)
async def unblock_dates_endpoint(
    body: BlockDatesRequest,
    service: BookingService = Depends(get_booking_service),
    sessions: SessionService = Depends(get_session_service),
) -> InventoryResponse:
    return unblock_dates(service, sessions.restore(body.token), body)


@router.post("/prices/adjust", summary="Set custom rate", response_model=InventoryResponse)
async def adjust_prices_endpoint(
    body: AdjustPricesRequest,
    service: BookingService = Depends(get_booking_service),
    sessions: SessionService = Depends(get_session_service),
) -> InventoryResponse:
    return adjust_prices(service, sessions.restore(body.token), body)


@router.post("/prices/reset", summary="Remove custom rates", response_model=InventoryResponse)
async def reset_prices_endpoint(
    body: CalendarRequest,
    service: BookingService = Depends(get_booking_service),
    sessions: SessionService = Depends(get_session_service),
) -> InventoryResponse:
    return reset_prices(service, sessions.restore(body.token), body)


ACTIONS: dict[str, Action] = {
    "calendar/dates/block": Action(BlockDatesRequest, block_dates),
    "calendar/dates/unblock": Action(BlockDatesRequest, unblock_dates),
    "calendar/prices/adjust": Action(AdjustPricesRequest, adjust_prices),
    "calendar/prices/reset": Action(CalendarRequest, reset_prices),
}
