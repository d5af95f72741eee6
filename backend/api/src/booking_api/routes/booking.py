"""Booking endpoints.

Provides endpoints for:
- Creating and quoting bookings (guest)
- Listing bookings of the guest or of a listing (host)
- Cancelling (guest) and confirming/declining (host) bookings
- Checking promo codes

Every body carries the session ``token``; the session decides who acts.
The same actions are reachable over the WebSocket gateway through ACTIONS.
"""

from fastapi import APIRouter, Depends

from booking_api.dependencies import get_booking_service, get_session_service
from booking_api.models.booking import (
    BookingIdRequest,
    BookingListResponse,
    BookingResponse,
    CancelResponse,
    CreateBookingRequest,
    ListingIdRequest,
    PromoCheckRequest,
    QuoteResponse,
    ReviewResponse,
    ReviewStatusRequest,
    UpdateGuestsRequest,
)
from booking_api.models.common import TokenRequest
from booking_api.routes.actions import Action
from booking_core.models import Promo, Session
from booking_core.services.booking import BookingService
from booking_core.services.sessions import SessionService

router = APIRouter(prefix="/booking", tags=["booking"])


# Actions shared by HTTP and WebSocket


def create_booking(
    service: BookingService, session: Session, body: CreateBookingRequest
) -> BookingResponse:
    booking = service.create_booking(session, body.to_domain())
    return BookingResponse(message="Booking created", booking=booking)


def quote_booking(
    service: BookingService, session: Session, body: CreateBookingRequest
) -> QuoteResponse:
    return QuoteResponse(quote=service.quote(session, body.to_domain()))


def get_bookings(
    service: BookingService, session: Session, body: TokenRequest
) -> BookingListResponse:
    return BookingListResponse(bookings=service.get_guest_bookings(session))


def get_listing_bookings(
    service: BookingService, session: Session, body: ListingIdRequest
) -> BookingListResponse:
    return BookingListResponse(
        bookings=service.get_listing_bookings(session, body.listing_id)
    )


def set_read(
    service: BookingService, session: Session, body: BookingIdRequest
) -> BookingResponse:
    booking = service.set_read(session, body.booking_id)
    return BookingResponse(message="Booking marked as read", booking=booking)


def update_guests(
    service: BookingService, session: Session, body: UpdateGuestsRequest
) -> BookingResponse:
    booking = service.update_guests(session, body.booking_id, body.guests)
    return BookingResponse(message="Guests updated", booking=booking)


def cancel_booking(
    service: BookingService, session: Session, body: BookingIdRequest
) -> CancelResponse:
    result = service.cancel_booking(session, body.booking_id)
    return CancelResponse(message=result.message, booking=result.booking, refund=result.refund)


def review_status(
    service: BookingService, session: Session, body: ReviewStatusRequest
) -> ReviewResponse:
    result = service.review_status(session, body.booking_id, body.status)
    return ReviewResponse(
        message=f"Booking {result.booking.status.value}",
        booking=result.booking,
        intent=result.intent,
    )


def check_promo(
    service: BookingService, session: Session, body: PromoCheckRequest
) -> Promo:
    return service.check_promo(body.code)


# HTTP endpoints


@router.post(
    "/listings/create",
    summary="Create booking",
    description="""
Book a stay on a listing.

Validates the request, claims the inventory and stores the booking in one
transaction. Nothing is written when validation fails.
""",
    response_model=BookingResponse,
)
async def create_booking_endpoint(
    body: CreateBookingRequest,
    service: BookingService = Depends(get_booking_service),
    sessions: SessionService = Depends(get_session_service),
) -> BookingResponse:
    session = sessions.restore(body.token)
    return create_booking(service, session, body)


@router.post("/listings/quote", summary="Price a stay", response_model=QuoteResponse)
async def quote_booking_endpoint(
    body: CreateBookingRequest,
    service: BookingService = Depends(get_booking_service),
    sessions: SessionService = Depends(get_session_service),
) -> QuoteResponse:
    session = sessions.restore(body.token)
    return quote_booking(service, session, body)


@router.post("/manage/get", summary="Guest bookings", response_model=BookingListResponse)
async def get_bookings_endpoint(
    body: TokenRequest,
    service: BookingService = Depends(get_booking_service),
    sessions: SessionService = Depends(get_session_service),
) -> BookingListResponse:
    session = sessions.restore(body.token)
    return get_bookings(service, session, body)


@router.post(
    "/manage/getForListing", summary="Listing bookings", response_model=BookingListResponse
)
async def get_listing_bookings_endpoint(
    body: ListingIdRequest,
    service: BookingService = Depends(get_booking_service),
    sessions: SessionService = Depends(get_session_service),
) -> BookingListResponse:
    session = sessions.restore(body.token)
    return get_listing_bookings(service, session, body)


@router.post("/manage/setRead", summary="Mark booking read", response_model=BookingResponse)
async def set_read_endpoint(
    body: BookingIdRequest,
    service: BookingService = Depends(get_booking_service),
    sessions: SessionService = Depends(get_session_service),
) -> BookingResponse:
    session = sessions.restore(body.token)
    return set_read(service, session, body)


@router.post(
    "/manage/updateGuests", summary="Change guest counts", response_model=BookingResponse
)
async def update_guests_endpoint(
    body: UpdateGuestsRequest,
    service: BookingService = Depends(get_booking_service),
    sessions: SessionService = Depends(get_session_service),
) -> BookingResponse:
    session = sessions.restore(body.token)
    return update_guests(service, session, body)


@router.post(
    "/manage/cancel",
    summary="Cancel booking",
    description="""
Guest cancellation.

Releases the booked dates and refunds according to the most restrictive
cancellation policy among the booked units.
""",
    response_model=CancelResponse,
)
async def cancel_booking_endpoint(
    body: BookingIdRequest,
    service: BookingService = Depends(get_booking_service),
    sessions: SessionService = Depends(get_session_service),
) -> CancelResponse:
    session = sessions.restore(body.token)
    return cancel_booking(service, session, body)


@router.post(
    "/manage/reviewStatus", summary="Confirm or decline", response_model=ReviewResponse
)
async def review_status_endpoint(
    body: ReviewStatusRequest,
    service: BookingService = Depends(get_booking_service),
    sessions: SessionService = Depends(get_session_service),
) -> ReviewResponse:
    session = sessions.restore(body.token)
    return review_status(service, session, body)


@router.post("/promo/check", summary="Check promo code", response_model=Promo)
async def check_promo_endpoint(
    body: PromoCheckRequest,
    service: BookingService = Depends(get_booking_service),
    sessions: SessionService = Depends(get_session_service),
) -> Promo:
    session = sessions.restore(body.token)
    return check_promo(service, session, body)


ACTIONS: dict[str, Action] = {
    "booking/listings/create": Action(CreateBookingRequest, create_booking),
    "booking/listings/quote": Action(CreateBookingRequest, quote_booking),
    "booking/manage/get": Action(TokenRequest, get_bookings),
    "booking/manage/getForListing": Action(ListingIdRequest, get_listing_bookings),
    "booking/manage/setRead": Action(BookingIdRequest, set_read),
    "booking/manage/updateGuests": Action(UpdateGuestsRequest, update_guests),
    "booking/manage/cancel": Action(BookingIdRequest, cancel_booking),
    "booking/manage/reviewStatus": Action(ReviewStatusRequest, review_status),
    "booking/promo/check": Action(PromoCheckRequest, check_promo),
}
