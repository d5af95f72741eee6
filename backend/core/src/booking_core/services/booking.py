"""Booking lifecycle: create, quote, cancel, host review and calendar edits.

Every operation validates fully before writing. Inventory ledgers are
written with an optimistic version check, and a booking create commits the
inventory claims, the booking record and the guest calendar event in a
single DynamoDB transaction: either all of them land or none do.
"""

import datetime as dt
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from ..config import BookingSettings, get_settings
from ..models import (
    Booking,
    BookingError,
    BookingRequest,
    BookingStatus,
    BookingUnit,
    CalendarEvent,
    DatePrice,
    ErrorCode,
    Guests,
    Informal,
    InventoryKind,
    Listing,
    ListingStatus,
    Payment,
    PaymentInfo,
    PaymentStatus,
    PriceQuote,
    Promo,
    RatePlan,
    ReviewDecision,
    RoomType,
    Session,
    Unit,
    UnitSelection,
    can_transition,
)
from ..utils.logging import get_logger, log_booking_operation
from . import availability
from .ids import generate_booking_id, generate_payment_id
from .localization import LocalizationService
from .pricing import PricingService, round_money
from .refund_policy_service import RefundPolicyService
from .repositories import (
    BookingRepository,
    CalendarRepository,
    InventoryRepository,
    ListingRepository,
    PaymentRepository,
    PromoRepository,
    UserRepository,
)
from .stripe_service import StripeServiceError, get_stripe_service

if TYPE_CHECKING:
    from .dynamodb import DynamoDBService
    from .stripe_service import StripeService

logger = get_logger(__name__)

BASIC_RATE_PLAN = "basic"
# Attempts at a fresh booking ID before giving up
BOOKING_ID_ATTEMPTS = 5
# Attempts at a ledger write that lost an optimistic version race
LEDGER_WRITE_ATTEMPTS = 3


@dataclass
class _Line:
    """One selected unit or room type, resolved for a stay."""

    inventory: Unit | RoomType
    selection: UnitSelection
    quantity: int
    numbers: list[int] = field(default_factory=list)
    date_rates: dict[str, DatePrice] = field(default_factory=dict)
    rate_plan: RatePlan | None = None


@dataclass
class _Plan:
    """Validated booking request, ready to price and persist."""

    listing: Listing
    kind: InventoryKind
    check_in: dt.date
    check_out: dt.date
    dates: list[str]
    lines: list[_Line]
    promo: Promo | None


class CancellationResult(BaseModel):
    """Outcome of a guest cancellation."""

    message: str
    booking: Booking
    refund: dict[str, Any] | None = None


class ReviewResult(BaseModel):
    """Outcome of a host confirming or declining a booking."""

    booking: Booking
    intent: dict[str, Any]


class BookingService:
    """Service for booking lifecycle operations."""

    def __init__(
        self,
        db: "DynamoDBService",
        pricing: PricingService,
        refund_policy: RefundPolicyService | None = None,
        localization: LocalizationService | None = None,
        stripe: "StripeService | None" = None,
        settings: BookingSettings | None = None,
        clock: Callable[[], dt.datetime] = dt.datetime.now,
    ) -> None:
        """Initialize booking service.

        Args:
            db: DynamoDB service instance
            pricing: Pricing service instance
            refund_policy: Cancellation policy evaluator
            localization: Label catalog for price lines
            stripe: Payment gateway; resolved lazily when omitted
            settings: Engine settings; defaults to the environment
            clock: Returns the current local time
        """
        self.db = db
        self.pricing = pricing
        self.settings = settings or get_settings()
        self.refund_policy = refund_policy or RefundPolicyService(self.settings)
        self.localization = localization or LocalizationService()
        self._stripe = stripe
        self.clock = clock

        self.inventory = InventoryRepository(db)
        self.listings = ListingRepository(db)
        self.bookings = BookingRepository(db)
        self.payments = PaymentRepository(db)
        self.promos = PromoRepository(db)
        self.calendars = CalendarRepository(db)
        self.users = UserRepository(db)

    @property
    def stripe(self) -> "StripeService":
        if self._stripe is None:
            self._stripe = get_stripe_service()
        return self._stripe

    # =========================================================================
    # Create and quote
    # =========================================================================

    def quote(self, session: Session, request: BookingRequest) -> PriceQuote:
        """Price a stay without booking it.

        Runs the same validation as ``create_booking``.
        """
        plan = self._prepare(session, request)
        return self._price(plan, session, request)

    def create_booking(self, session: Session, request: BookingRequest) -> Booking:
        """Create a booking for the session's user.

        Args:
            session: Restored client session (guest)
            request: Listing, units, dates, guests and contact details

        Returns:
            The created booking with localized price labels

        Raises:
            BookingError: On any validation failure (nothing is written), or
                INVENTORY_CONFLICT if another booking claimed the same
                inventory in the meantime
        """
        plan = self._prepare(session, request)
        booking_id = self._new_booking_id()

        claimed: list[tuple[Unit | RoomType, int]] = []
        for line in plan.lines:
            if isinstance(line.inventory, Unit):
                updated = availability.claim_unit(
                    line.inventory, plan.dates, booking_id, self.settings.booking_source
                )
            else:
                updated = availability.claim_pool(
                    line.inventory,
                    plan.dates,
                    line.numbers,
                    booking_id,
                    self.settings.booking_source,
                )
            claimed.append((updated, line.inventory.version))

        quote = self._price(plan, session, request)
        booking = self._build_booking(booking_id, plan, quote, session, request)
        event = self._calendar_event(booking, plan, session)

        items = [self.inventory.ledger_update_item(doc, version) for doc, version in claimed]
        items.append(self.bookings.put_item(booking))
        items.append(self.calendars.append_event_item(session.uid, event))

        if not self.db.transact_write(items):
            log_booking_operation(
                logger,
                "create_booking",
                booking_id=booking_id,
                listing_id=plan.listing.id,
                unit_ids=[line.inventory.id for line in plan.lines],
                error="inventory changed concurrently",
            )
            raise BookingError(ErrorCode.INVENTORY_CONFLICT, {"booking_id": booking_id})

        log_booking_operation(
            logger,
            "create_booking",
            booking_id=booking_id,
            listing_id=plan.listing.id,
            unit_ids=booking.unit_ids,
            status=booking.status.value,
            total_price=booking.total_price,
        )
        return self.localization.translate_booking_prices([booking], session.language)[0]

    def _prepare(self, session: Session, request: BookingRequest) -> _Plan:
        """Validate a create/quote request in order; no writes happen here."""
        listing = self.listings.get(request.listing_id)
        if listing is None or listing.status != ListingStatus.ACTIVE:
            raise BookingError(ErrorCode.LISTING_NOT_FOUND, {"listing_id": request.listing_id})
        if listing.owner_uid == session.uid:
            raise BookingError(ErrorCode.SELF_BOOKING)

        kind = listing.form
        selections = self._selections(listing, request.units)

        check_in = availability.parse_date(request.check_in)
        check_out = availability.parse_date(request.check_out)
        if check_in < self.clock().date():
            raise BookingError(ErrorCode.CHECK_IN_IN_PAST, {"check_in": request.check_in})
        if check_out <= check_in:
            raise BookingError(ErrorCode.CHECK_OUT_BEFORE_CHECK_IN)
        dates = availability.stay_dates(check_in, check_out)

        lines = []
        for selection in selections:
            inventory = self.inventory.get(kind, selection.id)
            if inventory is None:
                raise BookingError(ErrorCode.UNIT_NOT_FOUND, {"unit_id": selection.id})
            requirements = inventory.booking_requirements
            if not requirements.min_nights <= len(dates) <= requirements.max_nights:
                raise BookingError(
                    ErrorCode.NIGHTS_OUT_OF_RANGE,
                    {
                        "unit_id": inventory.id,
                        "min_nights": requirements.min_nights,
                        "max_nights": requirements.max_nights,
                    },
                )
            lines.append(self._resolve_line(inventory, selection, dates))

        if request.guests.adults <= 0:
            raise BookingError(ErrorCode.ADULT_REQUIRED)
        capacity = sum(line.inventory.guests * line.quantity for line in lines)
        if request.guests.total > capacity:
            raise BookingError(
                ErrorCode.MAX_GUESTS_EXCEEDED,
                {"guests": request.guests.total, "capacity": capacity},
            )

        promo = None
        if request.promo:
            promo = self.promos.get(request.promo)
            if promo is None:
                raise BookingError(ErrorCode.PROMO_NOT_FOUND, {"code": request.promo})

        return _Plan(
            listing=listing,
            kind=kind,
            check_in=check_in,
            check_out=check_out,
            dates=dates,
            lines=lines,
            promo=promo,
        )

    def _selections(
        self, listing: Listing, selections: list[UnitSelection]
    ) -> list[UnitSelection]:
        """Check the selected units belong to the listing; fill in unit IDs."""
        if listing.form == InventoryKind.UNIT:
            if listing.unit is None:
                raise BookingError(ErrorCode.UNIT_NOT_FOUND, {"listing_id": listing.id})
            if len(selections) > 1:
                raise BookingError(
                    ErrorCode.INVALID_REQUEST,
                    {"reason": "Only one unit can be selected for that listing"},
                )
            selection = selections[0] if selections else UnitSelection()
            if selection.id is not None and selection.id != listing.unit:
                raise BookingError(ErrorCode.UNIT_NOT_IN_LISTING, {"unit_id": selection.id})
            return [selection.model_copy(update={"id": listing.unit, "quantity": 1})]

        if not selections:
            raise BookingError(ErrorCode.NO_UNITS_SELECTED)
        ids = [s.id for s in selections]
        if len(set(ids)) != len(ids):
            raise BookingError(ErrorCode.INVALID_REQUEST, {"reason": "duplicate unit"})
        for selection in selections:
            if selection.id not in listing.multiunit:
                raise BookingError(ErrorCode.UNIT_NOT_IN_LISTING, {"unit_id": selection.id})
            if selection.quantity <= 0:
                raise BookingError(ErrorCode.INVALID_QUANTITY, {"unit_id": selection.id})
        return selections

    def _resolve_line(
        self, inventory: Unit | RoomType, selection: UnitSelection, dates: list[str]
    ) -> _Line:
        if isinstance(inventory, Unit):
            resolved = availability.resolve_unit(inventory, dates)
            if not resolved.available:
                raise BookingError(
                    ErrorCode.UNIT_UNAVAILABLE,
                    {"unit_id": inventory.id, "dates": resolved.booked_dates},
                )
            line = _Line(inventory, selection, 1, date_rates=resolved.date_rates)
        else:
            numbers = availability.allocate_pool(inventory, dates, selection.quantity)
            line = _Line(
                inventory,
                selection,
                selection.quantity,
                numbers=numbers,
                date_rates=availability.resolve_pool(inventory, dates).date_rates,
            )
        line.rate_plan = self._rate_plan(inventory, selection.rate_plan_id)
        return line

    def _rate_plan(self, inventory: Unit | RoomType, rate_plan_id: str) -> RatePlan | None:
        if rate_plan_id == BASIC_RATE_PLAN or rate_plan_id not in inventory.rate_plans:
            return None
        return self.listings.get_rate_plan(rate_plan_id)

    def _price(self, plan: _Plan, session: Session, request: BookingRequest) -> PriceQuote:
        now = self.clock()
        quotes = [
            self.pricing.price_unit(
                line.inventory,
                plan.dates,
                currency=session.currency,
                check_in=plan.check_in,
                guests=request.guests,
                quantity=line.quantity,
                services=line.selection.services,
                rate_plan=line.rate_plan,
                country=request.country,
                date_rates=line.date_rates,
                now=now,
            )
            for line in plan.lines
        ]
        return self.pricing.price_booking(quotes, session.currency, plan.promo)

    def _new_booking_id(self) -> str:
        for _ in range(BOOKING_ID_ATTEMPTS):
            booking_id = generate_booking_id()
            if not self.bookings.exists(booking_id):
                return booking_id
        logger.error("Could not find a free booking ID")
        raise BookingError(ErrorCode.INTERNAL)

    def _build_booking(
        self,
        booking_id: str,
        plan: _Plan,
        quote: PriceQuote,
        session: Session,
        request: BookingRequest,
    ) -> Booking:
        first = plan.lines[0].inventory
        units = [
            BookingUnit(
                id=line.inventory.id,
                quantity=line.quantity,
                total_price=round_money(unit_quote.total_price),
                numbers=line.numbers,
                service_prices=unit_quote.services,
            )
            for line, unit_quote in zip(plan.lines, quote.units)
        ]
        return Booking(
            id=booking_id,
            type=plan.kind,
            listing_id=plan.listing.id,
            listing_owner=plan.listing.owner_uid,
            user=session.uid,
            title=plan.listing.title,
            units=units,
            check_in=plan.check_in.isoformat(),
            check_out=plan.check_out.isoformat(),
            informal=Informal(
                check_in=f"{plan.check_in.isoformat()}T{first.check_in_time}",
                check_out=f"{plan.check_out.isoformat()}T{first.check_out_time}",
            ),
            guests=request.guests,
            discounts=quote.discounts,
            services=quote.services,
            taxes=quote.taxes,
            total_price=quote.total_price,
            currency=quote.currency,
            status=BookingStatus.PENDING,
            promo=request.promo,
            comment=request.comment,
            with_pets=request.with_pets,
            name=request.name,
            last_name=request.last_name,
            email=request.email,
            phone=request.phone,
            country=request.country,
            created_at=self.clock().isoformat(),
        )

    def _calendar_event(self, booking: Booking, plan: _Plan, session: Session) -> CalendarEvent:
        timezone = session.timezone
        if timezone is None:
            user = self.users.get(session.uid)
            timezone = user.get("timezone") if user else None
        start = dt.datetime.fromisoformat(booking.informal.check_in)
        return CalendarEvent(
            uid=uuid.uuid4().hex,
            dtstamp=self.clock().strftime("%Y%m%dT%H%M%S"),
            dtstart=start.strftime("%Y%m%dT%H%M%S"),
            tzid=timezone,
            summary=f"Apartment Booking: {plan.listing.title}",
            description=f"Guests: {booking.guests.adults}",
        )

    # =========================================================================
    # Payment, review and cancellation
    # =========================================================================

    def record_payment(
        self,
        booking_id: str,
        payment_intent_id: str,
        payout_amount: Decimal,
        use_balance: bool = False,
        balance: Decimal = Decimal(0),
    ) -> tuple[Booking, Payment]:
        """Attach an authorized payment to a pending booking and mark it paid.

        Called by the billing collaborator once the guest's card is authorized.

        Raises:
            BookingError: BOOKING_NOT_FOUND, or INVALID_STATUS_TRANSITION if
                the booking is not pending
        """
        booking = self._get_booking(booking_id)
        self._check_transition(booking, BookingStatus.PAID)
        now = self.clock().isoformat()

        payment = self.payments.put(
            Payment(
                id=generate_payment_id(),
                booking_id=booking.id,
                payout_amount=Decimal(payout_amount),
                currency=booking.currency,
                status=PaymentStatus.AUTHORIZED,
                payment_intent_id=payment_intent_id,
                use_balance=use_balance,
                balance=Decimal(balance),
                created_at=now,
            )
        )
        if not self.bookings.update_status(booking, BookingStatus.PAID, now):
            raise BookingError(ErrorCode.INVALID_STATUS_TRANSITION, {"booking_id": booking.id})
        updated = self.bookings.update_fields(
            booking.id, payment_info=PaymentInfo(payment_intent_id=payment_intent_id)
        )
        log_booking_operation(
            logger, "record_payment", booking_id=booking.id, status=BookingStatus.PAID.value
        )
        return updated or booking, payment

    def review_status(
        self, session: Session, booking_id: str, decision: ReviewDecision
    ) -> ReviewResult:
        """Host confirms or declines a paid booking.

        Confirming captures the payment and records the gateway fees,
        lowering the payout; declining voids the authorization.

        Raises:
            BookingError: BOOKING_NOT_FOUND, NOT_LISTING_OWNER,
                INVALID_STATUS_TRANSITION, PAYMENT_NOT_FOUND or PAYMENT_FAILED
        """
        booking = self._get_booking(booking_id)
        listing = self.listings.get(booking.listing_id)
        if listing is None or listing.owner_uid != session.uid:
            raise BookingError(ErrorCode.NOT_LISTING_OWNER, {"booking_id": booking_id})
        target = BookingStatus(decision.value)
        self._check_transition(booking, target)

        payment = self.payments.get_for_booking(booking.id)
        intent_id = (booking.payment_info and booking.payment_info.payment_intent_id) or (
            payment and payment.payment_intent_id
        )
        if not intent_id:
            raise BookingError(ErrorCode.PAYMENT_NOT_FOUND, {"booking_id": booking_id})

        now = self.clock().isoformat()
        try:
            if target == BookingStatus.CONFIRMED:
                intent = self.stripe.capture_payment(intent_id)
            else:
                intent = self.stripe.decline_payment(intent_id)
        except StripeServiceError as e:
            raise BookingError(
                ErrorCode.PAYMENT_FAILED, {"booking_id": booking_id, "reason": str(e)}
            ) from e

        if payment is not None:
            if target == BookingStatus.CONFIRMED:
                self.payments.record_capture(payment, intent.get("fees", []), now)
            else:
                self.payments.update_status(payment, PaymentStatus.DECLINED, now)

        if not self.bookings.update_status(booking, target, now):
            raise BookingError(ErrorCode.INVALID_STATUS_TRANSITION, {"booking_id": booking_id})

        log_booking_operation(
            logger,
            "review_status",
            booking_id=booking.id,
            listing_id=booking.listing_id,
            status=target.value,
        )
        reviewed = booking.model_copy(update={"status": target, "updated_at": now})
        return ReviewResult(
            booking=reviewed,
            intent={k: v for k, v in intent.items() if k != "fees"},
        )

    def cancel_booking(self, session: Session, booking_id: str) -> CancellationResult:
        """Guest cancels a booking.

        Releases exactly the inventory this booking claimed. Without a
        payment the booking is simply cancelled. Otherwise the refund is
        computed from the most restrictive policy among the booked units,
        sent to the gateway, and then booking and payment status, the
        inventory release and any balance credit commit together.

        Raises:
            BookingError: BOOKING_NOT_FOUND, NOT_BOOKING_GUEST,
                ALREADY_CANCELLED, INVALID_STATUS_TRANSITION, BOOKING_FINISHED,
                PAYMENT_FAILED or INVENTORY_CONFLICT
        """
        booking = self._get_booking(booking_id)
        if booking.user != session.uid:
            raise BookingError(ErrorCode.NOT_BOOKING_GUEST, {"booking_id": booking_id})
        if booking.status == BookingStatus.CANCELLED:
            raise BookingError(ErrorCode.ALREADY_CANCELLED, {"booking_id": booking_id})
        self._check_transition(booking, BookingStatus.CANCELLED)

        now = self.clock()
        check_in = availability.parse_date(booking.check_in)
        if availability.parse_date(booking.check_out) <= now.date():
            raise BookingError(ErrorCode.BOOKING_FINISHED, {"booking_id": booking_id})

        docs = self.inventory.get_many(booking.type, booking.unit_ids)
        policy = self.refund_policy.most_restrictive([doc.cancellation for doc in docs])
        payment = self.payments.get_for_booking(booking.id)
        stamp = now.isoformat()

        if payment is None:
            self._commit_cancel(booking, [], stamp)
            log_booking_operation(
                logger, "cancel_booking", booking_id=booking.id, status="cancelled", refund="none"
            )
            return CancellationResult(
                message="Booking cancelled without payment",
                booking=booking.model_copy(
                    update={"status": BookingStatus.CANCELLED, "updated_at": stamp}
                ),
            )

        days_until = (dt.datetime.combine(check_in, dt.time.min) - now).total_seconds() / 86400
        refund = self.refund_policy.evaluate(
            payment.payout_amount,
            days_until,
            policy,
            confirmed=booking.status == BookingStatus.CONFIRMED,
        )

        intent_id = payment.payment_intent_id or (
            booking.payment_info and booking.payment_info.payment_intent_id
        )
        refunded = None
        if refund["refund_fraction"] > 0 and intent_id:
            try:
                refunded = self.stripe.refund_booking(intent_id, refund["refund_fraction"])
            except StripeServiceError as e:
                raise BookingError(
                    ErrorCode.PAYMENT_FAILED, {"booking_id": booking_id, "reason": str(e)}
                ) from e

        extra = [
            self.payments.cancel_item(
                payment, refund["amount_after_cancelling"], refund["refund_amount"], stamp
            )
        ]
        if payment.use_balance and payment.balance:
            extra.append(self.users.credit_balance_item(booking.user, payment.balance))
        try:
            self._commit_cancel(booking, extra, stamp)
        except BookingError as e:
            if refunded is not None:
                # Gateway already moved money; needs manual reconciliation.
                log_booking_operation(
                    logger,
                    "cancel_booking",
                    booking_id=booking.id,
                    listing_id=booking.listing_id,
                    status=booking.status.value,
                    payment_intent_id=intent_id,
                    refund_status=refunded.get("status"),
                    refund_amount=refund["refund_amount"],
                    error=f"refund issued but cancellation not committed: {e.code.value}",
                )
            raise

        log_booking_operation(
            logger,
            "cancel_booking",
            booking_id=booking.id,
            status="cancelled",
            refund_fraction=refund["refund_fraction"],
            refund_amount=refund["refund_amount"],
        )
        return CancellationResult(
            message="Booking cancelled",
            booking=booking.model_copy(
                update={"status": BookingStatus.CANCELLED, "updated_at": stamp}
            ),
            refund=dict(refund),
        )

    def _commit_cancel(self, booking: Booking, extra: list[dict[str, Any]], stamp: str) -> None:
        """Release the booking's inventory and cancel it in one transaction.

        Ledgers are re-read on each attempt, so a concurrent booking on the
        same unit only costs a retry.
        """
        for _ in range(LEDGER_WRITE_ATTEMPTS):
            items = []
            for doc in self.inventory.get_many(booking.type, booking.unit_ids):
                if isinstance(doc, Unit):
                    released = availability.release_unit(doc, booking.id)
                else:
                    released = availability.release_pool(doc, booking.id)
                items.append(self.inventory.ledger_update_item(released, doc.version))
            items.append(
                self.bookings.status_update_item(booking, BookingStatus.CANCELLED, stamp)
            )
            if self.db.transact_write(items + extra):
                return
            current = self.bookings.get(booking.id)
            if current is None or current.status != booking.status:
                raise BookingError(
                    ErrorCode.INVALID_STATUS_TRANSITION, {"booking_id": booking.id}
                )
        raise BookingError(ErrorCode.INVENTORY_CONFLICT, {"booking_id": booking.id})

    # =========================================================================
    # Booking reads and small updates
    # =========================================================================

    def get_guest_bookings(self, session: Session) -> list[Booking]:
        """Bookings of the session's user, newest first, with localized labels."""
        bookings = sorted(
            self.bookings.list_for_user(session.uid),
            key=lambda b: b.created_at,
            reverse=True,
        )
        return self.localization.translate_booking_prices(bookings, session.language)

    def get_listing_bookings(self, session: Session, listing_id: str) -> list[Booking]:
        """Bookings of a listing, for its owner or managers."""
        self._managed_listing(session, listing_id)
        bookings = sorted(
            self.bookings.list_for_listing(listing_id),
            key=lambda b: b.created_at,
            reverse=True,
        )
        return self.localization.translate_booking_prices(bookings, session.language)

    def set_read(self, session: Session, booking_id: str) -> Booking:
        """Host marks a booking notification as read."""
        booking = self._get_booking(booking_id)
        self._managed_listing(session, booking.listing_id)
        updated = self.bookings.update_fields(
            booking.id, read=True, updated_at=self.clock().isoformat()
        )
        if updated is None:
            raise BookingError(ErrorCode.BOOKING_NOT_FOUND, {"booking_id": booking_id})
        return updated

    def update_guests(self, session: Session, booking_id: str, guests: Guests) -> Booking:
        """Change guest counts; allowed for the guest, the host and managers."""
        booking = self._get_booking(booking_id)
        if session.uid not in (booking.user, booking.listing_owner):
            listing = self.listings.get(booking.listing_id)
            if listing is None or session.uid not in listing.managers:
                raise BookingError(ErrorCode.NOT_BOOKING_GUEST, {"booking_id": booking_id})
        if guests.adults <= 0:
            raise BookingError(ErrorCode.ADULT_REQUIRED)
        updated = self.bookings.update_fields(
            booking.id, guests=guests, updated_at=self.clock().isoformat()
        )
        if updated is None:
            raise BookingError(ErrorCode.BOOKING_NOT_FOUND, {"booking_id": booking_id})
        return updated

    def check_promo(self, code: str) -> Promo:
        promo = self.promos.get(code)
        if promo is None:
            raise BookingError(ErrorCode.PROMO_NOT_FOUND, {"code": code})
        return promo

    # =========================================================================
    # Host calendar edits
    # =========================================================================

    def block_dates(
        self,
        session: Session,
        listing_id: str,
        dates: list[str],
        unit_id: str | None = None,
        count: int = 0,
    ) -> Unit | RoomType:
        """Block dates on a unit, or ``count`` rooms per date on a room type."""
        return self._edit_calendar(
            session,
            listing_id,
            unit_id,
            "block_dates",
            lambda inv: availability.block_dates(
                inv, dates, count, source=self.settings.booking_source
            ),
        )

    def unblock_dates(
        self,
        session: Session,
        listing_id: str,
        dates: list[str],
        unit_id: str | None = None,
        count: int = 0,
    ) -> Unit | RoomType:
        """Remove manual blocks; bookings are never touched."""
        return self._edit_calendar(
            session,
            listing_id,
            unit_id,
            "unblock_dates",
            lambda inv: availability.unblock_dates(inv, dates, count),
        )

    def adjust_prices(
        self,
        session: Session,
        listing_id: str,
        dates: list[str],
        rate: Decimal,
        currency: str,
        unit_id: str | None = None,
    ) -> Unit | RoomType:
        """Set a custom nightly rate on dates."""
        if not dates:
            raise BookingError(ErrorCode.INVALID_REQUEST, {"reason": "Dates are required"})
        for day in dates:
            availability.parse_date(day)
        return self._edit_calendar(
            session,
            listing_id,
            unit_id,
            "adjust_prices",
            lambda inv: availability.adjust_prices(inv, dates, Decimal(rate), currency),
        )

    def reset_prices(
        self,
        session: Session,
        listing_id: str,
        dates: list[str],
        unit_id: str | None = None,
    ) -> Unit | RoomType:
        """Remove custom rates from dates."""
        if not dates:
            raise BookingError(ErrorCode.INVALID_REQUEST, {"reason": "Dates are required"})
        return self._edit_calendar(
            session,
            listing_id,
            unit_id,
            "reset_prices",
            lambda inv: availability.reset_prices(inv, dates),
        )

    def _edit_calendar(
        self,
        session: Session,
        listing_id: str,
        unit_id: str | None,
        operation: str,
        mutate: Callable[[Unit | RoomType], Unit | RoomType],
    ) -> Unit | RoomType:
        listing = self._managed_listing(session, listing_id)
        if listing.form == InventoryKind.MULTIUNIT:
            if not unit_id:
                raise BookingError(ErrorCode.UNIT_NOT_FOUND, {"reason": "unitId is required"})
            if unit_id not in listing.multiunit:
                raise BookingError(ErrorCode.UNIT_NOT_IN_LISTING, {"unit_id": unit_id})
            target = unit_id
        else:
            target = listing.unit

        for _ in range(LEDGER_WRITE_ATTEMPTS):
            inventory = self.inventory.get(listing.form, target) if target else None
            if inventory is None:
                raise BookingError(ErrorCode.UNIT_NOT_FOUND, {"unit_id": target})
            updated = mutate(inventory)
            if self.inventory.save_ledger(updated, inventory.version):
                log_booking_operation(
                    logger, operation, listing_id=listing.id, unit_ids=[inventory.id]
                )
                return updated.model_copy(update={"version": inventory.version + 1})
        raise BookingError(ErrorCode.INVENTORY_CONFLICT, {"unit_id": target})

    # =========================================================================
    # Helpers
    # =========================================================================

    def _get_booking(self, booking_id: str) -> Booking:
        booking = self.bookings.get(booking_id)
        if booking is None:
            raise BookingError(ErrorCode.BOOKING_NOT_FOUND, {"booking_id": booking_id})
        return booking

    def _managed_listing(self, session: Session, listing_id: str) -> Listing:
        listing = self.listings.get(listing_id)
        if listing is None:
            raise BookingError(ErrorCode.LISTING_NOT_FOUND, {"listing_id": listing_id})
        if not listing.can_manage(session.uid):
            raise BookingError(ErrorCode.NOT_LISTING_OWNER, {"listing_id": listing_id})
        return listing

    def _check_transition(self, booking: Booking, target: BookingStatus) -> None:
        if not can_transition(booking.status, target):
            raise BookingError(
                ErrorCode.INVALID_STATUS_TRANSITION,
                {"booking_id": booking.id, "from": booking.status.value, "to": target.value},
            )
