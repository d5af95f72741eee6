"""Pricing service for stay price calculations.

Prices one unit or room type across a stay, then aggregates the units of a
booking:

1. Every night gets one rate: a date override (fixed rate or percentage of
   the base rate) wins, then the weekend deal, then a holiday adjustment,
   otherwise the base rate.
2. Discount rules are collected as fractions, recorded as individual signed
   lines, and their sum is applied once to the unit's rate subtotal.
3. Selected services (fixed or percentage of the rate subtotal) and taxes
   (fixed or percentage of rate subtotal plus services) are added.
4. The promo code is applied once to the booking total, which is rounded
   half away from zero at the very end.

Amounts in the unit's currency are converted to the booking currency up
front, once per unit.
"""

import datetime as dt
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from ..config import BookingSettings, get_settings
from ..models import (
    AdjustmentType,
    DatePrice,
    Fee,
    FeeType,
    Guests,
    NightRate,
    PriceLine,
    PriceQuote,
    Prices,
    Promo,
    RatePlan,
    RoomType,
    ServiceSelection,
    Unit,
    UnitQuote,
)

if TYPE_CHECKING:
    from .currency import CurrencyRateService
    from .holidays import HolidayService

BASE_DISCOUNT = "Base Discount"
LAST_MINUTE_DISCOUNT = "Last Minute Discount"
DAY_DEAL = "Day Deal"
COUNTRY_DISCOUNT = "Country Discount"
GUESTS_DEAL = "Guests Deal"
PROMO_CODE = "Promocode"


def round_money(value: Decimal) -> Decimal:
    """Round to whole currency units, halves away from zero."""
    return Decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP)


def signed_discount(
    amount: Decimal, fraction: Decimal, direction: AdjustmentType = AdjustmentType.REDUCE
) -> Decimal:
    """Rounded discount line for ``amount``: negative reduces, positive increases."""
    rounded = round_money(amount * fraction)
    return -rounded if direction == AdjustmentType.REDUCE else rounded


class PricingService:
    """Service for stay price calculations."""

    def __init__(
        self,
        holidays: "HolidayService",
        currency: "CurrencyRateService",
        settings: BookingSettings | None = None,
    ) -> None:
        """Initialize pricing service.

        Args:
            holidays: Weekend and holiday calendar
            currency: Exchange rate lookups
            settings: Engine settings; defaults to the environment
        """
        self.holidays = holidays
        self.currency = currency
        self.settings = settings or get_settings()

    def price_unit(
        self,
        unit: Unit | RoomType,
        dates: list[str],
        *,
        currency: str,
        check_in: dt.date,
        guests: Guests,
        quantity: int = 1,
        services: list[ServiceSelection] | None = None,
        rate_plan: RatePlan | None = None,
        country: str | None = None,
        date_rates: dict[str, DatePrice] | None = None,
        now: dt.datetime | None = None,
    ) -> UnitQuote:
        """Price one unit (or ``quantity`` rooms of a room type) for ``dates``.

        Args:
            unit: Unit or room type being booked
            dates: Nights of the stay
            currency: Booking currency
            check_in: Check-in date, for the last-minute rule
            guests: Guest counts, for the guests rule
            quantity: Rooms booked (pools); per-room amounts are multiplied by it
            services: Services the guest selected
            rate_plan: Selected rate plan replacing the base rate and fees
            country: Guest country, for the country rule
            date_rates: Price overrides by date; read from the ledger if omitted
            now: Current time, for the last-minute rule

        Returns:
            UnitQuote with nightly rates and itemized lines
        """
        prices = self._effective_prices(unit.prices, rate_plan)
        fx = self.currency.get(f"{prices.currency}-{currency}")
        base_rate = prices.rate * fx
        if date_rates is None:
            date_rates = self._ledger_rates(unit, dates)

        night_rates = self._night_rates(
            prices, dates, base_rate, currency, date_rates
        )
        rates_total = sum((n.rate for n in night_rates), Decimal(0))

        discounts, fraction = self._discount_lines(
            prices, rates_total, len(dates), check_in, guests, country, now
        )
        discount_total = round_money(rates_total * fraction)
        # Discounts never take the rate subtotal below zero
        discount_total = min(discount_total, rates_total)
        rates_subtotal = rates_total - discount_total

        selected = {s.id: s for s in services or []}
        service_lines = self._service_lines(unit.id, prices.other_fee, selected, rates_subtotal, fx)
        services_total = sum((line.price for line in service_lines), Decimal(0))
        tax_lines = self._tax_lines(unit.id, prices.taxes, rates_subtotal + services_total, fx)
        taxes_total = sum((line.price for line in tax_lines), Decimal(0))

        per_room = rates_subtotal + services_total + taxes_total
        return UnitQuote(
            unit_id=unit.id,
            quantity=quantity,
            nights=len(dates),
            rates_total=rates_total * quantity,
            discount_total=discount_total * quantity,
            total_price=per_room * quantity,
            night_rates=night_rates,
            discounts=[_scaled(line, quantity) for line in discounts],
            services=[_scaled(line, quantity) for line in service_lines],
            taxes=[_scaled(line, quantity) for line in tax_lines],
        )

    def price_booking(
        self,
        unit_quotes: list[UnitQuote],
        currency: str,
        promo: Promo | None = None,
    ) -> PriceQuote:
        """Aggregate unit quotes and apply the promo code once.

        Args:
            unit_quotes: Quotes of every selected unit
            currency: Booking currency
            promo: Promo code to apply, if any

        Returns:
            PriceQuote with the rounded booking total
        """
        total = sum((q.total_price for q in unit_quotes), Decimal(0))
        discounts = [line for q in unit_quotes for line in q.discounts]
        promo_line = None
        if promo is not None:
            promo_line = PriceLine(
                name=PROMO_CODE, price=-round_money(total * promo.discount / 100)
            )
            discounts.append(promo_line)
            total += promo_line.price

        return PriceQuote(
            currency=currency,
            total_price=round_money(max(total, Decimal(0))),
            units=unit_quotes,
            discounts=discounts,
            services=[line for q in unit_quotes for line in q.services],
            taxes=[line for q in unit_quotes for line in q.taxes],
            promo=promo_line,
        )

    # Per-unit steps

    def _effective_prices(self, prices: Prices, rate_plan: RatePlan | None) -> Prices:
        if rate_plan is None:
            return prices
        return prices.model_copy(
            update={
                "rate": rate_plan.prices.rate,
                "other_fee": rate_plan.prices.other_fee,
            }
        )

    def _ledger_rates(self, unit: Unit | RoomType, dates: list[str]) -> dict[str, DatePrice]:
        rates = {}
        for day in dates:
            entry = unit.entry_for(day)
            if entry is not None and entry.price is not None:
                rates[day] = entry.price
        return rates

    def _night_rates(
        self,
        prices: Prices,
        dates: list[str],
        base_rate: Decimal,
        currency: str,
        date_rates: dict[str, DatePrice],
    ) -> list[NightRate]:
        rules = prices.rules
        weekends = set(self.holidays.is_weekend(dates)) if rules.weekends_deal else set()
        holiday_days = {
            h["date"]: h for h in self.holidays.find_holiday_days_in_range(rules.holidays, dates)
        }
        holiday_rules = {rule.name: rule for rule in rules.holidays}

        nights = []
        for day in dates:
            override = date_rates.get(day)
            if override is not None:
                rate = self._override_rate(override, base_rate, prices.currency, currency)
                nights.append(NightRate(date=day, rate=rate, source="override"))
            elif day in weekends:
                rate = base_rate + base_rate * rules.weekends_deal
                nights.append(NightRate(date=day, rate=rate, source="weekend"))
            elif day in holiday_days:
                rule = holiday_rules[holiday_days[day]["holiday"]]
                deal = signed_discount(base_rate, rule.discount, rule.type)
                nights.append(NightRate(date=day, rate=base_rate + deal, source="holiday"))
            else:
                nights.append(NightRate(date=day, rate=base_rate, source="base"))
        return nights

    def _override_rate(
        self,
        override: DatePrice,
        base_rate: Decimal,
        unit_currency: str,
        currency: str,
    ) -> Decimal:
        if override.percentage is not None:
            return base_rate * override.percentage / 100
        if override.rate is None:
            return base_rate
        source = override.currency or unit_currency
        return self.currency.convert(override.rate, source, currency)

    def _discount_lines(
        self,
        prices: Prices,
        rates_total: Decimal,
        nights: int,
        check_in: dt.date,
        guests: Guests,
        country: str | None,
        now: dt.datetime | None,
    ) -> tuple[list[PriceLine], Decimal]:
        """Match discount rules; return their lines and the summed fraction."""
        rules = prices.rules
        lines: list[PriceLine] = []
        fraction = Decimal(0)

        def add(name: str, discount: Decimal, direction: AdjustmentType) -> None:
            nonlocal fraction
            fraction += discount if direction == AdjustmentType.REDUCE else -discount
            lines.append(
                PriceLine(name=name, price=signed_discount(rates_total, discount, direction))
            )

        if rules.base_discount:
            add(BASE_DISCOUNT, rules.base_discount, AdjustmentType.REDUCE)

        if rules.last_minute_discount and self._is_last_minute(check_in, now):
            add(LAST_MINUTE_DISCOUNT, rules.last_minute_discount, AdjustmentType.REDUCE)

        eligible = [d for d in rules.days_discounts if d.days <= nights]
        if eligible:
            deal = max(eligible, key=lambda d: d.days)
            add(DAY_DEAL, deal.discount, deal.type)

        country_deal = next(
            (c for c in rules.countries_discounts if country and c.country == country), None
        )
        if country_deal:
            add(COUNTRY_DISCOUNT, country_deal.discount, country_deal.type)

        guests_deal = next(
            (g for g in rules.guests_discounts if g.guests == guests.adults + guests.children),
            None,
        )
        if guests_deal:
            add(GUESTS_DEAL, guests_deal.discount, guests_deal.type)

        return lines, fraction

    def _is_last_minute(self, check_in: dt.date, now: dt.datetime | None) -> bool:
        now = now or dt.datetime.now()
        start = dt.datetime.combine(check_in, dt.time.min)
        days_left = (start - now).total_seconds() / 86400
        return days_left <= self.settings.last_minute_window_days

    def _service_lines(
        self,
        unit_id: str,
        fees: list[Fee],
        selected: dict[str, ServiceSelection],
        rates_subtotal: Decimal,
        fx: Decimal,
    ) -> list[PriceLine]:
        lines = []
        for fee in fees:
            selection = selected.get(fee.id)
            if selection is None or not fee.price:
                continue
            quantity = selection.quantity if fee.reuse else 1
            if fee.type == FeeType.FIXED:
                price = round_money(fee.price * fx * quantity)
                percentage = None
            else:
                price = round_money(rates_subtotal * fee.price / 100 * quantity)
                percentage = fee.price
            lines.append(
                PriceLine(
                    id=fee.id,
                    name=fee.name,
                    price=price,
                    type=fee.type,
                    percentage=percentage,
                    quantity=quantity,
                    unit_id=unit_id,
                )
            )
        return lines

    def _tax_lines(
        self,
        unit_id: str,
        taxes: list[Fee],
        taxable: Decimal,
        fx: Decimal,
    ) -> list[PriceLine]:
        """Taxes on the rate subtotal plus services; taxes never compound."""
        lines = []
        for tax in taxes:
            if not tax.price:
                continue
            if tax.type == FeeType.FIXED:
                price = round_money(tax.price * fx)
                percentage = None
            else:
                price = round_money(taxable * tax.price / 100)
                percentage = tax.price
            lines.append(
                PriceLine(
                    id=tax.id,
                    name=tax.name,
                    price=price,
                    type=tax.type,
                    percentage=percentage,
                    unit_id=unit_id,
                )
            )
        return lines


def _scaled(line: PriceLine, quantity: int) -> PriceLine:
    if quantity == 1:
        return line
    return line.model_copy(update={"price": line.price * quantity})
