"""Unit tests for PricingService.

Test categories:
- Nightly rates: base, weekend, holiday and date overrides
- Discount stack: base, last minute, days, country and guests rules
- Services and taxes
- Room-type quantity, rate plans and currency conversion
- Booking aggregation and promo codes
"""

import datetime as dt
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from booking_core.config import BookingSettings
from booking_core.models import (
    AdjustmentType,
    BookingError,
    DatePrice,
    ErrorCode,
    Fee,
    FeeType,
    Guests,
    LedgerEntry,
    Prices,
    PricingRules,
    Promo,
    RatePlan,
    ServiceSelection,
)
from booking_core.models.inventory import (
    CountryDiscount,
    DaysDiscount,
    GuestsDiscount,
    HolidayRule,
)
from booking_core.models.listing import RatePlanPrices
from booking_core.services import availability
from booking_core.services.currency import CurrencyRateService
from booking_core.services.holidays import HolidayService
from booking_core.services.pricing import (
    BASE_DISCOUNT,
    DAY_DEAL,
    LAST_MINUTE_DISCOUNT,
    PricingService,
    round_money,
    signed_discount,
)

NOW = dt.datetime(2025, 5, 1, 12, 0)
# Monday to Wednesday nights, no weekend, no default holiday
WEEKDAYS = ["2025-06-02", "2025-06-03", "2025-06-04"]
WEEKDAY_CHECK_IN = dt.date(2025, 6, 2)


@pytest.fixture
def rates_db() -> MagicMock:
    """DynamoDB double holding EUR-USD = 1.1 and USD-GBP = 0.8."""
    stored = {"EUR-USD": Decimal("1.1"), "USD-GBP": Decimal("0.8")}
    db = MagicMock()
    db.get_item.side_effect = lambda table, key: (
        {"pair": key["pair"], "rate": stored[key["pair"]]} if key["pair"] in stored else None
    )
    return db


@pytest.fixture
def pricing_service(rates_db: MagicMock) -> PricingService:
    return PricingService(HolidayService(), CurrencyRateService(rates_db), BookingSettings())


def quote_unit(service: PricingService, unit, dates=WEEKDAYS, **kwargs):
    kwargs.setdefault("currency", "USD")
    kwargs.setdefault("check_in", dt.date.fromisoformat(dates[0]))
    kwargs.setdefault("guests", Guests(adults=2))
    kwargs.setdefault("now", NOW)
    return service.price_unit(unit, dates, **kwargs)


def with_rules(make_unit, **rules):
    return make_unit(
        prices=Prices(rate=Decimal("100"), currency="USD", rules=PricingRules(**rules))
    )


class TestRounding:
    """Tests for money rounding helpers."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("2.5", "3"), ("3.5", "4"), ("-2.5", "-3"), ("2.49", "2")],
    )
    def test_round_money_is_half_away_from_zero(self, value: str, expected: str) -> None:
        assert round_money(Decimal(value)) == Decimal(expected)

    def test_signed_discount_direction(self) -> None:
        assert signed_discount(Decimal("300"), Decimal("0.1")) == Decimal("-30")
        assert signed_discount(
            Decimal("300"), Decimal("0.1"), AdjustmentType.INCREASE
        ) == Decimal("30")


class TestNightlyRates:
    """Tests for per-night rate selection."""

    def test_plain_stay_is_rate_times_nights(self, pricing_service, make_unit) -> None:
        """Rate 100, three nights, no rules."""
        quote = quote_unit(pricing_service, make_unit())
        assert quote.total_price == Decimal("300")
        assert [n.source for n in quote.night_rates] == ["base", "base", "base"]

    def test_weekend_deal_raises_weekend_nights(self, pricing_service, make_unit) -> None:
        unit = with_rules(make_unit, weekends_deal=Decimal("0.2"))
        # Friday, Saturday, Sunday nights
        quote = quote_unit(pricing_service, unit, ["2025-06-06", "2025-06-07", "2025-06-08"])
        assert [n.rate for n in quote.night_rates] == [
            Decimal("100"),
            Decimal("120"),
            Decimal("120"),
        ]
        assert quote.total_price == Decimal("340")

    def test_holiday_rule_adjusts_matching_night(self, pricing_service, make_unit) -> None:
        unit = with_rules(
            make_unit,
            holidays=[HolidayRule(name="Christmas", discount=Decimal("0.5"))],
        )
        quote = quote_unit(pricing_service, unit, ["2025-12-24", "2025-12-25"])
        assert [n.source for n in quote.night_rates] == ["base", "holiday"]
        assert quote.total_price == Decimal("250")

    def test_reducing_holiday_rule(self, pricing_service, make_unit) -> None:
        unit = with_rules(
            make_unit,
            holidays=[
                HolidayRule(
                    name="Christmas", discount=Decimal("0.2"), type=AdjustmentType.REDUCE
                )
            ],
        )
        quote = quote_unit(pricing_service, unit, ["2025-12-25"])
        assert quote.total_price == Decimal("80")

    def test_weekend_deal_wins_over_holiday(self, pricing_service, make_unit) -> None:
        unit = with_rules(
            make_unit,
            weekends_deal=Decimal("0.2"),
            holidays=[HolidayRule(name="All Saints' Day", discount=Decimal("0.5"))],
        )
        # 2025-11-01 is a Saturday
        quote = quote_unit(pricing_service, unit, ["2025-11-01"])
        assert quote.night_rates[0].source == "weekend"
        assert quote.total_price == Decimal("120")

    def test_date_override_wins_over_weekend(self, pricing_service, make_unit) -> None:
        unit = with_rules(make_unit, weekends_deal=Decimal("0.2"))
        unit = unit.model_copy(
            update={
                "not_available": [
                    LedgerEntry(date="2025-06-07", price=DatePrice(rate=Decimal("200")))
                ]
            }
        )
        quote = quote_unit(pricing_service, unit, ["2025-06-07"])
        assert quote.night_rates[0].source == "override"
        assert quote.total_price == Decimal("200")

    def test_percentage_override_is_share_of_base_rate(
        self, pricing_service, make_unit
    ) -> None:
        quote = quote_unit(
            pricing_service,
            make_unit(),
            ["2025-06-02"],
            date_rates={"2025-06-02": DatePrice(percentage=Decimal("50"))},
        )
        assert quote.total_price == Decimal("50")

    def test_empty_override_falls_back_to_base_rate(self, pricing_service, make_unit) -> None:
        quote = quote_unit(
            pricing_service,
            make_unit(),
            ["2025-06-02"],
            date_rates={"2025-06-02": DatePrice()},
        )
        assert quote.total_price == Decimal("100")

    def test_override_in_other_currency_is_converted(self, pricing_service, make_unit) -> None:
        quote = quote_unit(
            pricing_service,
            make_unit(),
            ["2025-06-02"],
            date_rates={"2025-06-02": DatePrice(rate=Decimal("100"), currency="EUR")},
        )
        assert quote.total_price == Decimal("110")


class TestDiscounts:
    """Tests for the discount stack."""

    def test_base_discount(self, pricing_service, make_unit) -> None:
        """Rate 100, three nights, 10% base discount."""
        quote = quote_unit(pricing_service, with_rules(make_unit, base_discount=Decimal("0.1")))
        assert quote.total_price == Decimal("270")
        assert [(d.name, d.price) for d in quote.discounts] == [(BASE_DISCOUNT, Decimal("-30"))]

    def test_last_minute_applies_inside_window(self, pricing_service, make_unit) -> None:
        unit = with_rules(make_unit, last_minute_discount=Decimal("0.1"))
        quote = quote_unit(pricing_service, unit, now=dt.datetime(2025, 5, 28, 12, 0))
        assert [d.name for d in quote.discounts] == [LAST_MINUTE_DISCOUNT]
        assert quote.total_price == Decimal("270")

    def test_last_minute_ignored_outside_window(self, pricing_service, make_unit) -> None:
        unit = with_rules(make_unit, last_minute_discount=Decimal("0.1"))
        quote = quote_unit(pricing_service, unit)
        assert quote.discounts == []
        assert quote.total_price == Decimal("300")

    def test_largest_eligible_days_deal_wins(self, pricing_service, make_unit) -> None:
        unit = with_rules(
            make_unit,
            days_discounts=[
                DaysDiscount(days=2, discount=Decimal("0.05")),
                DaysDiscount(days=3, discount=Decimal("0.1")),
                DaysDiscount(days=7, discount=Decimal("0.3")),
            ],
        )
        quote = quote_unit(pricing_service, unit)
        assert [(d.name, d.price) for d in quote.discounts] == [(DAY_DEAL, Decimal("-30"))]

    def test_increasing_country_rule(self, pricing_service, make_unit) -> None:
        unit = with_rules(
            make_unit,
            countries_discounts=[
                CountryDiscount(
                    country="ES", discount=Decimal("0.1"), type=AdjustmentType.INCREASE
                )
            ],
        )
        assert quote_unit(pricing_service, unit, country="ES").total_price == Decimal("330")
        assert quote_unit(pricing_service, unit, country="FR").total_price == Decimal("300")

    def test_guests_rule_matches_adults_and_children(self, pricing_service, make_unit) -> None:
        unit = with_rules(
            make_unit,
            guests_discounts=[GuestsDiscount(guests=3, discount=Decimal("0.1"))],
        )
        matching = quote_unit(pricing_service, unit, guests=Guests(adults=2, children=1))
        other = quote_unit(pricing_service, unit, guests=Guests(adults=2, infants=1))
        assert matching.total_price == Decimal("270")
        assert other.total_price == Decimal("300")

    def test_fractions_are_summed_before_applying(self, pricing_service, make_unit) -> None:
        unit = with_rules(
            make_unit,
            base_discount=Decimal("0.1"),
            days_discounts=[DaysDiscount(days=1, discount=Decimal("0.05"))],
        )
        quote = quote_unit(pricing_service, unit)
        assert quote.discount_total == Decimal("45")
        assert sum(d.price for d in quote.discounts) == Decimal("-45")
        assert quote.total_price == Decimal("255")

    def test_discounts_never_push_rates_below_zero(self, pricing_service, make_unit) -> None:
        unit = with_rules(
            make_unit,
            base_discount=Decimal("0.8"),
            days_discounts=[DaysDiscount(days=1, discount=Decimal("0.5"))],
        )
        assert quote_unit(pricing_service, unit).total_price == Decimal("0")

    def test_extra_reducing_rule_never_raises_price(self, pricing_service, make_unit) -> None:
        base = quote_unit(pricing_service, with_rules(make_unit, base_discount=Decimal("0.1")))
        more = quote_unit(
            pricing_service,
            with_rules(
                make_unit,
                base_discount=Decimal("0.1"),
                guests_discounts=[GuestsDiscount(guests=2, discount=Decimal("0.05"))],
            ),
        )
        assert more.total_price <= base.total_price


class TestServicesAndTaxes:
    """Tests for selected services and taxes."""

    @pytest.fixture
    def unit(self, make_unit):
        return make_unit(
            prices=Prices(
                rate=Decimal("100"),
                currency="USD",
                other_fee=[
                    Fee(id="cleaning", name="Cleaning", price=Decimal("30")),
                    Fee(id="breakfast", name="Breakfast", price=Decimal("10"), reuse=True),
                    Fee(id="free", name="Welcome drink", price=Decimal("0")),
                    Fee(
                        id="service",
                        name="Service",
                        price=Decimal("10"),
                        type=FeeType.PERCENTAGE,
                    ),
                ],
                taxes=[
                    Fee(id="vat", name="VAT", price=Decimal("10"), type=FeeType.PERCENTAGE),
                    Fee(id="city", name="City tax", price=Decimal("5")),
                ],
            )
        )

    def test_only_selected_services_are_charged(self, pricing_service, unit) -> None:
        quote = quote_unit(
            pricing_service, unit, services=[ServiceSelection(id="cleaning")]
        )
        assert [(s.id, s.price) for s in quote.services] == [("cleaning", Decimal("30"))]

    def test_zero_price_service_is_skipped(self, pricing_service, unit) -> None:
        quote = quote_unit(pricing_service, unit, services=[ServiceSelection(id="free")])
        assert quote.services == []

    def test_reusable_service_counts_quantity(self, pricing_service, unit) -> None:
        quote = quote_unit(
            pricing_service, unit, services=[ServiceSelection(id="breakfast", quantity=3)]
        )
        assert quote.services[0].price == Decimal("30")
        assert quote.services[0].quantity == 3

    def test_percentage_service_uses_discounted_rates(self, pricing_service, unit) -> None:
        unit = unit.model_copy(
            update={
                "prices": unit.prices.model_copy(
                    update={"rules": PricingRules(base_discount=Decimal("0.1")), "taxes": []}
                )
            }
        )
        quote = quote_unit(pricing_service, unit, services=[ServiceSelection(id="service")])
        assert quote.services[0].price == Decimal("27")
        assert quote.total_price == Decimal("297")

    def test_taxes_apply_to_rates_and_services(self, pricing_service, unit) -> None:
        """VAT 10% of (300 + 30), plus a fixed 5 city tax."""
        quote = quote_unit(
            pricing_service, unit, services=[ServiceSelection(id="cleaning")]
        )
        assert [(t.id, t.price) for t in quote.taxes] == [
            ("vat", Decimal("33")),
            ("city", Decimal("5")),
        ]
        assert quote.total_price == Decimal("368")


class TestQuantityPlansAndCurrency:
    """Tests for pools, rate plans and currency conversion."""

    def test_pool_quantity_multiplies_amounts(self, pricing_service, make_room_type) -> None:
        room_type = make_room_type(
            prices=Prices(
                rate=Decimal("50"),
                currency="USD",
                rules=PricingRules(base_discount=Decimal("0.1")),
            )
        )
        quote = quote_unit(pricing_service, room_type, quantity=2)
        assert quote.total_price == Decimal("270")
        assert quote.discounts[0].price == Decimal("-30")

    def test_rate_plan_replaces_base_rate(self, pricing_service, make_unit) -> None:
        plan = RatePlan(id="nonref", name="Non refundable", prices=RatePlanPrices(rate=80))
        quote = quote_unit(pricing_service, make_unit(), rate_plan=plan)
        assert quote.total_price == Decimal("240")

    def test_base_rate_is_converted_to_booking_currency(
        self, pricing_service, make_unit
    ) -> None:
        unit = make_unit(prices=Prices(rate=Decimal("100"), currency="EUR"))
        assert quote_unit(pricing_service, unit).total_price == Decimal("330")

    def test_inverse_pair_is_used_when_direct_pair_missing(
        self, pricing_service, make_unit
    ) -> None:
        unit = make_unit(prices=Prices(rate=Decimal("80"), currency="GBP"))
        assert quote_unit(pricing_service, unit).total_price == Decimal("300")

    def test_missing_rate_is_an_internal_error(self, pricing_service, make_unit) -> None:
        unit = make_unit(prices=Prices(rate=Decimal("100"), currency="JPY"))
        with pytest.raises(BookingError) as exc_info:
            quote_unit(pricing_service, unit)
        assert exc_info.value.code == ErrorCode.CURRENCY_RATE_MISSING


class TestBookingAggregation:
    """Tests for price_booking."""

    def test_promo_applies_once_to_total(self, pricing_service, make_unit) -> None:
        """Promo of 20% on a 300 total."""
        quote = quote_unit(pricing_service, make_unit())
        booking = pricing_service.price_booking(
            [quote], "USD", Promo(code="SUMMER", discount=Decimal("20"))
        )
        assert booking.promo.price == Decimal("-60")
        assert booking.total_price == Decimal("240")

    def test_units_are_summed(self, pricing_service, make_unit, make_room_type) -> None:
        quotes = [
            quote_unit(pricing_service, make_unit()),
            quote_unit(pricing_service, make_room_type(), quantity=2),
        ]
        booking = pricing_service.price_booking(quotes, "USD")
        assert booking.total_price == Decimal("600")
        assert booking.promo is None

    def test_total_is_rounded_once_at_the_end(self, pricing_service, make_unit) -> None:
        unit = make_unit(prices=Prices(rate=Decimal("33.3"), currency="USD"))
        quote = quote_unit(pricing_service, unit)
        assert quote.total_price == Decimal("99.9")
        assert pricing_service.price_booking([quote], "USD").total_price == Decimal("100")


class TestStayLength:
    """Adding nights to a stay, all else fixed, never lowers its total."""

    @pytest.mark.parametrize(
        "prices",
        [
            Prices(rate=Decimal("100")),
            Prices(
                rate=Decimal("100"),
                rules=PricingRules(
                    weekends_deal=Decimal("0.2"),
                    base_discount=Decimal("0.15"),
                    last_minute_discount=Decimal("0.1"),
                ),
            ),
            Prices(
                rate=Decimal("33.33"),
                other_fee=[
                    Fee(id="cleaning", name="Cleaning", price=Decimal("30")),
                    Fee(
                        id="service",
                        name="Service",
                        price=Decimal("10"),
                        type=FeeType.PERCENTAGE,
                    ),
                ],
                taxes=[
                    Fee(id="vat", name="VAT", price=Decimal("10"), type=FeeType.PERCENTAGE)
                ],
                rules=PricingRules(base_discount=Decimal("0.5")),
            ),
            Prices(rate=Decimal("100"), rules=PricingRules(base_discount=Decimal("1.5"))),
        ],
        ids=["plain", "deals", "services-and-taxes", "over-discounted"],
    )
    def test_total_never_decreases_with_more_nights(
        self, pricing_service, make_unit, prices
    ) -> None:
        unit = make_unit(prices=prices)
        services = [ServiceSelection(id="cleaning"), ServiceSelection(id="service")]
        totals = [
            quote_unit(
                pricing_service,
                unit,
                availability.stay_dates(
                    WEEKDAY_CHECK_IN, WEEKDAY_CHECK_IN + dt.timedelta(days=nights)
                ),
                services=services,
            ).total_price
            for nights in range(1, 11)
        ]

        assert totals == sorted(totals)
        assert all(total >= 0 for total in totals)
