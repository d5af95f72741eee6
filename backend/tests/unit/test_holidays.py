"""Unit tests for HolidayService weekend and holiday matching."""

from decimal import Decimal

from booking_core.models import AdjustmentType
from booking_core.models.inventory import HolidayRule
from booking_core.services.holidays import HolidayService


class TestWeekends:
    def test_saturday_and_sunday_nights(self) -> None:
        service = HolidayService()
        nights = ["2025-06-06", "2025-06-07", "2025-06-08", "2025-06-09"]

        assert service.is_weekend(nights) == ["2025-06-07", "2025-06-08"]


class TestHolidays:
    """Tests for matching nights against a unit's holiday rules."""

    def test_recurring_holiday_matches_any_year(self) -> None:
        service = HolidayService()

        assert service.matches("Christmas", "2025-12-25")
        assert service.matches("Christmas", "2031-12-25")
        assert not service.matches("Christmas", "2025-12-24")

    def test_movable_holiday_matches_its_year_only(self) -> None:
        service = HolidayService()

        assert service.matches("Eid al-Adha", "2025-06-06")
        assert not service.matches("Eid al-Adha", "2024-06-06")

    def test_unknown_holiday_never_matches(self) -> None:
        assert not HolidayService().matches("Founders Day", "2025-01-01")

    def test_find_days_reports_first_matching_rule(self) -> None:
        """New Year is in both calendars; the night is reported once."""
        service = HolidayService()
        rules = [
            HolidayRule(name="New Year", discount=Decimal("0.2")),
            HolidayRule(name="Epiphany", discount=Decimal("0.1"), type=AdjustmentType.REDUCE),
        ]

        found = service.find_holiday_days_in_range(
            rules, ["2026-01-01", "2026-01-02", "2026-01-06"]
        )

        assert found == [
            {"date": "2026-01-01", "holiday": "New Year", "type": AdjustmentType.INCREASE},
            {"date": "2026-01-06", "holiday": "Epiphany", "type": AdjustmentType.REDUCE},
        ]

    def test_custom_calendars(self) -> None:
        service = HolidayService({"local": {"Harbour Festival": ["07-14"]}})

        assert service.holiday_names("local") == ["Harbour Festival"]
        assert service.matches("Harbour Festival", "2025-07-14")
        assert not service.matches("Christmas", "2025-12-25")
