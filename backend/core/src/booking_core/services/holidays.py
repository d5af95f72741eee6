"""Weekend and holiday calendar used by the pricing engine.

Holidays are configured per calendar as ``{name: [dates]}`` where a date is
either ``MM-DD`` (recurs every year) or ``YYYY-MM-DD`` (a single year, for
movable feasts).
"""

import datetime as dt
from typing import TypedDict

from ..models import AdjustmentType
from ..models.inventory import HolidayRule

# Saturday and Sunday
WEEKEND_DAYS = frozenset({5, 6})

EUROPEAN_HOLIDAYS: dict[str, list[str]] = {
    "New Year": ["01-01"],
    "Epiphany": ["01-06"],
    "Valentine's Day": ["02-14"],
    "Labour Day": ["05-01"],
    "Assumption Day": ["08-15"],
    "All Saints' Day": ["11-01"],
    "Christmas Eve": ["12-24"],
    "Christmas": ["12-25"],
    "Boxing Day": ["12-26"],
    "New Year's Eve": ["12-31"],
}

ARAB_HOLIDAYS: dict[str, list[str]] = {
    "New Year": ["01-01"],
    "Arab League Day": ["03-22"],
    "Labour Day": ["05-01"],
    "Eid al-Fitr": ["2025-03-30", "2025-03-31", "2026-03-20", "2026-03-21"],
    "Eid al-Adha": ["2025-06-06", "2025-06-07", "2026-05-27", "2026-05-28"],
    "Islamic New Year": ["2025-06-26", "2026-06-16"],
}

DEFAULT_CALENDARS: dict[str, dict[str, list[str]]] = {
    "europe": EUROPEAN_HOLIDAYS,
    "arab": ARAB_HOLIDAYS,
}


class HolidayDay(TypedDict):
    """A stay night that falls on a priced holiday."""

    date: str
    holiday: str
    type: AdjustmentType


class HolidayService:
    """Answers which nights are weekends or configured holidays."""

    def __init__(self, calendars: dict[str, dict[str, list[str]]] | None = None) -> None:
        """Initialize holiday service.

        Args:
            calendars: Holiday calendars by region; defaults to European and Arab
        """
        self.calendars = calendars if calendars is not None else DEFAULT_CALENDARS
        self._by_name: dict[str, set[str]] = {}
        for holidays in self.calendars.values():
            for name, dates in holidays.items():
                self._by_name.setdefault(name, set()).update(dates)

    def is_weekend(self, dates: list[str]) -> list[str]:
        """Filter ``dates`` down to Saturdays and Sundays."""
        return [
            d for d in dates if dt.date.fromisoformat(d).weekday() in WEEKEND_DAYS
        ]

    def holiday_names(self, region: str) -> list[str]:
        return list(self.calendars.get(region, {}))

    def matches(self, name: str, day: str) -> bool:
        """Check whether ``day`` (YYYY-MM-DD) is the holiday called ``name``."""
        dates = self._by_name.get(name, set())
        return day in dates or day[5:] in dates

    def find_holiday_days_in_range(
        self, rules: list[HolidayRule], dates: list[str]
    ) -> list[HolidayDay]:
        """Find nights matching one of a unit's holiday rules.

        Each night is reported at most once, for the first matching rule.

        Args:
            rules: Holiday rules of the unit (name, discount, type)
            dates: Nights of the stay

        Returns:
            Matching nights with the holiday name and adjustment direction
        """
        found: list[HolidayDay] = []
        for day in dates:
            for rule in rules:
                if self.matches(rule.name, day):
                    found.append(HolidayDay(date=day, holiday=rule.name, type=rule.type))
                    break
        return found
