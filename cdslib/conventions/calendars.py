"""
Business day calendars, backed by QuantLib.

The ISDA standard model rolls dates over weekends only (the "NONE" holiday
calendar of the ISDA library); market calendars are registered for trades
settled against real holidays.
"""

from datetime import date
from typing import Dict, List, Union

import QuantLib as ql

from cdslib.errors import InvalidArgument

from .daycount import DateLike, from_ql_date, to_ql_date


class Calendar:
    """A named QuantLib calendar."""

    def __init__(self, name: str, ql_calendar: ql.Calendar):
        self.name = name
        self._ql_calendar = ql_calendar

    def is_business_day(self, dt: DateLike) -> bool:
        return self._ql_calendar.isBusinessDay(to_ql_date(dt))

    def add_business_days(self, start_date: DateLike, days: int) -> date:
        """Move ``days`` business days forward, or backward when negative."""
        return from_ql_date(self._ql_calendar.advance(to_ql_date(start_date), days, ql.Days))

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"Calendar({self.name!r})"


WEEKEND_ONLY = Calendar("WEEKEND", ql.WeekendsOnly())
TARGET = Calendar("TARGET", ql.TARGET())
US = Calendar("US", ql.UnitedStates(ql.UnitedStates.Settlement))
UK = Calendar("UK", ql.UnitedKingdom(ql.UnitedKingdom.Settlement))
JAPAN = Calendar("JAPAN", ql.Japan())

_ALIASES: Dict[str, List[str]] = {
    "WEEKEND": ["WEEKEND", "WEEKEND_ONLY", "NONE"],
    "TARGET": ["TARGET", "EUR"],
    "US": ["US", "USD", "NYC"],
    "UK": ["UK", "GBP", "LON"],
    "JAPAN": ["JAPAN", "JPY", "TKY"],
}

CALENDARS: Dict[str, Calendar] = {
    alias: cal
    for cal in (WEEKEND_ONLY, TARGET, US, UK, JAPAN)
    for alias in _ALIASES[cal.name]
}


def get_calendar(name: Union[str, Calendar]) -> Calendar:
    """Resolve a calendar by name; instances pass through.

    Raises:
        InvalidArgument: If the name is not registered
    """
    if isinstance(name, Calendar):
        return name
    try:
        return CALENDARS[name.strip().upper()]
    except KeyError:
        raise InvalidArgument(
            f"Unknown calendar: {name}. Available: {sorted(CALENDARS)}"
        ) from None
