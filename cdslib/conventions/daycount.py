"""
Day count conventions of the ISDA CDS standard model, backed by QuantLib.

Premium accrual uses ACT/360 and the curve time axis uses ACT/365F; the
30/360 and ACT/ACT variants cover bond coupons. Conventions are looked up by
the names used in ISDA trade confirmations.
"""

from datetime import date, datetime
from typing import Dict, Iterable, List, Union

import QuantLib as ql

from cdslib.errors import InvalidArgument

DateLike = Union[date, datetime]


def to_date(dt: DateLike) -> date:
    return dt.date() if isinstance(dt, datetime) else dt


def to_ql_date(dt: DateLike) -> ql.Date:
    d = to_date(dt)
    return ql.Date(d.day, d.month, d.year)


def from_ql_date(ql_date: ql.Date) -> date:
    return date(ql_date.year(), ql_date.month(), ql_date.dayOfMonth())


class DayCountConvention:
    """A named QuantLib day counter."""

    def __init__(self, name: str, ql_daycount: ql.DayCounter):
        self.name = name
        self._ql_daycount = ql_daycount

    def year_fraction(self, start: DateLike, end: DateLike) -> float:
        """Year fraction from ``start`` to ``end``; negative when ``end`` is earlier."""
        return self._ql_daycount.yearFraction(to_ql_date(start), to_ql_date(end))

    def year_fractions(self, start: DateLike, dates: Iterable[DateLike]) -> List[float]:
        """Year fractions from ``start`` to each of ``dates``."""
        ql_start = to_ql_date(start)
        return [self._ql_daycount.yearFraction(ql_start, to_ql_date(d)) for d in dates]

    def day_count(self, start: DateLike, end: DateLike) -> int:
        return self._ql_daycount.dayCount(to_ql_date(start), to_ql_date(end))

    def __eq__(self, other) -> bool:
        return isinstance(other, DayCountConvention) and other.name == self.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"DayCountConvention({self.name!r})"


# ----------------------------------------------------------------------
# Standard conventions
# ----------------------------------------------------------------------
ACT_360 = DayCountConvention("ACT/360", ql.Actual360())
ACT_365F = DayCountConvention("ACT/365F", ql.Actual365Fixed())
THIRTY_360E = DayCountConvention("30E/360", ql.Thirty360(ql.Thirty360.European))
THIRTY_360U = DayCountConvention("30/360", ql.Thirty360(ql.Thirty360.BondBasis))
ACT_ACT = DayCountConvention("ACT/ACT", ql.ActualActual(ql.ActualActual.ISDA))

_ALIASES: Dict[DayCountConvention, List[str]] = {
    ACT_360: ["ACT/360", "ACTUAL/360", "A360"],
    ACT_365F: ["ACT/365F", "ACT/365", "ACTUAL/365F", "A365F"],
    THIRTY_360E: ["30E/360", "30/360E", "EUR30/360"],
    THIRTY_360U: ["30/360", "30U/360", "B30/360", "BOND BASIS"],
    ACT_ACT: ["ACT/ACT", "ACTUAL/ACTUAL", "ACT/ACT ISDA"],
}

DAY_COUNT_CONVENTIONS: Dict[str, DayCountConvention] = {
    alias: convention for convention, aliases in _ALIASES.items() for alias in aliases
}


def get_day_count_convention(name: Union[str, DayCountConvention]) -> DayCountConvention:
    """
    Resolve a day count convention.

    Args:
        name: Convention name, case-insensitive, or a convention instance,
            which is returned unchanged

    Raises:
        InvalidArgument: If the name is not registered
    """
    if isinstance(name, DayCountConvention):
        return name
    try:
        return DAY_COUNT_CONVENTIONS[name.strip().upper()]
    except KeyError:
        raise InvalidArgument(
            f"Unknown day count convention: {name}. "
            f"Available: {sorted(DAY_COUNT_CONVENTIONS)}"
        ) from None
