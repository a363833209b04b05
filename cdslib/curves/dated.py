"""
Curves anchored to a base date.

A ``DateCurve`` is a ``Curve`` whose knot times are the day-count year
fractions between the base date and a set of knot dates. Lookups accept
either a date or a time in years.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Sequence, Union

import numpy as np

from cdslib.conventions.daycount import ACT_365F, DayCountConvention, get_day_count_convention
from cdslib.errors import InvalidCurveInput

from .base import Curve

DateOrTime = Union[date, datetime, float, int]


def _curve_times(
    base_date: date, dates: Sequence[date], day_count: DayCountConvention
) -> List[float]:
    if len(dates) == 0:
        raise InvalidCurveInput("dates must not be empty")
    if not dates[0] > base_date:
        raise InvalidCurveInput(
            f"first curve date {dates[0]} must be after base date {base_date}"
        )
    for prev, curr in zip(dates[:-1], dates[1:]):
        if not curr > prev:
            raise InvalidCurveInput(
                f"curve dates must be strictly ascending ({prev} >= {curr})"
            )
    return day_count.year_fractions(base_date, dates)


class DateCurve(Curve):
    """Curve with an explicit base date, knot dates and day-count convention."""

    def __init__(
        self,
        base_date: date,
        dates: Sequence[date],
        rates: Sequence[float],
        day_count: Union[str, DayCountConvention] = ACT_365F,
    ):
        """
        Initialize the dated curve.

        Args:
            base_date: Date at which curve time is zero
            dates: Knot dates, strictly ascending and after ``base_date``
            rates: Continuously compounded zero rates at the knot dates
            day_count: Convention converting dates to curve times

        Raises:
            InvalidCurveInput: If rates are empty, lengths differ, or the
                dates are not strictly ascending after the base date
        """
        if len(rates) == 0:
            raise InvalidCurveInput("rates must not be empty")
        if len(dates) != len(rates):
            raise InvalidCurveInput(
                f"dates and rates must have same length ({len(dates)} != {len(rates)})"
            )
        if isinstance(base_date, datetime):
            base_date = base_date.date()
        self._base_date = base_date
        self._dates = tuple(dates)
        self._day_count = get_day_count_convention(day_count)
        super().__init__(_curve_times(base_date, self._dates, self._day_count), rates)

    @property
    def base_date(self) -> date:
        return self._base_date

    @property
    def curve_dates(self) -> List[date]:
        return list(self._dates)

    @property
    def day_count(self) -> DayCountConvention:
        return self._day_count

    def to_time(self, dt: DateOrTime) -> float:
        """Year fraction from the base date (times pass through)."""
        if isinstance(dt, (int, float, np.floating)):
            return float(dt)
        return self._day_count.year_fraction(self._base_date, dt)

    def get_zero_rate(self, dt: DateOrTime) -> float:
        return super().get_zero_rate(self.to_time(dt))

    def get_rt(self, dt: DateOrTime) -> float:
        return super().get_rt(self.to_time(dt))

    def _with_rates(self, rates: np.ndarray):
        return type(self)(self._base_date, self._dates, rates, self._day_count)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(base_date={self._base_date}, "
            f"dates={[d.isoformat() for d in self._dates]}, "
            f"rates={self.rates.tolist()}, day_count={self._day_count.name})"
        )


class DateYieldCurve(DateCurve):
    """Dated risk-free discount curve."""


class DateCreditCurve(DateCurve):
    """Dated hazard-rate curve."""

    def hazard_rate(self, dt: DateOrTime) -> float:
        return self.forward_rate(self.to_time(dt))
