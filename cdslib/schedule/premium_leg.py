"""
ISDA premium-leg schedule generation.

Unadjusted dates are generated by stepping whole multiples of the payment
interval away from the anchor date (maturity for front stubs, start for back
stubs), so month-end days never drift. Accrual starts are business-day
adjusted except the first, the final accrual end is the unadjusted maturity
(one day later when protection starts at the beginning of the day) and all
payment dates are adjusted.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Sequence, Tuple

from cdslib.conventions.calendars import WEEKEND_ONLY, Calendar
from cdslib.conventions.tenor import TenorLike, add_tenor
from cdslib.conventions.types import BusinessDayAdjustment, StubType
from cdslib.errors import InvalidArgument

from .adjustments import adjust_date

_ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class PremiumPeriod:
    """A single premium accrual period."""

    accrual_start: date
    accrual_end: date
    payment_date: date

    @property
    def accrual_days(self) -> int:
        """Number of calendar days in accrual period."""
        return (self.accrual_end - self.accrual_start).days


def _backward_dates(start: date, end: date, step: TenorLike, long_stub: bool) -> List[date]:
    dates = [end]
    k = 1
    current = add_tenor(end, step, -k)
    while current > start:
        dates.append(current)
        k += 1
        current = add_tenor(end, step, -k)
    if current != start and long_stub and len(dates) > 1:
        # merge the short front stub into the first regular period
        dates.pop()
    dates.append(start)
    dates.reverse()
    return dates


def _forward_dates(start: date, end: date, step: TenorLike, long_stub: bool) -> List[date]:
    dates = [start]
    k = 1
    current = add_tenor(start, step, k)
    while current < end:
        dates.append(current)
        k += 1
        current = add_tenor(start, step, k)
    if current != end and long_stub and len(dates) > 1:
        dates.pop()
    dates.append(end)
    return dates


def unadjusted_dates(
    start_date: date, end_date: date, payment_interval: TenorLike, stub_type: StubType
) -> List[date]:
    """Nominal (unadjusted) schedule dates including both end points."""
    if not end_date > start_date:
        raise InvalidArgument(
            f"end_date {end_date} must be after start_date {start_date}"
        )
    if stub_type.is_front:
        return _backward_dates(start_date, end_date, payment_interval, stub_type.is_long)
    return _forward_dates(start_date, end_date, payment_interval, stub_type.is_long)


class PremiumLegSchedule:
    """Accrual and payment dates of a CDS (or bond) premium leg."""

    def __init__(self, periods: Sequence[PremiumPeriod]):
        if not periods:
            raise InvalidArgument("A premium leg schedule needs at least one period")
        self._periods: Tuple[PremiumPeriod, ...] = tuple(periods)

    @classmethod
    def generate(
        cls,
        start_date: date,
        end_date: date,
        payment_interval: TenorLike,
        stub_type: StubType = StubType.FRONTSHORT,
        business_day_adjustment: BusinessDayAdjustment = BusinessDayAdjustment.FOLLOWING,
        calendar: Calendar = WEEKEND_ONLY,
        protect_start: bool = True,
    ) -> "PremiumLegSchedule":
        """
        Build the ISDA premium schedule.

        Args:
            start_date: Accrual start of the first period (used unadjusted)
            end_date: Maturity (unadjusted)
            payment_interval: Period between payments, e.g. ``"3M"``
            stub_type: Where the irregular period sits and whether it is long
            business_day_adjustment: Adjustment of accrual/payment dates
            calendar: Business day calendar
            protect_start: Protection starts at the beginning of the day, so the
                final accrual period includes the maturity date

        Returns:
            The generated schedule
        """
        nominal = unadjusted_dates(start_date, end_date, payment_interval, stub_type)
        n = len(nominal) - 1

        acc_starts = [nominal[0]] + [
            adjust_date(d, business_day_adjustment, calendar) for d in nominal[1:n]
        ]
        acc_ends = acc_starts[1:] + [nominal[n] + _ONE_DAY if protect_start else nominal[n]]
        payments = acc_starts[1:] + [adjust_date(nominal[n], business_day_adjustment, calendar)]

        return cls(
            [PremiumPeriod(s, e, p) for s, e, p in zip(acc_starts, acc_ends, payments)]
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def periods(self) -> Tuple[PremiumPeriod, ...]:
        return self._periods

    @property
    def n_payments(self) -> int:
        return len(self._periods)

    @property
    def accrual_start_dates(self) -> List[date]:
        return [p.accrual_start for p in self._periods]

    @property
    def accrual_end_dates(self) -> List[date]:
        return [p.accrual_end for p in self._periods]

    @property
    def payment_dates(self) -> List[date]:
        return [p.payment_date for p in self._periods]

    def accrual_start_date(self, index: int) -> date:
        return self._periods[index].accrual_start

    def accrual_end_date(self, index: int) -> date:
        return self._periods[index].accrual_end

    def payment_date(self, index: int) -> date:
        return self._periods[index].payment_date

    def find_accrual_start(self, dt: date) -> Tuple[bool, int]:
        """
        Locate ``dt`` among the accrual start dates.

        Returns:
            ``(True, index)`` when ``dt`` is an accrual start, otherwise
            ``(False, insertion_point)``
        """
        starts = self.accrual_start_dates
        idx = bisect.bisect_left(starts, dt)
        if idx < len(starts) and starts[idx] == dt:
            return True, idx
        return False, idx

    # ------------------------------------------------------------------
    # Transformations
    # ------------------------------------------------------------------
    def truncate(self, stepin_date: date) -> "PremiumLegSchedule":
        """Drop periods whose accrual end is on or before ``stepin_date``.

        Raises:
            InvalidArgument: If every period has already accrued
        """
        remaining = [p for p in self._periods if p.accrual_end > stepin_date]
        if not remaining:
            raise InvalidArgument(
                f"All periods of the schedule end on or before {stepin_date}"
            )
        if len(remaining) == len(self._periods):
            return self
        return PremiumLegSchedule(remaining)

    def __len__(self) -> int:
        return len(self._periods)

    def __iter__(self):
        return iter(self._periods)

    def __repr__(self) -> str:
        first = self._periods[0]
        last = self._periods[-1]
        return (
            f"PremiumLegSchedule(n_payments={self.n_payments}, "
            f"start={first.accrual_start}, end={last.accrual_end})"
        )


def infer_stub_type(
    accrual_start: date, first_coupon: date, maturity: date, payment_interval: TenorLike
) -> StubType:
    """
    Infer the stub convention of a bond-like schedule from its key dates.

    A first coupon later than one interval after accrual start is a long front
    stub, an earlier one a short front stub. Otherwise the regular roll from
    the first coupon is compared with maturity. A perfectly regular schedule
    is reported as FRONTLONG, which generates identical dates.
    """
    calculated_first = add_tenor(accrual_start, payment_interval)
    if calculated_first < first_coupon:
        return StubType.FRONTLONG
    if calculated_first > first_coupon:
        return StubType.FRONTSHORT

    k = 0
    calculated_maturity = first_coupon
    while calculated_maturity < maturity:
        k += 1
        calculated_maturity = add_tenor(first_coupon, payment_interval, k)
    if calculated_maturity > maturity:
        return StubType.BACKSHORT
    return StubType.FRONTLONG
