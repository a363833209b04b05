"""
Date-based ISDA standard model leg pricer.

Mirrors the ISDA CDS standard model: the premium schedule is generated from
the contract dates, every time is a day-count fraction from ``today`` and
the accrual-on-default integral uses ACT/365F times with the ISDA half-day
shift regardless of the curve day count.
"""

from __future__ import annotations

import logging
import math
from datetime import date, timedelta
from typing import TYPE_CHECKING, List, Union

from cdslib.conventions.calendars import WEEKEND_ONLY, Calendar, get_calendar
from cdslib.conventions.daycount import ACT_360, ACT_365F, DayCountConvention, get_day_count_convention
from cdslib.conventions.tenor import TenorLike
from cdslib.conventions.types import BusinessDayAdjustment, PriceType, StubType
from cdslib.errors import InvalidArgument, NumericDegeneracy
from cdslib.schedule.integration import (
    get_integration_nodes_as_dates,
    get_integration_nodes_as_times,
    truncate_dates,
)
from cdslib.schedule.premium_leg import PremiumLegSchedule

from .analytic import HALF_DAY, TAYLOR_THRESHOLD, epsilon, epsilon_p

if TYPE_CHECKING:
    from cdslib.curves.dated import DateCurve

logger = logging.getLogger(__name__)


def _positive_zero(t: float) -> float:
    # -0.0 compares equal to 0.0; return the positive zero
    return 0.0 if t == 0.0 else t


def _check_dates(today: date, stepin_date: date, value_date: date) -> None:
    if value_date < today:
        raise InvalidArgument("Require value_date >= today")
    if stepin_date < today:
        raise InvalidArgument("Require stepin_date >= today")


class IsdaCompliantPresentValueCDS:
    """Premium and protection leg values of a CDS from its contract dates."""

    def __init__(
        self,
        business_day_adjustment: BusinessDayAdjustment = BusinessDayAdjustment.FOLLOWING,
        calendar: Union[str, Calendar] = WEEKEND_ONLY,
        accrual_day_count: Union[str, DayCountConvention] = ACT_360,
        curve_day_count: Union[str, DayCountConvention] = ACT_365F,
    ):
        self.business_day_adjustment = business_day_adjustment
        self.calendar = get_calendar(calendar)
        self.accrual_day_count = get_day_count_convention(accrual_day_count)
        self.curve_day_count = get_day_count_convention(curve_day_count)

    # ------------------------------------------------------------------
    # Premium leg
    # ------------------------------------------------------------------
    def pv_premium_leg_per_unit_spread(
        self,
        today: date,
        stepin_date: date,
        value_date: date,
        start_date: date,
        end_date: date,
        pay_acc_on_default: bool,
        tenor: TenorLike,
        stub_type: StubType,
        yield_curve: DateCurve,
        hazard_rate_curve: DateCurve,
        protect_start: bool,
        price_type: PriceType,
    ) -> float:
        """
        PV of the premium leg per unit of fractional spread.

        This is 10,000 times the RPV01 on unit notional; multiply by the
        notional and the fractional spread to get the leg value.

        Args:
            today: Valuation date; curve time zero
            stepin_date: Date protection is assigned, normally T+1
            value_date: Cash-settlement date the value is quoted at, normally T+3
            start_date: Protection (and accrual) start
            end_date: Protection end
            pay_acc_on_default: Whether accrued premium is paid on default
            tenor: Premium payment interval
            stub_type: Stub convention of the schedule
            yield_curve: Discount curve
            hazard_rate_curve: Survival curve
            protect_start: Protection starts at the beginning of the day
            price_type: CLEAN subtracts the accrued premium

        Returns:
            The premium leg value, 0.0 for an expired trade

        Raises:
            InvalidArgument: If ``value_date`` or ``stepin_date`` is before ``today``
        """
        _check_dates(today, stepin_date, value_date)

        schedule = PremiumLegSchedule.generate(
            start_date,
            end_date,
            tenor,
            stub_type,
            self.business_day_adjustment,
            self.calendar,
            protect_start,
        )
        global_acc_start = schedule.accrual_start_date(0)
        global_acc_end = schedule.accrual_end_date(schedule.n_payments - 1)
        maturity = global_acc_end - timedelta(days=1) if protect_start else global_acc_end
        if today > maturity or stepin_date > maturity:
            logger.debug("Trade matured on %s; premium leg is zero", maturity)
            return 0.0

        nodes = (
            get_integration_nodes_as_dates(
                global_acc_start, global_acc_end, yield_curve.curve_dates, hazard_rate_curve.curve_dates
            )
            if pay_acc_on_default
            else []
        )
        obs_offset = timedelta(days=-1 if protect_start else 0)

        rpv01 = 0.0
        for period in schedule:
            if period.accrual_end <= stepin_date:
                # already realised
                continue
            acc_time = self.accrual_day_count.year_fraction(period.accrual_start, period.accrual_end)
            t = _positive_zero(self.curve_day_count.year_fraction(today, period.payment_date))
            t_obs = _positive_zero(
                self.curve_day_count.year_fraction(today, period.accrual_end + obs_offset)
            )
            rpv01 += (
                acc_time
                * yield_curve.discount_factor(t)
                * hazard_rate_curve.survival_probability(t_obs)
            )

            if pay_acc_on_default:
                rpv01 += self._single_period_accrual_on_default(
                    today,
                    stepin_date + obs_offset,
                    period.accrual_start + obs_offset,
                    period.accrual_end + obs_offset,
                    acc_time,
                    yield_curve,
                    hazard_rate_curve,
                    nodes,
                )

        t_value = self.curve_day_count.year_fraction(today, value_date)
        rpv01 /= yield_curve.discount_factor(t_value)

        if price_type is PriceType.CLEAN:
            rpv01 -= self.accrued_interest(schedule, stepin_date)
        return rpv01

    @staticmethod
    def _single_period_accrual_on_default(
        today: date,
        offset_stepin: date,
        offset_acc_start: date,
        offset_acc_end: date,
        acc_time: float,
        yield_curve: DateCurve,
        hazard_rate_curve: DateCurve,
        nodes: List[date],
    ) -> float:
        dates = truncate_dates(offset_acc_start, offset_acc_end, nodes)
        sub_start = max(offset_stepin, offset_acc_start)

        # ACT/365F here whatever the curve day count
        acc_rate = acc_time / ACT_365F.year_fraction(offset_acc_start, offset_acc_end)
        t = _positive_zero(ACT_365F.year_fraction(today, sub_start))
        ht0 = hazard_rate_curve.get_rt(t)
        rt0 = yield_curve.get_rt(t)
        b0 = math.exp(-ht0 - rt0)

        pv = 0.0
        for node in dates[1:]:
            if node <= offset_stepin:
                continue
            t = ACT_365F.year_fraction(today, node)
            ht1 = hazard_rate_curve.get_rt(t)
            rt1 = yield_curve.get_rt(t)
            b1 = math.exp(-ht1 - rt1)

            t0 = ACT_365F.year_fraction(offset_acc_start, sub_start) + HALF_DAY
            t1 = ACT_365F.year_fraction(offset_acc_start, node) + HALF_DAY
            dt = t1 - t0

            dht = ht1 - ht0
            dhrt = dht + rt1 - rt0 + 1e-50
            if abs(dhrt) < TAYLOR_THRESHOLD:
                pv += dht * b0 * (t0 * epsilon(-dhrt) + dt * epsilon_p(-dhrt))
            else:
                pv += dht / dhrt * ((t0 + dt / dhrt) * b0 - (t1 + dt / dhrt) * b1)

            ht0, rt0, b0 = ht1, rt1, b1
            sub_start = node
        return acc_rate * pv

    def accrued_interest(self, schedule: PremiumLegSchedule, stepin_date: date) -> float:
        """
        Accrual fraction from the current period start to step-in.

        Raises:
            NumericDegeneracy: If step-in cannot be placed in any period
        """
        n = schedule.n_payments
        if not schedule.accrual_start_date(0) < stepin_date < schedule.accrual_end_date(n - 1):
            return 0.0

        found, index = schedule.find_accrual_start(stepin_date)
        if found:
            return 0.0
        if index == 0:
            raise NumericDegeneracy(
                f"step-in {stepin_date} precedes the first accrual start of the schedule"
            )
        return self.accrual_day_count.year_fraction(schedule.accrual_start_date(index - 1), stepin_date)

    # ------------------------------------------------------------------
    # Protection leg
    # ------------------------------------------------------------------
    def calculate_protection_leg(
        self,
        today: date,
        stepin_date: date,
        value_date: date,
        start_date: date,
        end_date: date,
        yield_curve: DateCurve,
        hazard_rate_curve: DateCurve,
        recovery_rate: float,
        protect_start: bool,
    ) -> float:
        """
        PV of the protection leg on unit notional.

        Args:
            today: Valuation date; curve time zero
            stepin_date: Date protection is assigned
            value_date: Cash-settlement date the value is quoted at
            start_date: Protection start
            end_date: Protection end (end of day)
            yield_curve: Discount curve
            hazard_rate_curve: Survival curve
            recovery_rate: Recovery rate in [0, 1]
            protect_start: Protection starts at the beginning of the day

        Returns:
            The protection leg value, 0.0 for full recovery or expired protection

        Raises:
            InvalidArgument: If the dates are out of order or recovery is outside [0, 1]
        """
        if not 0.0 <= recovery_rate <= 1.0:
            raise InvalidArgument(f"recovery_rate must be in [0, 1], got {recovery_rate}")
        _check_dates(today, stepin_date, value_date)

        if recovery_rate == 1.0:
            return 0.0

        effective_start = max(stepin_date, start_date)
        if protect_start:
            effective_start -= timedelta(days=1)
        if not end_date > effective_start:
            logger.debug("Protection ended on %s; protection leg is zero", end_date)
            return 0.0

        times = get_integration_nodes_as_times(
            today,
            effective_start,
            end_date,
            yield_curve.curve_dates,
            hazard_rate_curve.curve_dates,
        )

        ht1 = hazard_rate_curve.get_rt(float(times[0]))
        rt1 = yield_curve.get_rt(float(times[0]))
        s1 = math.exp(-ht1)
        p1 = math.exp(-rt1)
        pv = 0.0
        for t in times[1:]:
            ht0, rt0, p0, s0 = ht1, rt1, p1, s1
            ht1 = hazard_rate_curve.get_rt(float(t))
            rt1 = yield_curve.get_rt(float(t))
            s1 = math.exp(-ht1)
            p1 = math.exp(-rt1)

            dht = ht1 - ht0
            dhrt = dht + rt1 - rt0
            if abs(dhrt) < TAYLOR_THRESHOLD:
                pv += dht * (1.0 - dhrt * (0.5 - dhrt / 6.0)) * p0 * s0
            else:
                pv += dht / dhrt * (p0 * s0 - p1 * s1)

        pv *= 1.0 - recovery_rate
        t_value = self.curve_day_count.year_fraction(today, value_date)
        return pv / yield_curve.discount_factor(t_value)
