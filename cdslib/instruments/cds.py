"""
Time-based description of a CDS for the analytic pricer.

``CDSAnalytic`` converts the dates of a single-name CDS (trade date, step-in,
cash settlement, premium schedule, maturity) into year fractions measured
from the trade date on the curve day count. Everything the pricer and the
curve builder need is precomputed once; the object is immutable.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import List, Sequence, Tuple, Union

from cdslib.conventions.calendars import WEEKEND_ONLY, Calendar
from cdslib.conventions.daycount import ACT_360, ACT_365F, DayCountConvention, get_day_count_convention
from cdslib.conventions.tenor import TenorLike, add_tenor
from cdslib.conventions.types import BusinessDayAdjustment, StubType
from cdslib.errors import InvalidArgument
from cdslib.schedule.adjustments import adjust_date
from cdslib.schedule.premium_leg import PremiumLegSchedule

_ONE_DAY = timedelta(days=1)

IMM_MONTHS = (3, 6, 9, 12)
IMM_DAY = 20


@dataclass(frozen=True)
class CDSCoupon:
    """One premium period expressed as curve times from the trade date."""

    acc_start: float
    acc_end: float
    payment_time: float
    accrual_fraction: float
    """Accrual day-count fraction of the period."""
    credit_observation_time: float
    """Time at which survival is observed for the period payment."""


class CDSAnalytic:
    """Analytic (time-based) representation of a CDS."""

    def __init__(
        self,
        trade_date: date,
        stepin_date: date,
        cash_settlement_date: date,
        accrual_start_date: date,
        end_date: date,
        pay_acc_on_default: bool = True,
        payment_interval: TenorLike = "3M",
        stub_type: StubType = StubType.FRONTSHORT,
        protect_start: bool = True,
        recovery_rate: float = 0.4,
        business_day_adjustment: BusinessDayAdjustment = BusinessDayAdjustment.FOLLOWING,
        calendar: Calendar = WEEKEND_ONLY,
        accrual_day_count: Union[str, DayCountConvention] = ACT_360,
        curve_day_count: Union[str, DayCountConvention] = ACT_365F,
    ):
        """
        Build the analytic CDS.

        Args:
            trade_date: Trade date; curve time zero
            stepin_date: Date protection is assigned, usually T+1
            cash_settlement_date: Date the upfront is paid; PVs are quoted here
            accrual_start_date: Start of the first accrual period
            end_date: Protection maturity
            pay_acc_on_default: Whether accrued premium is paid on default
            payment_interval: Premium payment interval
            stub_type: Stub convention of the premium schedule
            protect_start: Protection starts at the beginning of the day
            recovery_rate: Recovery rate in [0, 1]
            business_day_adjustment: Adjustment of schedule dates
            calendar: Business day calendar
            accrual_day_count: Day count for premium accrual
            curve_day_count: Day count for curve times

        Raises:
            InvalidArgument: If dates are out of order or recovery is outside [0, 1]
        """
        if stepin_date < trade_date:
            raise InvalidArgument("Require stepin_date >= trade_date")
        if cash_settlement_date < trade_date:
            raise InvalidArgument("Require cash_settlement_date >= trade_date")
        if not end_date > accrual_start_date:
            raise InvalidArgument("Require end_date > accrual_start_date")
        if not 0.0 <= recovery_rate <= 1.0:
            raise InvalidArgument(f"recovery_rate must be in [0, 1], got {recovery_rate}")

        accrual_dcc = get_day_count_convention(accrual_day_count)
        curve_dcc = get_day_count_convention(curve_day_count)
        self._trade_date = trade_date
        self._stepin_date = stepin_date
        self._cash_settlement_date = cash_settlement_date
        self._accrual_start_date = accrual_start_date
        self._end_date = end_date
        self._pay_acc_on_default = pay_acc_on_default
        self._payment_interval = payment_interval
        self._stub_type = stub_type
        self._protect_start = protect_start
        self._recovery_rate = recovery_rate
        self._business_day_adjustment = business_day_adjustment
        self._calendar = calendar
        self._accrual_dcc = accrual_dcc
        self._curve_dcc = curve_dcc

        def to_time(d: date) -> float:
            return curve_dcc.year_fraction(trade_date, d)

        schedule = PremiumLegSchedule.generate(
            accrual_start_date,
            end_date,
            payment_interval,
            stub_type,
            business_day_adjustment,
            calendar,
            protect_start,
        )
        # periods already accrued at step-in are realised
        periods = [p for p in schedule if p.accrual_end > stepin_date]
        obs_offset = -_ONE_DAY if protect_start else timedelta(0)
        self._coupons: Tuple[CDSCoupon, ...] = tuple(
            CDSCoupon(
                acc_start=to_time(p.accrual_start),
                acc_end=to_time(p.accrual_end),
                payment_time=to_time(p.payment_date),
                accrual_fraction=accrual_dcc.year_fraction(p.accrual_start, p.accrual_end),
                credit_observation_time=to_time(p.accrual_end + obs_offset),
            )
            for p in periods
        )

        effective_start = max(stepin_date, accrual_start_date)
        if protect_start:
            effective_start -= _ONE_DAY

        self._lgd = 1.0 - recovery_rate
        self._stepin = to_time(stepin_date)
        self._valuation_time = to_time(cash_settlement_date)
        self._protection_start = to_time(effective_start)
        self._protection_end = to_time(end_date)
        self._curve_one_day = curve_dcc.year_fraction(trade_date, trade_date + _ONE_DAY)

        if periods and periods[0].accrual_start < stepin_date:
            first_start = periods[0].accrual_start
            self._accrued_days = (stepin_date - first_start).days
            self._accrued = accrual_dcc.year_fraction(first_start, stepin_date)
        else:
            self._accrued_days = 0
            self._accrued = 0.0

    # ------------------------------------------------------------------
    # Coupons
    # ------------------------------------------------------------------
    @property
    def coupons(self) -> Tuple[CDSCoupon, ...]:
        return self._coupons

    @property
    def n_payments(self) -> int:
        return len(self._coupons)

    def coupon(self, index: int) -> CDSCoupon:
        return self._coupons[index]

    # ------------------------------------------------------------------
    # Times and terms
    # ------------------------------------------------------------------
    @property
    def trade_date(self) -> date:
        return self._trade_date

    @property
    def maturity(self) -> date:
        return self._end_date

    @property
    def stepin(self) -> float:
        return self._stepin

    @property
    def valuation_time(self) -> float:
        return self._valuation_time

    @property
    def protection_start(self) -> float:
        """Effective protection start time."""
        return self._protection_start

    @property
    def protection_end(self) -> float:
        return self._protection_end

    @property
    def curve_one_day(self) -> float:
        return self._curve_one_day

    @property
    def lgd(self) -> float:
        return self._lgd

    @property
    def recovery_rate(self) -> float:
        return self._recovery_rate

    @property
    def pay_acc_on_default(self) -> bool:
        return self._pay_acc_on_default

    @property
    def protection_from_start_of_day(self) -> bool:
        return self._protect_start

    @property
    def accrued(self) -> float:
        """Accrual year fraction from the current period start to step-in."""
        return self._accrued

    @property
    def accrued_days(self) -> int:
        return self._accrued_days

    def accrued_premium(self, coupon: float) -> float:
        """Accrued premium per unit notional at ``coupon``."""
        return self._accrued * coupon

    def with_recovery_rate(self, recovery_rate: float) -> "CDSAnalytic":
        """Same contract with a different recovery rate."""
        return CDSAnalytic(
            trade_date=self._trade_date,
            stepin_date=self._stepin_date,
            cash_settlement_date=self._cash_settlement_date,
            accrual_start_date=self._accrual_start_date,
            end_date=self._end_date,
            pay_acc_on_default=self._pay_acc_on_default,
            payment_interval=self._payment_interval,
            stub_type=self._stub_type,
            protect_start=self._protect_start,
            recovery_rate=recovery_rate,
            business_day_adjustment=self._business_day_adjustment,
            calendar=self._calendar,
            accrual_day_count=self._accrual_dcc,
            curve_day_count=self._curve_dcc,
        )

    def __repr__(self) -> str:
        return (
            f"CDSAnalytic(trade_date={self.trade_date}, maturity={self.maturity}, "
            f"n_payments={self.n_payments}, recovery_rate={self.recovery_rate})"
        )


# ----------------------------------------------------------------------
# IMM dates
# ----------------------------------------------------------------------
def is_imm_date(dt: date) -> bool:
    return dt.day == IMM_DAY and dt.month in IMM_MONTHS


def next_imm_date(dt: date) -> date:
    """First IMM date strictly after ``dt``."""
    for month in IMM_MONTHS:
        candidate = date(dt.year, month, IMM_DAY)
        if candidate > dt:
            return candidate
    return date(dt.year + 1, IMM_MONTHS[0], IMM_DAY)


def prev_imm_date(dt: date) -> date:
    """Latest IMM date on or before ``dt``."""
    for month in reversed(IMM_MONTHS):
        candidate = date(dt.year, month, IMM_DAY)
        if candidate <= dt:
            return candidate
    return date(dt.year - 1, IMM_MONTHS[-1], IMM_DAY)


@dataclass(frozen=True)
class CDSAnalyticFactory:
    """Builds CDSs on standard ISDA conventions.

    Step-in is T+1 calendar day and cash settlement T+3 business days.
    Standard contracts accrue from the last IMM date on or before step-in and
    mature on an IMM date.
    """

    recovery_rate: float = 0.4
    payment_interval: TenorLike = "3M"
    stub_type: StubType = StubType.FRONTSHORT
    protect_start: bool = True
    pay_acc_on_default: bool = True
    stepin_days: int = 1
    cash_settle_days: int = 3
    business_day_adjustment: BusinessDayAdjustment = BusinessDayAdjustment.FOLLOWING
    calendar: Calendar = WEEKEND_ONLY
    accrual_day_count: DayCountConvention = ACT_360
    curve_day_count: DayCountConvention = ACT_365F

    def with_recovery_rate(self, recovery_rate: float) -> "CDSAnalyticFactory":
        return replace(self, recovery_rate=recovery_rate)

    def with_payment_interval(self, payment_interval: TenorLike) -> "CDSAnalyticFactory":
        return replace(self, payment_interval=payment_interval)

    def make_cds(self, trade_date: date, accrual_start_date: date, maturity: date) -> CDSAnalytic:
        """CDS with explicit accrual start and maturity."""
        return CDSAnalytic(
            trade_date=trade_date,
            stepin_date=trade_date + timedelta(days=self.stepin_days),
            cash_settlement_date=self.calendar.add_business_days(trade_date, self.cash_settle_days),
            accrual_start_date=accrual_start_date,
            end_date=maturity,
            pay_acc_on_default=self.pay_acc_on_default,
            payment_interval=self.payment_interval,
            stub_type=self.stub_type,
            protect_start=self.protect_start,
            recovery_rate=self.recovery_rate,
            business_day_adjustment=self.business_day_adjustment,
            calendar=self.calendar,
            accrual_day_count=self.accrual_day_count,
            curve_day_count=self.curve_day_count,
        )

    def standard_accrual_start(self, trade_date: date) -> date:
        stepin = trade_date + timedelta(days=self.stepin_days)
        return adjust_date(prev_imm_date(stepin), self.business_day_adjustment, self.calendar)

    def make_imm_cds(self, trade_date: date, tenor: TenorLike) -> CDSAnalytic:
        """Standard CDS maturing ``tenor`` after the next IMM date."""
        maturity = add_tenor(next_imm_date(trade_date), tenor)
        return self.make_cds(trade_date, self.standard_accrual_start(trade_date), maturity)

    def make_imm_cds_list(self, trade_date: date, tenors: Sequence[TenorLike]) -> List[CDSAnalytic]:
        """Standard CDSs for several tenors, e.g. a curve's pillar instruments."""
        return [self.make_imm_cds(trade_date, tenor) for tenor in tenors]
