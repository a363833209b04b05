"""Tests for the date-based ISDA leg pricer."""

import math
from datetime import date

import pytest

from cdslib.conventions import PriceType, StubType
from cdslib.errors import InvalidArgument
from cdslib.pricing import AnalyticCDSPricer, IsdaCompliantPresentValueCDS
from cdslib.pricing.isda import _positive_zero
from cdslib.schedule import PremiumLegSchedule

from tests.conftest import (
    ACCRUAL_START,
    CASH_SETTLE_DATE,
    MATURITY,
    STEPIN_DATE,
    TRADE_DATE,
    make_cds,
)


def _premium_leg(calculator, yc, cc, price_type=PriceType.CLEAN, **overrides):
    params = dict(
        today=TRADE_DATE,
        stepin_date=STEPIN_DATE,
        value_date=CASH_SETTLE_DATE,
        start_date=ACCRUAL_START,
        end_date=MATURITY,
        pay_acc_on_default=True,
        tenor="3M",
        stub_type=StubType.FRONTSHORT,
        yield_curve=yc,
        hazard_rate_curve=cc,
        protect_start=True,
        price_type=price_type,
    )
    params.update(overrides)
    return calculator.pv_premium_leg_per_unit_spread(**params)


def _protection_leg(calculator, yc, cc, recovery_rate=0.4, **overrides):
    params = dict(
        today=TRADE_DATE,
        stepin_date=STEPIN_DATE,
        value_date=CASH_SETTLE_DATE,
        start_date=ACCRUAL_START,
        end_date=MATURITY,
        yield_curve=yc,
        hazard_rate_curve=cc,
        recovery_rate=recovery_rate,
        protect_start=True,
    )
    params.update(overrides)
    return calculator.calculate_protection_leg(**params)


def test_agrees_with_analytic_pricer(date_yield_curve, date_credit_curve) -> None:
    """Both pricers integrate the same legs on the same grid."""
    calculator = IsdaCompliantPresentValueCDS()
    pricer = AnalyticCDSPricer()
    cds = make_cds()
    for price_type in (PriceType.CLEAN, PriceType.DIRTY):
        expected = pricer.rpv01(cds, date_yield_curve, date_credit_curve, price_type)
        actual = _premium_leg(calculator, date_yield_curve, date_credit_curve, price_type)
        assert actual == pytest.approx(expected, rel=1e-10)

    expected = pricer.protection_leg(cds, date_yield_curve, date_credit_curve)
    actual = _protection_leg(calculator, date_yield_curve, date_credit_curve)
    assert actual == pytest.approx(expected, rel=1e-10)


def test_dirty_minus_clean_is_accrued(date_yield_curve, date_credit_curve) -> None:
    calculator = IsdaCompliantPresentValueCDS()
    dirty = _premium_leg(calculator, date_yield_curve, date_credit_curve, PriceType.DIRTY)
    clean = _premium_leg(calculator, date_yield_curve, date_credit_curve, PriceType.CLEAN)
    assert dirty - clean == pytest.approx(13 / 360, abs=1e-15)


def test_accrued_interest() -> None:
    calculator = IsdaCompliantPresentValueCDS()
    schedule = PremiumLegSchedule.generate(ACCRUAL_START, MATURITY, "3M")
    assert calculator.accrued_interest(schedule, STEPIN_DATE) == pytest.approx(13 / 360, abs=1e-15)
    # step-in on an accrual start
    assert calculator.accrued_interest(schedule, date(2013, 9, 20)) == 0.0
    # before the schedule starts
    assert calculator.accrued_interest(schedule, date(2013, 6, 1)) == 0.0


def test_full_recovery(date_yield_curve, date_credit_curve) -> None:
    calculator = IsdaCompliantPresentValueCDS()
    assert _protection_leg(calculator, date_yield_curve, date_credit_curve, recovery_rate=1.0) == 0.0


def test_recovery_out_of_range(date_yield_curve, date_credit_curve) -> None:
    calculator = IsdaCompliantPresentValueCDS()
    with pytest.raises(InvalidArgument, match="recovery_rate"):
        _protection_leg(calculator, date_yield_curve, date_credit_curve, recovery_rate=1.2)


def test_matured_trade_is_worth_nothing(date_yield_curve, date_credit_curve) -> None:
    calculator = IsdaCompliantPresentValueCDS()
    end = date(2013, 6, 20)
    start = date(2013, 3, 20)
    assert _premium_leg(
        calculator, date_yield_curve, date_credit_curve, start_date=start, end_date=end
    ) == 0.0
    assert _protection_leg(
        calculator, date_yield_curve, date_credit_curve, start_date=start, end_date=end
    ) == 0.0


@pytest.mark.parametrize(
    "overrides, message",
    [
        (dict(value_date=date(2013, 7, 1)), "value_date"),
        (dict(stepin_date=date(2013, 7, 1)), "stepin_date"),
    ],
)
def test_dates_before_today_rejected(date_yield_curve, date_credit_curve, overrides, message) -> None:
    calculator = IsdaCompliantPresentValueCDS()
    with pytest.raises(InvalidArgument, match=message):
        _premium_leg(calculator, date_yield_curve, date_credit_curve, **overrides)
    with pytest.raises(InvalidArgument, match=message):
        _protection_leg(calculator, date_yield_curve, date_credit_curve, **overrides)


def test_positive_zero() -> None:
    assert math.copysign(1.0, _positive_zero(-0.0)) == 1.0
    assert _positive_zero(0.25) == 0.25


def test_trade_starting_today(date_yield_curve, date_credit_curve) -> None:
    """Step-in and accrual start on today give a zero curve time without error."""
    calculator = IsdaCompliantPresentValueCDS()
    value = _premium_leg(
        calculator,
        date_yield_curve,
        date_credit_curve,
        stepin_date=TRADE_DATE,
        start_date=TRADE_DATE,
        protect_start=False,
    )
    assert value > 0.0
