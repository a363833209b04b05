"""Shared market data for the pricing tests.

The curves are the yield and credit curve sets of the ISDA analytic pricer
regression data; the trade is a standard 5Y contract traded on 2 July 2013.
"""

from datetime import date, timedelta

import pytest

from cdslib.curves import CreditCurve, DateCreditCurve, DateYieldCurve, YieldCurve
from cdslib.instruments import CDSAnalytic, CDSAnalyticFactory
from cdslib.pricing import AnalyticCDSPricer

TRADE_DATE = date(2013, 7, 2)
STEPIN_DATE = TRADE_DATE + timedelta(days=1)
CASH_SETTLE_DATE = TRADE_DATE + timedelta(days=3)
ACCRUAL_START = date(2013, 6, 20)
MATURITY = date(2018, 6, 20)

CC_TIMES = [0.25, 0.5, 1.00000001, 2.0, 3.0, 5.0, 7.2, 10.0, 20.0]
CC_RATES = [0.05, 0.06, 0.07, 0.05, 0.09, 0.09, 0.07, 0.065, 0.06]
YC_TIMES = [1 / 52, 1 / 12, 1 / 4, 1 / 2, 3 / 4, 1.0, 2.1, 5.2, 11.0, 30.0]
YC_RATES = [0.005, 0.006, 0.007, 0.01, 0.01, 0.015, 0.02, 0.03, 0.04, 0.05]

PILLAR_TENORS = ["6M", "1Y", "3Y", "5Y", "7Y", "10Y"]
PILLAR_SPREADS = [0.0070, 0.0080, 0.0105, 0.0125, 0.0140, 0.0150]


def make_cds(recovery_rate: float = 0.4, **kwargs) -> CDSAnalytic:
    params = dict(
        trade_date=TRADE_DATE,
        stepin_date=STEPIN_DATE,
        cash_settlement_date=CASH_SETTLE_DATE,
        accrual_start_date=ACCRUAL_START,
        end_date=MATURITY,
        recovery_rate=recovery_rate,
    )
    params.update(kwargs)
    return CDSAnalytic(**params)


def _dates_from_times(times):
    return [TRADE_DATE + timedelta(days=int(round(t * 365))) for t in times]


@pytest.fixture
def yield_curve() -> YieldCurve:
    return YieldCurve(YC_TIMES, YC_RATES)


@pytest.fixture
def credit_curve() -> CreditCurve:
    return CreditCurve(CC_TIMES, CC_RATES)


@pytest.fixture
def date_yield_curve() -> DateYieldCurve:
    return DateYieldCurve(TRADE_DATE, _dates_from_times(YC_TIMES), YC_RATES)


@pytest.fixture
def date_credit_curve() -> DateCreditCurve:
    return DateCreditCurve(TRADE_DATE, _dates_from_times(CC_TIMES), CC_RATES)


@pytest.fixture
def cds() -> CDSAnalytic:
    return make_cds()


@pytest.fixture
def pricer() -> AnalyticCDSPricer:
    return AnalyticCDSPricer()


@pytest.fixture
def factory() -> CDSAnalyticFactory:
    return CDSAnalyticFactory()


@pytest.fixture
def pillar_cds(factory):
    return factory.make_imm_cds_list(TRADE_DATE, PILLAR_TENORS)


@pytest.fixture
def pillar_spreads():
    return list(PILLAR_SPREADS)
