"""Standard CDS trade analytics (upfront, accrued, clean price, CS01)."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional

import pandas as pd

from cdslib.conventions.types import PriceType
from cdslib.curves.base import Curve
from cdslib.curves.builder import BuilderConfig
from cdslib.errors import UnsupportedQuoteType
from cdslib.instruments.cds import CDSAnalytic
from cdslib.instruments.quotes import CDSQuote, PointsUpFront, QuotedSpread
from cdslib.risk.spread_sensitivity import FiniteDifferenceSpreadSensitivityCalculator

from .quote_converter import MarketQuoteConverter

ONE_BP = 1e-4


@dataclass(frozen=True)
class CDSAnalyticsSummary:
    """Trade analytics in currency units; signs are from the holder's side."""

    accrued_days: int
    accrued_premium: float
    points_upfront: float
    quoted_spread: float
    clean_pv: float
    principal: float
    clean_price: float
    upfront: float
    parallel_cs01: float

    def to_series(self) -> pd.Series:
        return pd.Series(asdict(self))


def compute_cds_analytics(
    cds: CDSAnalytic,
    quote: CDSQuote,
    yield_curve: Curve,
    notional: float = 1.0,
    buy_protection: bool = True,
    bump: float = ONE_BP,
    config: Optional[BuilderConfig] = None,
) -> CDSAnalyticsSummary:
    """
    Upfront, accrued, clean price and CS01 of a standard CDS.

    Args:
        cds: Trade description
        quote: QuotedSpread or PointsUpFront quote of the trade
        yield_curve: Discount curve
        notional: Trade notional
        buy_protection: True for the protection buyer
        bump: Spread bump for the CS01
        config: Calibration settings

    Returns:
        Summary with the CS01 expressed per basis point of spread

    Raises:
        UnsupportedQuoteType: For a ParSpread quote, which carries no upfront
    """
    converter = MarketQuoteConverter(config)
    if isinstance(quote, QuotedSpread):
        puf = converter.quoted_spread_to_puf(cds, quote.coupon, yield_curve, quote.quoted_spread)
        quoted_spread = quote.quoted_spread
    elif isinstance(quote, PointsUpFront):
        puf = quote.puf
        quoted_spread = converter.puf_to_quoted_spread(cds, quote.coupon, yield_curve, puf)
    else:
        raise UnsupportedQuoteType(
            f"analytics need a QuotedSpread or PointsUpFront quote, got {type(quote).__name__}"
        )

    sign = 1.0 if buy_protection else -1.0
    coupon = quote.coupon
    flat_curve = converter.builder.calibrate_single(cds, quote, yield_curve)
    clean_pv = converter.pricer.pv(cds, yield_curve, flat_curve, coupon, PriceType.CLEAN)

    principal = sign * puf * notional
    accrued_premium = -sign * cds.accrued_premium(coupon) * notional
    calculator = FiniteDifferenceSpreadSensitivityCalculator(config=config)
    cs01 = calculator.parallel_cs01(cds, quote, yield_curve, bump)

    return CDSAnalyticsSummary(
        accrued_days=cds.accrued_days,
        accrued_premium=accrued_premium,
        points_upfront=puf,
        quoted_spread=quoted_spread,
        clean_pv=sign * clean_pv * notional,
        principal=principal,
        clean_price=100.0 * converter.clean_price(puf),
        upfront=principal + accrued_premium,
        parallel_cs01=sign * cs01 * ONE_BP * notional,
    )
