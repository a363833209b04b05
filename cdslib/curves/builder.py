"""
Credit curve bootstrap from CDS market quotes.

Pillars are solved one at a time in maturity order. Each pillar adds a knot
at the protection end of its CDS; the knot's zero hazard rate is found with
Brent's method so that the clean PV at the contract premium equals the
quoted points up front. Earlier knots are left untouched, so every pillar
reprices exactly on the final curve.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from cdslib.conventions.types import AccrualOnDefaultFormula, PriceType
from cdslib.errors import InvalidArgument, UnsupportedQuoteType
from cdslib.instruments.cds import CDSAnalytic
from cdslib.instruments.quotes import CDSQuote, ParSpread, PointsUpFront, QuotedSpread
from cdslib.pricing.analytic import AnalyticCDSPricer
from cdslib.utils.rootfinding import brent, find_bracket

from .base import CreditCurve, Curve

logger = logging.getLogger(__name__)


@dataclass
class BuilderConfig:
    """Configuration for credit curve calibration."""

    tolerance: float = 1e-14
    max_iterations: int = 100
    bracket_width: float = 0.01
    formula: AccrualOnDefaultFormula = AccrualOnDefaultFormula.ORIGINAL_ISDA


class CreditCurveBuilder:
    """Sequential bootstrapper producing a ``CreditCurve``."""

    def __init__(self, config: Optional[BuilderConfig] = None):
        self.config = config or BuilderConfig()
        self.pricer = AnalyticCDSPricer(self.config.formula)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------
    def calibrate(
        self, cds_list: Sequence[CDSAnalytic], quotes: Sequence[CDSQuote], yield_curve: Curve
    ) -> CreditCurve:
        """
        Calibrate to quotes of any convention (they may be mixed).

        Args:
            cds_list: Pillar CDSs in ascending maturity order
            quotes: One quote per CDS
            yield_curve: Discount curve

        Returns:
            Credit curve with one knot per pillar

        Raises:
            InvalidArgument: If the inputs are inconsistent
            UnsupportedQuoteType: If a quote is not one of the three conventions
        """
        if len(cds_list) != len(quotes):
            raise InvalidArgument(
                f"cds_list and quotes must have same length ({len(cds_list)} != {len(quotes)})"
            )
        premiums = []
        pufs = []
        for cds, quote in zip(cds_list, quotes):
            premium, puf = self._premium_and_puf(cds, quote, yield_curve)
            premiums.append(premium)
            pufs.append(puf)
        return self.calibrate_from_puf(cds_list, premiums, yield_curve, pufs)

    def calibrate_from_par_spreads(
        self, cds_list: Sequence[CDSAnalytic], spreads: Sequence[float], yield_curve: Curve
    ) -> CreditCurve:
        """Calibrate so that each pillar has zero clean PV at its par spread."""
        return self.calibrate_from_puf(cds_list, spreads, yield_curve, [0.0] * len(spreads))

    def calibrate_single(self, cds: CDSAnalytic, quote: CDSQuote, yield_curve: Curve) -> CreditCurve:
        """Flat (single knot) credit curve repricing one quote."""
        return self.calibrate([cds], [quote], yield_curve)

    def calibrate_from_puf(
        self,
        cds_list: Sequence[CDSAnalytic],
        premiums: Sequence[float],
        yield_curve: Curve,
        pufs: Sequence[float],
    ) -> CreditCurve:
        """
        Bootstrap from premiums and points up front.

        Args:
            cds_list: Pillar CDSs; protection ends must be strictly ascending
            premiums: Fractional premium (coupon) of each CDS
            yield_curve: Discount curve
            pufs: Clean upfront of each CDS as a fraction of notional

        Returns:
            Credit curve with knots at the pillar protection ends

        Raises:
            InvalidArgument: On empty or mismatched inputs, non-ascending
                pillars or a zero loss given default
            RootFindingError: If a pillar cannot be solved
        """
        n = len(cds_list)
        if n == 0:
            raise InvalidArgument("Need at least one CDS to calibrate")
        if len(premiums) != n or len(pufs) != n:
            raise InvalidArgument(
                f"cds_list, premiums and pufs must have same length ({n}, {len(premiums)}, {len(pufs)})"
            )
        times = [cds.protection_end for cds in cds_list]
        for i, cds in enumerate(cds_list):
            if cds.lgd == 0.0:
                raise InvalidArgument(f"CDS {i} has zero loss given default; no hazard rate is implied")
            if i > 0 and not times[i] > times[i - 1]:
                raise InvalidArgument(
                    f"Pillar maturities must be strictly ascending ({times[i - 1]} >= {times[i]})"
                )

        guesses = [
            self._initial_guess(cds, premium, puf) for cds, premium, puf in zip(cds_list, premiums, pufs)
        ]
        curve = CreditCurve(times, guesses)
        for i, (cds, premium, puf) in enumerate(zip(cds_list, premiums, pufs)):
            curve = self._solve_pillar(curve, i, cds, premium, puf, yield_curve, guesses[i])
        return curve

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _premium_and_puf(
        self, cds: CDSAnalytic, quote: CDSQuote, yield_curve: Curve
    ) -> Tuple[float, float]:
        if isinstance(quote, ParSpread):
            return quote.coupon, 0.0
        if isinstance(quote, PointsUpFront):
            return quote.coupon, quote.puf
        if isinstance(quote, QuotedSpread):
            flat = self.calibrate_from_par_spreads([cds], [quote.quoted_spread], yield_curve)
            return quote.coupon, self.pricer.pv(cds, yield_curve, flat, quote.coupon, PriceType.CLEAN)
        raise UnsupportedQuoteType(f"unknown quote type {type(quote).__name__}")

    @staticmethod
    def _initial_guess(cds: CDSAnalytic, premium: float, puf: float) -> float:
        # credit triangle with the upfront spread over the contract life
        duration = max(cds.protection_end - max(cds.protection_start, 0.0), cds.curve_one_day)
        return (premium + puf / duration) / cds.lgd

    def _solve_pillar(
        self,
        curve: CreditCurve,
        index: int,
        cds: CDSAnalytic,
        premium: float,
        puf: float,
        yield_curve: Curve,
        guess: float,
    ) -> CreditCurve:
        def objective(rate: float) -> float:
            trial = curve.with_rate(rate, index)
            return self.pricer.pv(cds, yield_curve, trial, premium, PriceType.CLEAN) - puf

        width = self.config.bracket_width
        lower, upper = find_bracket(objective, guess - width, guess + width)
        result = brent(
            objective,
            lower,
            upper,
            tol_x=self.config.tolerance,
            max_iter=self.config.max_iterations,
        )
        logger.debug(
            "Pillar %d (t=%.6f): zero hazard rate %.10f in %d iterations",
            index,
            curve.time_at(index),
            result.root,
            result.iterations,
        )
        if result.root < 0.0:
            logger.warning(
                "Negative zero hazard rate %.6e calibrated at pillar %d (t=%.6f)",
                result.root,
                index,
                curve.time_at(index),
            )
        return curve.with_rate(result.root, index)


def implied_par_spreads(
    pricer: AnalyticCDSPricer,
    cds_list: Sequence[CDSAnalytic],
    yield_curve: Curve,
    credit_curve: Curve,
) -> List[float]:
    """Par spread of each CDS off a given credit curve."""
    return [pricer.par_spread(cds, yield_curve, credit_curve) for cds in cds_list]
