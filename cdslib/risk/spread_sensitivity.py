"""
Bump-and-reprice credit spread sensitivities (CS01).

Every sensitivity rebuilds the credit curve from bumped market quotes and
reprices the trade; no analytic derivative is used, so the results are
exact for arbitrarily large bumps. Bucketed sensitivities rebuild the whole
curve once per pillar.

All bump amounts are fractional, so one basis point is ``1e-4``. Results
are PV changes per unit notional divided by the bump amount.
"""

from __future__ import annotations

import bisect
import logging
from typing import TYPE_CHECKING, List, Optional, Sequence

import numpy as np

from cdslib.conventions.types import (
    AccrualOnDefaultFormula,
    BumpType,
    FiniteDifferenceType,
    PriceType,
)
from cdslib.curves.builder import BuilderConfig, CreditCurveBuilder, implied_par_spreads
from cdslib.errors import InvalidArgument, UnsupportedQuoteType
from cdslib.instruments.cds import CDSAnalytic
from cdslib.instruments.quotes import CDSQuote, ParSpread, PointsUpFront, QuotedSpread
from cdslib.pricing.quote_converter import MarketQuoteConverter

if TYPE_CHECKING:
    from cdslib.curves.base import Curve

logger = logging.getLogger(__name__)

MIN_BUMP = 1e-10


def _check_bump(amount: float) -> None:
    if abs(amount) <= MIN_BUMP:
        raise InvalidArgument("bump amount too small")


def _check_lengths(market_cds: Sequence[CDSAnalytic], values: Sequence, name: str) -> None:
    if len(market_cds) == 0:
        raise InvalidArgument("Need at least one market CDS")
    if len(values) != len(market_cds):
        raise InvalidArgument(f"{name} length does not match the market CDSs")


class FiniteDifferenceSpreadSensitivityCalculator:
    """Parallel and bucketed CS01 by finite shifts of market spreads."""

    def __init__(
        self,
        formula: AccrualOnDefaultFormula = AccrualOnDefaultFormula.ORIGINAL_ISDA,
        config: Optional[BuilderConfig] = None,
    ):
        if config is None:
            config = BuilderConfig(formula=formula)
        self.builder = CreditCurveBuilder(config)
        self.converter = MarketQuoteConverter(config)
        self.pricer = self.builder.pricer

    # ------------------------------------------------------------------
    # Parallel CS01 from a single quote
    # ------------------------------------------------------------------
    def parallel_cs01(
        self, cds: CDSAnalytic, quote: CDSQuote, yield_curve: Curve, bump: float
    ) -> float:
        """
        CS01 of a CDS from its own market quote.

        Points up front are first converted to a quoted spread, which is then
        bumped; par and quoted spreads are bumped directly.

        Args:
            cds: Trade description
            quote: Market quote of the trade
            yield_curve: Discount curve
            bump: Fractional bump of the spread, 1e-4 for one basis point

        Raises:
            UnsupportedQuoteType: If ``quote`` is not a known convention
        """
        if isinstance(quote, QuotedSpread):
            return self.parallel_cs01_from_par_spreads(
                cds, quote.coupon, yield_curve, [cds], [quote.quoted_spread], bump, BumpType.ADDITIVE
            )
        if isinstance(quote, PointsUpFront):
            return self.parallel_cs01_from_puf(cds, quote.coupon, yield_curve, quote.puf, bump)
        if isinstance(quote, ParSpread):
            return self.parallel_cs01_from_par_spreads(
                cds, quote.coupon, yield_curve, [cds], [quote.coupon], bump, BumpType.ADDITIVE
            )
        raise UnsupportedQuoteType(f"unknown quote type {type(quote).__name__}")

    def parallel_cs01_from_puf(
        self, cds: CDSAnalytic, coupon: float, yield_curve: Curve, puf: float, bump: float
    ) -> float:
        """CS01 by a shift of the quoted spread implied by a points-up-front quote."""
        _check_bump(bump)
        bumped_qs = self.converter.puf_to_quoted_spread(cds, coupon, yield_curve, puf) + bump
        bumped_curve = self.builder.calibrate_single(cds, ParSpread(bumped_qs), yield_curve)
        bumped_price = self.pricer.pv(cds, yield_curve, bumped_curve, coupon)
        return (bumped_price - puf) / bump

    def parallel_cs01_from_spread(
        self,
        cds: CDSAnalytic,
        coupon: float,
        yield_curve: Curve,
        market_spread: float,
        bump: float,
        bump_type: BumpType = BumpType.ADDITIVE,
    ) -> float:
        """CS01 by a shift of the trade's own market spread (par or quoted)."""
        return self.parallel_cs01_from_par_spreads(
            cds, coupon, yield_curve, [cds], [market_spread], bump, bump_type
        )

    def parallel_cs01_from_quoted_spread(
        self,
        cds: CDSAnalytic,
        coupon: float,
        yield_curve: Curve,
        reference_cds: CDSAnalytic,
        quoted_spread: float,
        bump: float,
        bump_type: BumpType = BumpType.ADDITIVE,
    ) -> float:
        """CS01 by a shift of the quoted spread of a reference CDS (often the trade itself)."""
        _check_bump(bump)
        return self.parallel_cs01_from_par_spreads(
            cds, coupon, yield_curve, [reference_cds], [quoted_spread], bump, bump_type
        )

    # ------------------------------------------------------------------
    # Parallel CS01 from a term structure of quotes
    # ------------------------------------------------------------------
    def parallel_cs01_from_pillar_quotes(
        self,
        cds: CDSAnalytic,
        coupon: float,
        yield_curve: Curve,
        market_cds: Sequence[CDSAnalytic],
        quotes: Sequence[CDSQuote],
        bump: float,
    ) -> float:
        """
        CS01 by a parallel shift of all pillar quotes (any mix of conventions).

        Args:
            cds: Trade description
            coupon: Trade coupon (fractional)
            yield_curve: Discount curve
            market_cds: Pillar CDSs used to build the credit curve
            quotes: Market quote of each pillar
            bump: Fractional bump amount

        Returns:
            Clean PV change divided by ``bump``
        """
        _check_bump(bump)
        _check_lengths(market_cds, quotes, "quotes")
        base_curve = self.builder.calibrate(market_cds, quotes, yield_curve)
        base_price = self.pricer.pv(cds, yield_curve, base_curve, coupon)

        bumped_quotes = self.bump_quotes(market_cds, quotes, yield_curve, bump)
        bumped_curve = self.builder.calibrate(market_cds, bumped_quotes, yield_curve)
        bumped_price = self.pricer.pv(cds, yield_curve, bumped_curve, coupon)
        return (bumped_price - base_price) / bump

    def parallel_cs01_from_par_spreads(
        self,
        cds: CDSAnalytic,
        coupon: float,
        yield_curve: Curve,
        market_cds: Sequence[CDSAnalytic],
        par_spreads: Sequence[float],
        bump: float,
        bump_type: BumpType = BumpType.ADDITIVE,
    ) -> float:
        """CS01 by a parallel shift of pillar par spreads, on dirty PV."""
        _check_bump(bump)
        _check_lengths(market_cds, par_spreads, "par_spreads")
        bumped = self.make_bumped_spreads(par_spreads, bump, bump_type)
        diff = self._pv_difference(
            cds, coupon, market_cds, bumped, par_spreads, yield_curve, PriceType.DIRTY
        )
        return diff / bump

    def parallel_cs01_from_credit_curve(
        self,
        cds: CDSAnalytic,
        coupon: float,
        pillar_cds: Sequence[CDSAnalytic],
        yield_curve: Curve,
        credit_curve: Curve,
        bump: float,
    ) -> float:
        """CS01 by a parallel shift of the par spreads implied by an existing credit curve.

        Raises:
            InvalidArgument: If the pillar maturities are not ascending
        """
        _check_bump(bump)
        spreads = self._implied_spreads(pillar_cds, yield_curve, credit_curve)
        base_curve = self.builder.calibrate_from_par_spreads(pillar_cds, spreads, yield_curve)
        base_price = self.pricer.pv(cds, yield_curve, base_curve, coupon)
        bumped = self.make_bumped_spreads(spreads, bump, BumpType.ADDITIVE)
        bumped_curve = self.builder.calibrate_from_par_spreads(pillar_cds, bumped, yield_curve)
        price = self.pricer.pv(cds, yield_curve, bumped_curve, coupon)
        return (price - base_price) / bump

    # ------------------------------------------------------------------
    # Bucketed CS01
    # ------------------------------------------------------------------
    def bucketed_cs01_from_pillar_quotes(
        self,
        cds: CDSAnalytic,
        coupon: float,
        yield_curve: Curve,
        market_cds: Sequence[CDSAnalytic],
        quotes: Sequence[CDSQuote],
        bump: float,
    ) -> np.ndarray:
        """One CS01 per pillar, bumping one quote at a time."""
        _check_bump(bump)
        _check_lengths(market_cds, quotes, "quotes")
        base_curve = self.builder.calibrate(market_cds, quotes, yield_curve)
        base_price = self.pricer.pv(cds, yield_curve, base_curve, coupon)

        result = np.zeros(len(market_cds))
        for i in range(len(market_cds)):
            bumped_quotes = self.bump_quote_at_index(market_cds, quotes, yield_curve, bump, i)
            bumped_curve = self.builder.calibrate(market_cds, bumped_quotes, yield_curve)
            price = self.pricer.pv(cds, yield_curve, bumped_curve, coupon)
            result[i] = (price - base_price) / bump
            logger.debug("Bucket %d: CS01 %.10f", i, result[i])
        return result

    def bucketed_cs01_from_par_spreads(
        self,
        cds: CDSAnalytic,
        coupon: float,
        yield_curve: Curve,
        market_cds: Sequence[CDSAnalytic],
        par_spreads: Sequence[float],
        bump: float,
        bump_type: BumpType = BumpType.ADDITIVE,
    ) -> np.ndarray:
        """One CS01 per pillar par spread, on dirty PV."""
        _check_bump(bump)
        _check_lengths(market_cds, par_spreads, "par_spreads")
        base_curve = self.builder.calibrate_from_par_spreads(market_cds, par_spreads, yield_curve)
        base_price = self.pricer.pv(cds, yield_curve, base_curve, coupon, PriceType.DIRTY)

        result = np.zeros(len(market_cds))
        for i in range(len(market_cds)):
            bumped = self.make_bumped_spreads(par_spreads, bump, bump_type, index=i)
            bumped_curve = self.builder.calibrate_from_par_spreads(market_cds, bumped, yield_curve)
            price = self.pricer.pv(cds, yield_curve, bumped_curve, coupon, PriceType.DIRTY)
            result[i] = (price - base_price) / bump
            logger.debug("Bucket %d: CS01 %.10f", i, result[i])
        return result

    def bucketed_cs01_from_quoted_spreads(
        self,
        cds: CDSAnalytic,
        deal_spread: float,
        yield_curve: Curve,
        market_cds: Sequence[CDSAnalytic],
        quoted_spreads: Sequence[float],
        bump: float,
        bump_type: BumpType = BumpType.ADDITIVE,
    ) -> np.ndarray:
        """One CS01 per pillar quoted spread; all pillars trade at ``deal_spread``."""
        return self.bucketed_cs01_from_quoted_spreads_multi(
            [cds], deal_spread, yield_curve, market_cds, quoted_spreads, bump, bump_type
        )[0]

    def bucketed_cs01_from_quoted_spreads_multi(
        self,
        cds_list: Sequence[CDSAnalytic],
        deal_spread: float,
        yield_curve: Curve,
        market_cds: Sequence[CDSAnalytic],
        quoted_spreads: Sequence[float],
        bump: float,
        bump_type: BumpType = BumpType.ADDITIVE,
    ) -> np.ndarray:
        """
        Bucketed CS01 of several trades from pillar quoted spreads.

        Each quoted spread is converted to points up front at ``deal_spread``
        and the curve is bootstrapped from the upfronts. Bumping a pillar
        changes only that pillar's upfront.

        Returns:
            Array of shape ``(len(cds_list), len(market_cds))``, on dirty PV
        """
        _check_bump(bump)
        _check_lengths(market_cds, quoted_spreads, "quoted_spreads")
        n = len(market_cds)
        premiums = [deal_spread] * n

        pufs = self.converter.quoted_spreads_to_puf(market_cds, premiums, yield_curve, quoted_spreads)
        base_curve = self.builder.calibrate_from_puf(market_cds, premiums, yield_curve, pufs)
        base_prices = [
            self.pricer.pv(cds, yield_curve, base_curve, deal_spread, PriceType.DIRTY)
            for cds in cds_list
        ]

        result = np.zeros((len(cds_list), n))
        for i in range(n):
            bumped_qs = self.bumped_spread(quoted_spreads[i], bump, bump_type)
            bumped_pufs = list(pufs)
            bumped_pufs[i] = self.converter.quoted_spread_to_puf(
                market_cds[i], premiums[i], yield_curve, bumped_qs
            )
            bumped_curve = self.builder.calibrate_from_puf(market_cds, premiums, yield_curve, bumped_pufs)
            for j, cds in enumerate(cds_list):
                price = self.pricer.pv(cds, yield_curve, bumped_curve, deal_spread, PriceType.DIRTY)
                result[j, i] = (price - base_prices[j]) / bump
            logger.debug("Bucket %d: bumped quoted spread %.8f", i, bumped_qs)
        return result

    def bucketed_cs01_from_bucket_par_spreads(
        self,
        cds: CDSAnalytic,
        coupon: float,
        bucket_cds: Sequence[CDSAnalytic],
        yield_curve: Curve,
        pillar_cds: Sequence[CDSAnalytic],
        pillar_spreads: Sequence[float],
        bump: float,
    ) -> np.ndarray:
        """Bucketed CS01 at ``bucket_cds`` maturities off the curve built from pillar par spreads."""
        _check_lengths(pillar_cds, pillar_spreads, "pillar_spreads")
        credit_curve = self.builder.calibrate_from_par_spreads(pillar_cds, pillar_spreads, yield_curve)
        return self.bucketed_cs01_from_credit_curve(
            cds, coupon, bucket_cds, yield_curve, credit_curve, bump
        )

    def bucketed_cs01_from_puf(
        self,
        cds: CDSAnalytic,
        puf: PointsUpFront,
        yield_curve: Curve,
        bucket_cds: Sequence[CDSAnalytic],
        bump: float,
    ) -> np.ndarray:
        """Bucketed CS01 off the flat curve implied by the trade's own upfront."""
        credit_curve = self.builder.calibrate_single(cds, puf, yield_curve)
        return self.bucketed_cs01_from_credit_curve(
            cds, puf.coupon, bucket_cds, yield_curve, credit_curve, bump
        )

    def bucketed_cs01_from_credit_curve(
        self,
        cds: CDSAnalytic,
        coupon: float,
        bucket_cds: Sequence[CDSAnalytic],
        yield_curve: Curve,
        credit_curve: Curve,
        bump: float,
    ) -> np.ndarray:
        """
        Bucketed CS01 against par spreads implied at ``bucket_cds`` maturities.

        Buckets after the one containing the trade maturity carry no
        sensitivity and are left at zero.

        Raises:
            InvalidArgument: If the bucket maturities are not ascending
        """
        _check_bump(bump)
        spreads = self._implied_spreads(bucket_cds, yield_curve, credit_curve)
        n = len(bucket_cds)
        ends = [c.protection_end for c in bucket_cds]
        last = min(bisect.bisect_left(ends, cds.protection_end), n - 1)

        base_curve = self.builder.calibrate_from_par_spreads(bucket_cds, spreads, yield_curve)
        base_price = self.pricer.pv(cds, yield_curve, base_curve, coupon)

        result = np.zeros(n)
        for i in range(last + 1):
            bumped = self.make_bumped_spreads(spreads, bump, BumpType.ADDITIVE, index=i)
            bumped_curve = self.builder.calibrate_from_par_spreads(bucket_cds, bumped, yield_curve)
            price = self.pricer.pv(cds, yield_curve, bumped_curve, coupon)
            result[i] = (price - base_price) / bump
            logger.debug("Bucket %d: CS01 %.10f", i, result[i])
        return result

    # ------------------------------------------------------------------
    # Generic finite differences
    # ------------------------------------------------------------------
    def finite_difference_spread_sensitivity(
        self,
        cds: CDSAnalytic,
        spread: float,
        price_type: PriceType,
        yield_curve: Curve,
        market_cds: Sequence[CDSAnalytic],
        market_spreads: Sequence[float],
        delta_spreads: Sequence[float],
        fd_type: FiniteDifferenceType,
    ) -> float:
        """
        PV difference under shifted market par spreads.

        Args:
            cds: Trade description
            spread: Trade spread (fractional)
            price_type: CLEAN or DIRTY
            yield_curve: Discount curve
            market_cds: Pillar CDSs
            market_spreads: Pillar par spreads, all positive
            delta_spreads: Shift of each pillar spread, all non-negative
            fd_type: FORWARD, CENTRAL or BACKWARD

        Returns:
            The (unscaled) PV difference

        Raises:
            InvalidArgument: If spreads are not positive, deltas are negative,
                or a non-forward shift is not smaller than its spread
        """
        _check_lengths(market_cds, market_spreads, "market_spreads")
        _check_lengths(market_cds, delta_spreads, "delta_spreads")
        for s, d in zip(market_spreads, delta_spreads):
            if not s > 0.0:
                raise InvalidArgument("spreads must be positive")
            if d < 0.0:
                raise InvalidArgument("delta spreads must be non-negative")
            if fd_type is not FiniteDifferenceType.FORWARD and not d < s:
                raise InvalidArgument(
                    "delta spread must be less than spread, unless forward difference is used"
                )

        up = [s + d for s, d in zip(market_spreads, delta_spreads)]
        down = [s - d for s, d in zip(market_spreads, delta_spreads)]
        if fd_type is FiniteDifferenceType.CENTRAL:
            return self._pv_difference(cds, spread, market_cds, up, down, yield_curve, price_type)
        if fd_type is FiniteDifferenceType.FORWARD:
            return self._pv_difference(
                cds, spread, market_cds, up, market_spreads, yield_curve, price_type
            )
        if fd_type is FiniteDifferenceType.BACKWARD:
            return self._pv_difference(
                cds, spread, market_cds, market_spreads, down, yield_curve, price_type
            )
        raise InvalidArgument(f"unknown finite difference type {fd_type}")

    def _pv_difference(
        self,
        cds: CDSAnalytic,
        spread: float,
        market_cds: Sequence[CDSAnalytic],
        spreads_up: Sequence[float],
        spreads_down: Sequence[float],
        yield_curve: Curve,
        price_type: PriceType,
    ) -> float:
        curve_up = self.builder.calibrate_from_par_spreads(market_cds, spreads_up, yield_curve)
        curve_down = self.builder.calibrate_from_par_spreads(market_cds, spreads_down, yield_curve)
        up = self.pricer.pv(cds, yield_curve, curve_up, spread, price_type)
        down = self.pricer.pv(cds, yield_curve, curve_down, spread, price_type)
        return up - down

    def _implied_spreads(
        self, pillar_cds: Sequence[CDSAnalytic], yield_curve: Curve, credit_curve: Curve
    ) -> List[float]:
        if len(pillar_cds) == 0:
            raise InvalidArgument("Need at least one pillar CDS")
        for prev, curr in zip(pillar_cds[:-1], pillar_cds[1:]):
            if not curr.protection_end > prev.protection_end:
                raise InvalidArgument("pillars must be ascending")
        return implied_par_spreads(self.pricer, pillar_cds, yield_curve, credit_curve)

    # ------------------------------------------------------------------
    # Bumping
    # ------------------------------------------------------------------
    @staticmethod
    def bumped_spread(spread: float, amount: float, bump_type: BumpType) -> float:
        if bump_type is BumpType.ADDITIVE:
            return spread + amount
        if bump_type is BumpType.MULTIPLICATIVE:
            return spread * (1.0 + amount)
        raise InvalidArgument(f"bump type {bump_type} is not supported")

    @classmethod
    def make_bumped_spreads(
        cls,
        spreads: Sequence[float],
        amount: float,
        bump_type: BumpType,
        index: Optional[int] = None,
    ) -> List[float]:
        """New list of spreads with all of them, or only ``index``, bumped."""
        if index is None:
            return [cls.bumped_spread(s, amount, bump_type) for s in spreads]
        bumped = list(spreads)
        bumped[index] = cls.bumped_spread(bumped[index], amount, bump_type)
        return bumped

    def bump_quote(
        self, cds: CDSAnalytic, quote: CDSQuote, yield_curve: Curve, eps: float
    ) -> CDSQuote:
        """
        Quote of the same convention with its spread shifted by ``eps``.

        Points up front are shifted through their quoted spread.
        """
        if isinstance(quote, ParSpread):
            return ParSpread(quote.coupon + eps)
        if isinstance(quote, QuotedSpread):
            return QuotedSpread(quote.coupon, quote.quoted_spread + eps)
        if isinstance(quote, PointsUpFront):
            qs = self.converter.puf_to_quoted_spread(cds, quote.coupon, yield_curve, quote.puf)
            puf = self.converter.quoted_spread_to_puf(cds, quote.coupon, yield_curve, qs + eps)
            return PointsUpFront(quote.coupon, puf)
        raise UnsupportedQuoteType(f"unknown quote type {type(quote).__name__}")

    def bump_quotes(
        self,
        cds_list: Sequence[CDSAnalytic],
        quotes: Sequence[CDSQuote],
        yield_curve: Curve,
        eps: float,
    ) -> List[CDSQuote]:
        return [self.bump_quote(cds, q, yield_curve, eps) for cds, q in zip(cds_list, quotes)]

    def bump_quote_at_index(
        self,
        cds_list: Sequence[CDSAnalytic],
        quotes: Sequence[CDSQuote],
        yield_curve: Curve,
        eps: float,
        index: int,
    ) -> List[CDSQuote]:
        bumped = list(quotes)
        bumped[index] = self.bump_quote(cds_list[index], quotes[index], yield_curve, eps)
        return bumped
