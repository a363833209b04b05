"""
Conversion between CDS quote conventions.

Points up front and quoted spread are linked through a flat credit curve:
the quoted spread of a trade is the par spread off the single-knot curve
that reprices its upfront, and vice versa. Par spreads of a term structure
of CDSs are linked to upfronts through a full bootstrap.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Sequence

from cdslib.conventions.types import PriceType
from cdslib.curves.builder import BuilderConfig, CreditCurveBuilder
from cdslib.errors import InvalidArgument, UnsupportedQuoteType
from cdslib.instruments.cds import CDSAnalytic
from cdslib.instruments.quotes import CDSQuote, ParSpread, PointsUpFront, QuotedSpread

if TYPE_CHECKING:
    from cdslib.curves.base import Curve


def _check_lengths(**sequences: Sequence) -> None:
    lengths = {name: len(values) for name, values in sequences.items()}
    if len(set(lengths.values())) > 1:
        raise InvalidArgument(f"Inputs must have the same length: {lengths}")


class MarketQuoteConverter:
    """Converts between par spread, quoted spread and points up front."""

    def __init__(self, config: Optional[BuilderConfig] = None):
        self.builder = CreditCurveBuilder(config)
        self.pricer = self.builder.pricer

    # ------------------------------------------------------------------
    # Single trade (flat curve)
    # ------------------------------------------------------------------
    def puf_to_quoted_spread(
        self, cds: CDSAnalytic, coupon: float, yield_curve: Curve, puf: float
    ) -> float:
        """
        Quoted spread equivalent to an upfront.

        Args:
            cds: Trade description
            coupon: Traded coupon (fractional)
            yield_curve: Discount curve
            puf: Clean upfront as a fraction of notional

        Returns:
            Par spread off the flat curve that reprices ``puf``; 0.0 when the
            recovery rate is one
        """
        if cds.lgd == 0.0:
            return 0.0
        flat = self.builder.calibrate_from_puf([cds], [coupon], yield_curve, [puf])
        return self.pricer.par_spread(cds, yield_curve, flat)

    def quoted_spread_to_puf(
        self, cds: CDSAnalytic, coupon: float, yield_curve: Curve, quoted_spread: float
    ) -> float:
        """
        Upfront equivalent to a quoted spread.

        Raises:
            InvalidArgument: If the recovery rate is one, since no hazard rate
                is implied by the spread
        """
        if cds.lgd == 0.0:
            raise InvalidArgument("quoted spread implies no hazard rate when recovery is one")
        flat = self.builder.calibrate_from_par_spreads([cds], [quoted_spread], yield_curve)
        return self.pricer.pv(cds, yield_curve, flat, coupon, PriceType.CLEAN)

    def puf_to_quoted_spreads(
        self,
        cds_list: Sequence[CDSAnalytic],
        coupons: Sequence[float],
        yield_curve: Curve,
        pufs: Sequence[float],
    ) -> List[float]:
        _check_lengths(cds_list=cds_list, coupons=coupons, pufs=pufs)
        return [
            self.puf_to_quoted_spread(cds, coupon, yield_curve, puf)
            for cds, coupon, puf in zip(cds_list, coupons, pufs)
        ]

    def quoted_spreads_to_puf(
        self,
        cds_list: Sequence[CDSAnalytic],
        coupons: Sequence[float],
        yield_curve: Curve,
        quoted_spreads: Sequence[float],
    ) -> List[float]:
        _check_lengths(cds_list=cds_list, coupons=coupons, quoted_spreads=quoted_spreads)
        return [
            self.quoted_spread_to_puf(cds, coupon, yield_curve, qs)
            for cds, coupon, qs in zip(cds_list, coupons, quoted_spreads)
        ]

    # ------------------------------------------------------------------
    # Term structure (bootstrapped curve)
    # ------------------------------------------------------------------
    def par_spreads_to_puf(
        self,
        cds_list: Sequence[CDSAnalytic],
        coupons: Sequence[float],
        yield_curve: Curve,
        par_spreads: Sequence[float],
    ) -> List[float]:
        """Upfronts at the given coupons off the curve bootstrapped to ``par_spreads``."""
        _check_lengths(cds_list=cds_list, coupons=coupons, par_spreads=par_spreads)
        curve = self.builder.calibrate_from_par_spreads(cds_list, par_spreads, yield_curve)
        return [
            self.pricer.pv(cds, yield_curve, curve, coupon, PriceType.CLEAN)
            for cds, coupon in zip(cds_list, coupons)
        ]

    def puf_to_par_spreads(
        self,
        cds_list: Sequence[CDSAnalytic],
        coupons: Sequence[float],
        yield_curve: Curve,
        pufs: Sequence[float],
    ) -> List[float]:
        """Par spreads off the curve bootstrapped to ``pufs`` at ``coupons``."""
        _check_lengths(cds_list=cds_list, coupons=coupons, pufs=pufs)
        curve = self.builder.calibrate_from_puf(cds_list, coupons, yield_curve, pufs)
        return [self.pricer.par_spread(cds, yield_curve, curve) for cds in cds_list]

    # ------------------------------------------------------------------
    # Quote objects
    # ------------------------------------------------------------------
    def to_quoted_spread(self, cds: CDSAnalytic, quote: CDSQuote, yield_curve: Curve) -> QuotedSpread:
        """Express any quote as a quoted spread."""
        if isinstance(quote, QuotedSpread):
            return quote
        if isinstance(quote, ParSpread):
            return QuotedSpread(quote.coupon, quote.coupon)
        if isinstance(quote, PointsUpFront):
            qs = self.puf_to_quoted_spread(cds, quote.coupon, yield_curve, quote.puf)
            return QuotedSpread(quote.coupon, qs)
        raise UnsupportedQuoteType(f"unknown quote type {type(quote).__name__}")

    def to_points_up_front(
        self, cds: CDSAnalytic, quote: CDSQuote, yield_curve: Curve
    ) -> PointsUpFront:
        """Express any quote as points up front."""
        if isinstance(quote, PointsUpFront):
            return quote
        if isinstance(quote, ParSpread):
            return PointsUpFront(quote.coupon, 0.0)
        if isinstance(quote, QuotedSpread):
            puf = self.quoted_spread_to_puf(cds, quote.coupon, yield_curve, quote.quoted_spread)
            return PointsUpFront(quote.coupon, puf)
        raise UnsupportedQuoteType(f"unknown quote type {type(quote).__name__}")

    # ------------------------------------------------------------------
    # Prices
    # ------------------------------------------------------------------
    @staticmethod
    def clean_price(puf: float) -> float:
        """Clean price per unit notional, ``1 - puf``."""
        return 1.0 - puf

    @staticmethod
    def puf_from_clean_price(clean_price: float) -> float:
        return 1.0 - clean_price
