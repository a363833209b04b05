"""
CDS market quote conventions.

A CDS price is quoted in exactly one of three ways, modelled as a closed
union of frozen dataclasses:

- ``ParSpread``: the break-even coupon of the contract
- ``QuotedSpread``: traded coupon plus the flat-curve equivalent spread
- ``PointsUpFront``: traded coupon plus the upfront fraction of notional

All three expose ``coupon``. Operations dispatch on the quote type and raise
``UnsupportedQuoteType`` for anything else.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from cdslib.errors import InvalidArgument, UnsupportedQuoteType


def _check_coupon(coupon: float) -> None:
    if coupon < 0.0:
        raise InvalidArgument(f"coupon must be non-negative, got {coupon}")


@dataclass(frozen=True)
class ParSpread:
    """Par (break-even) spread; the coupon is the spread itself."""

    coupon: float

    def __post_init__(self):
        _check_coupon(self.coupon)


@dataclass(frozen=True)
class QuotedSpread:
    """Traded coupon and the flat-hazard-curve equivalent spread."""

    coupon: float
    quoted_spread: float

    def __post_init__(self):
        _check_coupon(self.coupon)


@dataclass(frozen=True)
class PointsUpFront:
    """Traded coupon and the clean upfront payment as a fraction of notional."""

    coupon: float
    puf: float

    def __post_init__(self):
        _check_coupon(self.coupon)


CDSQuote = Union[ParSpread, QuotedSpread, PointsUpFront]


def check_quote(quote: object) -> CDSQuote:
    """Return ``quote`` unchanged if it is one of the three conventions."""
    if not isinstance(quote, (ParSpread, QuotedSpread, PointsUpFront)):
        raise UnsupportedQuoteType(f"unknown quote type {type(quote).__name__}")
    return quote
