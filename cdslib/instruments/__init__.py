"""
Instrument descriptions: CDS contracts, market quotes and risky bonds.
"""

from .bond import BondAnalytic
from .cds import (
    CDSAnalytic,
    CDSAnalyticFactory,
    CDSCoupon,
    is_imm_date,
    next_imm_date,
    prev_imm_date,
)
from .quotes import CDSQuote, ParSpread, PointsUpFront, QuotedSpread, check_quote

__all__ = [
    # CDS
    "CDSAnalytic",
    "CDSAnalyticFactory",
    "CDSCoupon",
    "is_imm_date",
    "next_imm_date",
    "prev_imm_date",
    # Quotes
    "CDSQuote",
    "ParSpread",
    "PointsUpFront",
    "QuotedSpread",
    "check_quote",
    # Bonds
    "BondAnalytic",
]
