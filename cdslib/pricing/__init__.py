"""
CDS leg pricers, quote conversion and trade analytics.

The analytic pricer must be imported first: the curve builder depends on it
and the quote converter depends on the curve builder.
"""

from .analytic import AnalyticCDSPricer, epsilon, epsilon_p, epsilon_pp
from .isda import IsdaCompliantPresentValueCDS
from .quote_converter import MarketQuoteConverter
from .bond import BondAnalyticCalculator
from .analytics import CDSAnalyticsSummary, compute_cds_analytics

__all__ = [
    "AnalyticCDSPricer",
    "IsdaCompliantPresentValueCDS",
    "MarketQuoteConverter",
    "BondAnalyticCalculator",
    "CDSAnalyticsSummary",
    "compute_cds_analytics",
    "epsilon",
    "epsilon_p",
    "epsilon_pp",
]
