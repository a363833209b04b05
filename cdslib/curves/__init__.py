"""
Curves package - yield and credit curves and the credit curve bootstrap.

Main APIs:
---------
    - Curve, YieldCurve, CreditCurve: time-based curves, linear in r*t
    - DateCurve, DateYieldCurve, DateCreditCurve: curves with knot dates
    - CreditCurveBuilder: bootstrap a CreditCurve from CDS quotes
"""

from .base import CreditCurve, Curve, YieldCurve
from .dated import DateCreditCurve, DateCurve, DateYieldCurve

# Builder depends on the analytic pricer
from .builder import BuilderConfig, CreditCurveBuilder, implied_par_spreads

__all__ = [
    # Base
    "Curve",
    "YieldCurve",
    "CreditCurve",
    # Dated
    "DateCurve",
    "DateYieldCurve",
    "DateCreditCurve",
    # Bootstrap
    "BuilderConfig",
    "CreditCurveBuilder",
    "implied_par_spreads",
]
