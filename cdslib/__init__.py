"""ISDA standard model CDS pricing kernel.

This package provides tools for pricing single-name credit default swaps
with the ISDA standard model: curve construction from market quotes, quote
conversion and spread sensitivities.

Key modules:
- conventions: Day counts, calendars, tenors and enums
- schedule: Premium leg schedules and integration grids
- instruments: CDS, quote and bond descriptions
- pricing: Leg pricers, quote conversion and trade analytics
- curves: Yield and credit curves and the credit curve bootstrap
- risk: Parallel and bucketed CS01
"""

__version__ = "1.0.0"

# pricing before curves; see cdslib.pricing
from cdslib import errors, conventions, schedule, instruments, pricing, curves, risk

__all__ = [
    "__version__",
    "errors",
    "conventions",
    "schedule",
    "instruments",
    "pricing",
    "curves",
    "risk",
]
