"""
Market conventions: day counts, calendars, tenors and shared enums.
"""

# Day counts
from .daycount import (
    ACT_360,
    ACT_365F,
    ACT_ACT,
    THIRTY_360E,
    THIRTY_360U,
    DayCountConvention,
    get_day_count_convention,
)

# Calendars
from .calendars import TARGET, WEEKEND_ONLY, Calendar, get_calendar

# Tenors
from .tenor import add_tenor, parse_tenor, tenor_in_months

# Enums
from .types import (
    AccrualOnDefaultFormula,
    BumpType,
    BusinessDayAdjustment,
    FiniteDifferenceType,
    PriceType,
    StubType,
)

__all__ = [
    # Day counts
    "DayCountConvention",
    "ACT_360",
    "ACT_365F",
    "ACT_ACT",
    "THIRTY_360E",
    "THIRTY_360U",
    "get_day_count_convention",
    # Calendars
    "Calendar",
    "TARGET",
    "WEEKEND_ONLY",
    "get_calendar",
    # Tenors
    "add_tenor",
    "parse_tenor",
    "tenor_in_months",
    # Enums
    "AccrualOnDefaultFormula",
    "BumpType",
    "BusinessDayAdjustment",
    "FiniteDifferenceType",
    "PriceType",
    "StubType",
]
