"""
Premium schedules, date adjustment and integration grids.
"""

from .adjustments import adjust_date
from .integration import (
    get_integration_nodes_as_dates,
    get_integration_nodes_as_times,
    get_integration_points,
    truncate_dates,
    truncate_set_inclusive,
)
from .premium_leg import (
    PremiumLegSchedule,
    PremiumPeriod,
    infer_stub_type,
    unadjusted_dates,
)

__all__ = [
    "adjust_date",
    # Premium leg
    "PremiumLegSchedule",
    "PremiumPeriod",
    "infer_stub_type",
    "unadjusted_dates",
    # Integration grids
    "get_integration_nodes_as_dates",
    "get_integration_nodes_as_times",
    "get_integration_points",
    "truncate_dates",
    "truncate_set_inclusive",
]
