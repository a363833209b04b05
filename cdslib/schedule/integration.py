"""
Integration grids for the semi-analytic leg integrals.

Between consecutive nodes both the yield and the credit curve have constant
forward rates, so the leg integrals have closed forms on every sub-interval.
The grids are therefore the union of both curves' knots inside the
integration window plus the window end points.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, List, Sequence

import numpy as np

from cdslib.conventions.daycount import ACT_365F, DayCountConvention
from cdslib.errors import InvalidArgument

# Knots closer than this are treated as the same point
NODE_TOLERANCE = 1e-12


def _different(a: float, b: float) -> bool:
    return abs(a - b) > NODE_TOLERANCE


def truncate_set_inclusive(lower: float, upper: float, points: Iterable[float]) -> np.ndarray:
    """
    Points strictly inside ``(lower, upper)`` with both bounds added.

    Points within ``NODE_TOLERANCE`` of a bound or of each other are dropped so
    no zero-length sub-interval is produced.
    """
    if upper < lower:
        raise InvalidArgument(f"upper {upper} must not be below lower {lower}")
    inner = np.sort(np.asarray(list(points), dtype=float))
    nodes = [lower]
    for p in inner:
        if p <= lower or p >= upper:
            continue
        if _different(nodes[-1], p):
            nodes.append(float(p))
    if _different(nodes[-1], upper):
        nodes.append(upper)
    else:
        # replace a point that is not significantly different from the end
        nodes[-1] = upper
    if len(nodes) == 1:
        nodes.append(upper)
    return np.asarray(nodes, dtype=float)


def get_integration_points(start: float, end: float, yield_curve, credit_curve) -> np.ndarray:
    """Merge the knot times of both curves into a grid over ``[start, end]``."""
    knots = np.concatenate((yield_curve.times, credit_curve.times))
    return truncate_set_inclusive(start, end, knots)


def truncate_dates(start: date, end: date, dates: Iterable[date]) -> List[date]:
    """Dates strictly between ``start`` and ``end`` with both bounds added."""
    if end < start:
        raise InvalidArgument(f"end {end} must not be before start {start}")
    inner = sorted({d for d in dates if start < d < end})
    return [start] + inner + [end]


def get_integration_nodes_as_dates(
    start: date,
    end: date,
    yield_curve_dates: Sequence[date],
    credit_curve_dates: Sequence[date],
) -> List[date]:
    """Union of both curves' knot dates inside ``(start, end)`` plus the bounds."""
    return truncate_dates(start, end, list(yield_curve_dates) + list(credit_curve_dates))


def get_integration_nodes_as_times(
    today: date,
    start: date,
    end: date,
    yield_curve_dates: Sequence[date],
    credit_curve_dates: Sequence[date],
    day_count: DayCountConvention = ACT_365F,
) -> np.ndarray:
    """Integration nodes as year fractions from ``today``."""
    nodes = get_integration_nodes_as_dates(start, end, yield_curve_dates, credit_curve_dates)
    return np.array(day_count.year_fractions(today, nodes), dtype=float)
