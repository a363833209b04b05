"""Tenor parsing and date arithmetic on top of ``dateutil.relativedelta``."""

from __future__ import annotations

import re
from datetime import date, timedelta
from typing import Union

from dateutil.relativedelta import relativedelta

from cdslib.errors import InvalidArgument

_TENOR_PATTERN = re.compile(r"^(\d+)([DWMY])$")

TenorLike = Union[str, relativedelta]


def parse_tenor(tenor: TenorLike) -> relativedelta:
    """
    Convert a tenor string such as ``"3M"``, ``"5Y"`` or ``"1W"`` to a relativedelta.

    relativedelta instances are returned unchanged.
    """
    if isinstance(tenor, relativedelta):
        return tenor
    match = _TENOR_PATTERN.match(tenor.strip().upper())
    if match is None:
        raise InvalidArgument(f"Unsupported tenor: {tenor!r}")
    count = int(match.group(1))
    unit = match.group(2)
    if unit == "D":
        return relativedelta(days=count)
    if unit == "W":
        return relativedelta(weeks=count)
    if unit == "M":
        return relativedelta(months=count)
    return relativedelta(years=count)


def tenor_in_months(tenor: TenorLike) -> int:
    """Whole number of months in a month/year tenor."""
    step = parse_tenor(tenor)
    if step.days:
        raise InvalidArgument(f"Tenor {tenor!r} is not a whole number of months")
    return step.years * 12 + step.months


def add_tenor(start: date, tenor: TenorLike, multiple: int = 1) -> date:
    """Add ``multiple`` times ``tenor`` to ``start`` in one step (no day drift)."""
    step = parse_tenor(tenor)
    if step.days:
        return start + timedelta(days=multiple * step.days)
    return start + relativedelta(months=multiple * (step.years * 12 + step.months))
