"""
Business day adjustment of schedule dates.
"""

from datetime import date, datetime, timedelta
from typing import Union

from cdslib.conventions.calendars import Calendar
from cdslib.conventions.types import BusinessDayAdjustment
from cdslib.errors import InvalidArgument

_ONE_DAY = timedelta(days=1)


def _roll(dt: date, calendar: Calendar, step: timedelta) -> date:
    while not calendar.is_business_day(dt):
        dt += step
    return dt


def adjust_date(
    dt: Union[date, datetime], adjustment: BusinessDayAdjustment, calendar: Calendar
) -> date:
    """Apply business day adjustment to a date."""
    if isinstance(dt, datetime):
        dt = dt.date()

    if adjustment == BusinessDayAdjustment.NO_ADJUSTMENT:
        return dt

    elif adjustment == BusinessDayAdjustment.FOLLOWING:
        return _roll(dt, calendar, _ONE_DAY)

    elif adjustment == BusinessDayAdjustment.PRECEDING:
        return _roll(dt, calendar, -_ONE_DAY)

    elif adjustment == BusinessDayAdjustment.MODIFIED_FOLLOWING:
        adjusted = _roll(dt, calendar, _ONE_DAY)
        # Month changed: fall back to preceding
        if adjusted.month != dt.month:
            adjusted = _roll(dt, calendar, -_ONE_DAY)
        return adjusted

    elif adjustment == BusinessDayAdjustment.MODIFIED_PRECEDING:
        adjusted = _roll(dt, calendar, -_ONE_DAY)
        if adjusted.month != dt.month:
            adjusted = _roll(dt, calendar, _ONE_DAY)
        return adjusted

    else:
        raise InvalidArgument(f"Unknown business day adjustment: {adjustment}")
