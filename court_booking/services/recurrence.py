"""
Recurrence expansion for recurring reservations.

Turns a reference start time and a recurrence rule into the ordered list of
start times the series would occupy.  Pure functions: nothing here touches
the store.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable

from dateutil.relativedelta import relativedelta

from court_booking.models import Recurrence, TimePeriod

_WEEK = timedelta(days=7)


def horizon_end(time_period: TimePeriod, now: datetime) -> datetime:
    """Last instant a generated start time may fall on."""
    if time_period == TimePeriod.CURRENT_YEAR:
        return now.replace(
            month=12, day=31, hour=23, minute=59, second=59, microsecond=999999
        )
    return now + relativedelta(months=6)


def _weekly(start_time: datetime, last: datetime) -> list[datetime]:
    dates = []
    current = start_time
    while current <= last:
        dates.append(current)
        current += _WEEK
    return dates


def _monthly(start_time: datetime, last: datetime) -> list[datetime]:
    # Always offset from the reference so a 31st clamped to the 30th
    # springs back to the 31st in the following month.
    dates = []
    step = 0
    while True:
        current = start_time + relativedelta(months=step)
        if current > last:
            return dates
        dates.append(current)
        step += 1


def generate_dates(
    start_time: datetime,
    recurrence: Recurrence,
    time_period: TimePeriod,
    now: datetime | None = None,
) -> list[datetime]:
    """
    Return every start time of the series, the reference included, up to
    the horizon given by ``time_period``.  Time of day and tzinfo are those
    of ``start_time``.
    """
    if now is None:
        now = datetime.now(tz=start_time.tzinfo)
    last = horizon_end(time_period, now)

    if recurrence == Recurrence.WEEKLY:
        return _weekly(start_time, last)
    return _monthly(start_time, last)


def expand_series(
    start_time: datetime,
    recurrence: Recurrence,
    time_period: TimePeriod,
    included_dates: Iterable[datetime] = (),
    excluded_dates: Iterable[datetime] = (),
    now: datetime | None = None,
) -> list[datetime]:
    """
    Generated dates followed by ``included_dates`` (verbatim), minus any
    timestamp exactly equal to one of ``excluded_dates``.  Each instant
    appears once: an included date that repeats an earlier one is dropped.
    """
    excluded = set(excluded_dates)
    dates = generate_dates(start_time, recurrence, time_period, now=now)
    dates.extend(included_dates)
    return [d for d in dict.fromkeys(dates) if d not in excluded]
