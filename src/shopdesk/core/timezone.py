"""Timezone utilities for the shop's local time."""

from datetime import date, datetime
from typing import Optional, Union

import pytz
from dateutil import parser as date_parser

from shopdesk.config.settings import get_settings

DEFAULT_TZ_NAME = "America/Sao_Paulo"


def local_tz() -> pytz.BaseTzInfo:
    """Return the configured local timezone."""
    return pytz.timezone(get_settings().local_timezone or DEFAULT_TZ_NAME)


def now_local() -> datetime:
    """Return current time in the local timezone."""
    return datetime.now(local_tz())


def today_local() -> date:
    """Return today's calendar date in the local timezone."""
    return now_local().date()


def to_local(dt: datetime) -> datetime:
    """Convert a datetime to the local timezone."""
    tz = local_tz()
    if dt.tzinfo is None:
        # Assume naive datetime is already local
        return tz.localize(dt)
    return dt.astimezone(tz)


def parse_datetime_local(value: str, default_tz: Optional[pytz.BaseTzInfo] = None) -> datetime:
    """
    Parse a datetime string and return it in the local timezone.

    If no timezone is provided in the string, assumes local time.
    """
    dt = date_parser.parse(value)
    if dt.tzinfo is None:
        tz = default_tz or local_tz()
        dt = tz.localize(dt)
    return to_local(dt)


def start_of_day(value: Union[datetime, date]) -> datetime:
    """Return 00:00:00.000 local time of the given day."""
    day = value if not isinstance(value, datetime) else to_local(value).date()
    return local_tz().localize(datetime(day.year, day.month, day.day))


def end_of_day(value: Union[datetime, date]) -> datetime:
    """Return 23:59:59.999 local time of the given day."""
    day = value if not isinstance(value, datetime) else to_local(value).date()
    return local_tz().localize(
        datetime(day.year, day.month, day.day, 23, 59, 59, 999000)
    )


def is_date_in_range(value: datetime, start: datetime, end: datetime) -> bool:
    """Inclusive range check."""
    return start <= to_local(value) <= end
