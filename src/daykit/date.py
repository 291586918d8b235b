import logging
import numbers
from datetime import date, datetime, time, timedelta
from typing import List, Optional

import pandas as pd
from dateutil.relativedelta import relativedelta

from .config import (
    DAY_PATTERN,
    DEFAULT_DATE_PATTERN,
    MILLISECOND_PATTERN,
    SECOND_PATTERN,
    file_safe_pattern,
)
from .patterns import format_datetime, parse_datetime

logger = logging.getLogger(__name__)

ONE_DAY = relativedelta(days=1)


class InvalidTimestamp(ValueError):
    """Raised when a value cannot be turned into a local timestamp."""


# ============================================================================
# TIMESTAMP COERCION
# ============================================================================

def to_timestamp(value) -> datetime:
    """
    Convert a timestamp-like value into a naive local datetime

    Accepts datetime, date, pandas.Timestamp, numpy.datetime64, ISO strings and
    numbers, which count milliseconds since the epoch.
    Timezone-aware values are converted to local time. Precision is cut to
    whole milliseconds.

    Raises:
        InvalidTimestamp: If the value is missing or not a timestamp
    """
    if value is None or value is pd.NaT:
        raise InvalidTimestamp(f"Not a timestamp: {value!r}")

    if isinstance(value, pd.Timestamp):
        result = value.to_pydatetime(warn=False)
    elif isinstance(value, datetime):
        result = value
    elif isinstance(value, date):
        result = datetime.combine(value, time())
    else:
        # Plain numbers count milliseconds since the epoch
        if isinstance(value, numbers.Real) and not isinstance(value, bool):
            options = {"unit": "ms", "tz": "UTC"}
        else:
            options = {}
        try:
            ts = pd.Timestamp(value, **options)
        except (TypeError, ValueError, OverflowError) as e:
            raise InvalidTimestamp(f"Not a timestamp: {value!r}") from e
        if ts is pd.NaT:
            raise InvalidTimestamp(f"Not a timestamp: {value!r}")
        result = ts.to_pydatetime(warn=False)

    if result.tzinfo is not None:
        result = result.astimezone().replace(tzinfo=None)

    return result.replace(microsecond=result.microsecond - result.microsecond % 1000)


def _exists_locally(value: datetime) -> bool:
    # Wall times skipped by a DST jump do not survive a round trip
    try:
        return datetime.fromtimestamp(value.timestamp()) == value
    except (OverflowError, OSError, ValueError):
        return False


# ============================================================================
# DATE UTILITIES
# ============================================================================

def remove_time(timestamp) -> datetime:
    """
    Return a copy of timestamp with hours, minutes, seconds and milliseconds set to zero

    Args:
        timestamp: A datetime, date or other timestamp-like value. Not modified.

    Returns:
        A new datetime at local midnight of the same calendar day

    Raises:
        InvalidTimestamp: If the value is not a timestamp or local midnight of
            that day does not exist in the process time zone
    """
    day = to_timestamp(timestamp).replace(hour=0, minute=0, second=0, microsecond=0)
    if not _exists_locally(day):
        raise InvalidTimestamp(f"Midnight of {day.date().isoformat()} does not exist in local time")
    return day


def parse_date(text: Optional[str], format: str = DEFAULT_DATE_PATTERN, locale: Optional[str] = None) -> Optional[datetime]:
    """
    Parse a date string using the given pattern (default "dd.MM.yyyy", eg. 17.12.2009)

    Args:
        text: The string containing the date
        format: Pattern the date is parsed with
        locale: Locale used for month and weekday names, eg. "de_DE"

    Returns:
        The parsed datetime, or None if the text could not be parsed
    """
    if text is None:
        return None

    try:
        return parse_datetime(format, text, locale)
    except (TypeError, ValueError) as e:
        logger.debug("Could not parse %r with %r: %s", text, format, e)
        return None


def format_timestamp(timestamp) -> str:
    """Timestamp string in the format "yyyy-MM-dd HH:mm:ss.SSS"."""
    return format_datetime(MILLISECOND_PATTERN, to_timestamp(timestamp))


def format_date_only(timestamp) -> str:
    """
    Date string in the format yyyyMMdd. The time value is ignored.

    Unlike locale dependent date tools, this always yields the same string
    for the same calendar day.
    """
    return format_datetime(DAY_PATTERN, to_timestamp(timestamp))


def parse_date_only(text: Optional[str]) -> Optional[datetime]:
    """Parse a yyyyMMdd string; None if missing or unparseable."""
    return parse_date(text, DAY_PATTERN)


def current_timestamp_string() -> str:
    """Current local time as "yyyy-MM-dd HH:mm:ss.SSS"."""
    return format_timestamp(datetime.now())


def current_timestamp_string_file_safe() -> str:
    """
    Current local time as "yyyy-MM-dd_HH:mm:ss", intended for appending to a filename

    Windows uses "yyyy-MM-dd_HH-mm-ss" since it does not allow colons in filenames.
    """
    return format_datetime(file_safe_pattern(), to_timestamp(datetime.now()))


def parse_timestamp(text: Optional[str]) -> Optional[datetime]:
    """
    Parse a "yyyy-MM-dd HH:mm:ss.SSS" timestamp, falling back to "yyyy-MM-dd HH:mm:ss"

    Returns:
        The parsed datetime, or None if text is None or matches neither format
    """
    if text is None:
        return None

    timestamp = parse_date(text, MILLISECOND_PATTERN)
    if timestamp is not None:
        return timestamp

    return parse_date(text, SECOND_PATTERN)


def generate_date_range_strings(start, end) -> List[str]:
    """
    Generate yyyyMMdd strings from start to end, one day at a time

    Both ends are reduced to their day first. The start day is always part of
    the result, even when end lies before start.

    Args:
        start: First day of the range
        end: Last day of the range, inclusive

    Returns:
        List of date strings in yyyyMMdd format
    """
    start_day = remove_time(start)
    end_day = remove_time(end)

    dates = []
    current = start_day
    while True:
        dates.append(format_date_only(current))
        current += ONE_DAY
        if end_day - current < timedelta(0):
            break

    logger.debug("Generated %d dates from %s to %s", len(dates), dates[0], dates[-1])
    return dates
