# lambdas/common/time_utils.py
"""
Date helpers for turning webhook and query dates into Unix timestamps.
All timestamps are returned as strings of whole seconds.
"""
import time
from datetime import datetime, timedelta, timezone

from lambdas.common.errors import InvalidIsoDateConversionError

MILLISECONDS_PER_DAY = 24 * 60 * 60 * 1000


def get_current_date() -> str:
    """Today's UTC date, e.g. "2023-01-01"."""
    return datetime.now(timezone.utc).date().isoformat()


def get_date_before(yesterday: bool = True) -> str:
    """Yesterday's (or today's) UTC date in YYYYMMDD format."""
    date = datetime.now(timezone.utc).date()
    if yesterday:
        date -= timedelta(days=1)
    return date.strftime('%Y%m%d')


def get_current_timestamp() -> str:
    return str(int(time.time()))


def convert_date_to_unix_timestamp(value: str) -> str:
    """
    Converts an ISO 8601 datetime string such as "2023-06-01T12:00:00Z"
    to a Unix timestamp. Values without a timezone are read as UTC.
    """
    if not value:
        raise InvalidIsoDateConversionError(f"Cannot convert empty date '{value}' to a timestamp.")
    try:
        parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except ValueError:
        raise InvalidIsoDateConversionError(f"Cannot convert '{value}' to a timestamp.")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return str(int(parsed.timestamp()))


def convert_to_iso_date(value: str) -> str:
    """Converts a YYYYMMDD string such as "20230101" to "2023-01-01"."""
    if not value or len(value) != 8:
        raise InvalidIsoDateConversionError()
    return f"{value[0:4]}-{value[4:6]}-{value[6:8]}"


def _timezone_for_offset(offset_in_hours: float) -> timezone:
    # The offset sign is flipped: -4 (New York) yields a +04:00 zone.
    return timezone(-timedelta(hours=offset_in_hours))


def get_timestamp_for_iso_date(iso_date: str, offset_in_hours: float = 0, last_possible_time: bool = False) -> int:
    """Timestamp for midnight, or the last millisecond, of an ISO date like "2023-01-01"."""
    try:
        day = datetime.strptime(iso_date, '%Y-%m-%d')
    except ValueError:
        raise InvalidIsoDateConversionError()

    if last_possible_time:
        day = day.replace(hour=23, minute=59, second=59, microsecond=999000)
    moment = day.replace(tzinfo=_timezone_for_offset(offset_in_hours))
    return int(moment.timestamp())


def get_timestamp_for_input_date(date: str, offset_in_hours: float = 0, last_possible_time: bool = False) -> str:
    """
    Gets the Unix timestamp for a YYYYMMDD date.

    Args:
        date: Date in YYYYMMDD format.
        offset_in_hours: Timezone offset in hours; 0 is UTC, -4 is behind UTC, 7 ahead of it.
        last_possible_time: Use 23:59:59.999 instead of midnight.

    Returns:
        The timestamp as a string, e.g. "1672531200" for "20230101".
    """
    iso_date = convert_to_iso_date(date)
    return str(get_timestamp_for_iso_date(iso_date, offset_in_hours, last_possible_time))


def get_timestamps_for_period(last_num_days: int, offset_in_hours: float = 0) -> dict:
    """
    Calculates "from" and "to" timestamps for the last N days,
    excluding the current day.
    """
    to_time = get_timestamp_for_input_date(get_date_before(True), offset_in_hours, True)
    from_time_ms = int(f"{to_time}999") - last_num_days * MILLISECONDS_PER_DAY + 1

    return {
        'from': str(from_time_ms)[:10],
        'to': to_time[:10],
    }


def get_max_timestamp_from_date(max_date_range: int, offset_in_hours: float = 0) -> str:
    """Timestamp for midnight, max_date_range days ago."""
    date = datetime.strptime(get_current_date(), '%Y-%m-%d') - timedelta(days=max_date_range)
    return get_timestamp_for_input_date(date.strftime('%Y%m%d'), offset_in_hours)


def get_diff_in_seconds(earlier_time: int, later_time: int) -> int:
    """Difference in whole seconds between two millisecond timestamps."""
    return (later_time - earlier_time) // 1000
