"""
Standardized Date/Time Handling Utilities

Centralizes the calendar arithmetic used by streaks, freezes and daily
counters so that:
1. Day boundaries follow the configured local timezone
2. "Yesterday" and day gaps are computed on calendar day numbers
3. Timestamps are integer milliseconds since the Unix epoch

CRITICAL RULES:
- A day is identified by its date key, an ISO string YYYY-MM-DD
- Never subtract local datetimes to find day gaps (DST shifts break it);
  convert keys to ordinals with day_number() and subtract those
- Keys are always derived from an aware datetime in the configured timezone
"""

import logging
import re
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from extflex import config

logger = logging.getLogger(__name__)

DATE_KEY_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")

# Clock used by services; returns an aware datetime
Clock = Callable[[], datetime]


def get_local_timezone() -> tzinfo:
    """
    Get the timezone used for day keys

    Returns:
        ZoneInfo for config.TIMEZONE, or the system local timezone when unset
    """
    if config.TIMEZONE:
        try:
            return ZoneInfo(config.TIMEZONE)
        except Exception as e:
            logger.error(f"Invalid timezone '{config.TIMEZONE}': {e}")
    return datetime.now().astimezone().tzinfo


def now_utc() -> datetime:
    """Current datetime in UTC (timezone-aware)"""
    return datetime.now(timezone.utc)


def now_local() -> datetime:
    """Current datetime in the configured local timezone"""
    return datetime.now(get_local_timezone())


def to_timestamp_ms(moment: datetime) -> int:
    """Convert an aware datetime to epoch milliseconds"""
    return int(moment.timestamp() * 1000)


def from_timestamp_ms(timestamp_ms: int, tz: Optional[tzinfo] = None) -> datetime:
    """Convert epoch milliseconds to an aware datetime in tz (local by default)"""
    return datetime.fromtimestamp(timestamp_ms / 1000, tz or get_local_timezone())


def format_date_key(day: date) -> str:
    """Format a date as YYYY-MM-DD"""
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def parse_date_key(date_key: Optional[str]) -> Optional[date]:
    """
    Parse a YYYY-MM-DD date key

    Returns:
        date, or None for malformed or impossible keys
    """
    if not isinstance(date_key, str):
        return None
    match = DATE_KEY_PATTERN.match(date_key)
    if not match:
        return None
    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        return None


def is_valid_date_key(date_key: Optional[str]) -> bool:
    return parse_date_key(date_key) is not None


def date_key_for(moment: datetime) -> str:
    """Date key of an aware datetime, in the configured local timezone"""
    return format_date_key(moment.astimezone(get_local_timezone()).date())


def date_key_for_timestamp(timestamp_ms: int, tz: Optional[tzinfo] = None) -> str:
    """Local date key of an epoch-millisecond timestamp"""
    return format_date_key(from_timestamp_ms(timestamp_ms, tz).date())


def day_number(date_key: str) -> Optional[int]:
    """Calendar day number (proleptic Gregorian ordinal) of a date key"""
    parsed = parse_date_key(date_key)
    return parsed.toordinal() if parsed else None


def shift_date_key(date_key: str, days: int) -> Optional[str]:
    """Move a date key by a number of calendar days"""
    number = day_number(date_key)
    if number is None:
        return None
    return format_date_key(date.fromordinal(number + days))


def previous_date_key(date_key: str) -> Optional[str]:
    """Date key of the day before"""
    return shift_date_key(date_key, -1)


def days_between(earlier_key: str, later_key: str) -> Optional[int]:
    """Whole calendar days from earlier_key to later_key (negative if reversed)"""
    earlier = day_number(earlier_key)
    later = day_number(later_key)
    if earlier is None or later is None:
        return None
    return later - earlier


def week_start_key(date_key: str) -> Optional[str]:
    """Date key of the Monday starting the week that contains date_key"""
    parsed = parse_date_key(date_key)
    if parsed is None:
        return None
    return format_date_key(parsed - timedelta(days=parsed.weekday()))
