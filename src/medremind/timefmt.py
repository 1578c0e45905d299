"""Time-of-day parsing, formatting, and matching.

Reminder times use a fixed 12-hour display format, ``hh:mm AM/PM``:

* two-digit hour ``01``..``12``
* colon, two-digit minute ``00``..``59``
* one space, then the literal ``AM`` or ``PM``

Parsing is strict and case-sensitive on the ``AM``/``PM`` marker.
Comparison against the current time is case-insensitive. Internally a
time of day is a minute-of-day in ``[0, 1440)``.
"""

from __future__ import annotations

import re
from datetime import datetime

from medremind.exceptions import InvalidTimeError

MINUTES_PER_DAY = 24 * 60
TIME_FORMAT_HINT = "hh:mm AM/PM"

_TIME_RE = re.compile(r"([0-9]{2}):([0-9]{2}) (AM|PM)")


def local_now() -> datetime:
    """Current host-local wall-clock time (naive)."""
    return datetime.now()


def parse_time_of_day(value: str) -> int:
    """Parse ``hh:mm AM/PM`` into a minute-of-day.

    Raises :class:`InvalidTimeError` if *value* does not match the format or
    carries an out-of-range hour or minute.
    """
    match = _TIME_RE.fullmatch(value)
    if match is None:
        raise InvalidTimeError(f"invalid time {value!r}, expected {TIME_FORMAT_HINT}", value=value)
    hour, minute, marker = int(match.group(1)), int(match.group(2)), match.group(3)
    if not 1 <= hour <= 12:
        raise InvalidTimeError(f"hour out of range in {value!r}, expected 01-12", value=value)
    if minute > 59:
        raise InvalidTimeError(f"minute out of range in {value!r}, expected 00-59", value=value)
    # 12 AM is midnight, 12 PM is noon.
    hour %= 12
    if marker == "PM":
        hour += 12
    return hour * 60 + minute


def format_time_of_day(minute_of_day: int) -> str:
    """Format a minute-of-day as ``hh:mm AM/PM``."""
    if not 0 <= minute_of_day < MINUTES_PER_DAY:
        raise ValueError(f"minute_of_day must be in [0, {MINUTES_PER_DAY}), got {minute_of_day}")
    hour, minute = divmod(minute_of_day, 60)
    marker = "AM" if hour < 12 else "PM"
    return f"{hour % 12 or 12:02d}:{minute:02d} {marker}"


def minute_of_day(moment: datetime) -> int:
    """Minute-of-day of *moment*; seconds and below are truncated."""
    return moment.hour * 60 + moment.minute


def format_now(moment: datetime) -> str:
    """Format a wall-clock moment for matching against stored times.

    The marker is always ``AM``/``PM`` regardless of locale.
    """
    return format_time_of_day(minute_of_day(moment))


def is_valid_time(value: str) -> bool:
    try:
        parse_time_of_day(value)
    except InvalidTimeError:
        return False
    return True


def times_match(stored: str, now_str: str) -> bool:
    """Case-insensitive equality of a stored time and a formatted "now"."""
    return stored.casefold() == now_str.casefold()
