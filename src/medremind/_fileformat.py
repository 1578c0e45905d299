"""Two-line reminder file codec.

Each reminder lives in its own file::

    Medicine: <name>
    Time: <hh:mm AM/PM>

Values are taken from the remainder after the first ``": "`` on each line.
"""

from __future__ import annotations

from pydantic import ValidationError

from medremind.exceptions import InvalidTimeError, MalformedReminderFileError
from medremind.models import Reminder
from medremind.timefmt import parse_time_of_day

NAME_KEY = "Medicine"
TIME_KEY = "Time"
SEPARATOR = ": "


def render_reminder(reminder: Reminder) -> str:
    """Render the file body, LF-terminated."""
    return f"{NAME_KEY}{SEPARATOR}{reminder.name}\n{TIME_KEY}{SEPARATOR}{reminder.time_of_day}\n"


def _split_line(line: str, expected_key: str, *, path: str) -> str:
    key, sep, value = line.partition(SEPARATOR)
    if not sep:
        raise MalformedReminderFileError(f"missing {SEPARATOR!r} separator in {line!r}", path=path)
    if key != expected_key:
        raise MalformedReminderFileError(f"expected {expected_key!r} line, got {key!r}", path=path)
    return value


def parse_reminder(text: str, *, path: str = "") -> Reminder:
    """Parse a reminder file body.

    Trailing empty lines are ignored; anything else that is not exactly the
    name line followed by the time line raises
    :class:`MalformedReminderFileError`.
    """
    lines = text.splitlines()
    while lines and not lines[-1]:
        lines.pop()
    if len(lines) != 2:
        raise MalformedReminderFileError(f"expected 2 lines, found {len(lines)}", path=path)

    name = _split_line(lines[0], NAME_KEY, path=path)
    time_str = _split_line(lines[1], TIME_KEY, path=path)
    if not name:
        raise MalformedReminderFileError("empty medicine name", path=path)
    try:
        parse_time_of_day(time_str)
    except InvalidTimeError as exc:
        raise MalformedReminderFileError(str(exc), path=path) from exc
    try:
        return Reminder(name=name, time_of_day=time_str)
    except ValidationError as exc:
        raise MalformedReminderFileError(f"invalid reminder: {exc.errors()[0]['msg']}", path=path) from exc
