"""Map medicine names onto safe on-disk basenames."""

from __future__ import annotations

import re

REMINDER_SUFFIX = ".txt"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.\-]")


def sanitize_filename(name: str) -> str:
    """Replace every character outside ``[A-Za-z0-9_.-]`` with ``_``.

    The result never contains a path separator, so it is always a bare
    basename. Callers append :data:`REMINDER_SUFFIX`.
    """
    return _UNSAFE_CHARS.sub("_", name)


def reminder_filename(name: str) -> str:
    """Return the file name (basename plus suffix) holding *name*."""
    return sanitize_filename(name) + REMINDER_SUFFIX
