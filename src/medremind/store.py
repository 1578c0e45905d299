"""File-backed reminder store.

The store keeps an insertion-ordered mapping ``name -> Reminder`` in memory
and mirrors it onto a directory holding one two-line ``.txt`` file per
reminder. Every public method runs under a single lock, and
``add``/``delete`` perform their file I/O inside that lock so the
in-memory mapping and the directory never disagree.
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path

from medremind._fileformat import parse_reminder, render_reminder
from medremind._sanitize import REMINDER_SUFFIX, reminder_filename
from medremind.exceptions import (
    EmptyFieldError,
    FilenameCollisionError,
    InvalidNameError,
    MalformedReminderFileError,
    NameExistsError,
    ReminderIOError,
    ReminderNotFoundError,
)
from medremind.models import Reminder
from medremind.timefmt import parse_time_of_day, times_match

_logger = logging.getLogger(__name__)


def _write_atomic(path: Path, text: str) -> None:
    tmp = path.with_name(f".{path.name}.tmp")
    try:
        with open(tmp, "w", encoding="utf-8", newline="\n") as fh:
            fh.write(text)
        os.replace(tmp, path)
    except OSError as exc:
        tmp.unlink(missing_ok=True)
        raise ReminderIOError(f"could not write {path}: {exc}", path=str(path)) from exc


class ReminderStore:
    """In-memory reminder set backed by a directory of reminder files.

    Parameters
    ----------
    root : str or os.PathLike
        Persistence root. Must exist before :meth:`load` is called.
    logger : logging.Logger or None
        Diagnostic stream for skipped files. Defaults to this module's logger.
    """

    def __init__(self, root: str | os.PathLike[str], *, logger: logging.Logger | None = None) -> None:
        self._root = Path(root)
        self._logger = logger or _logger
        self._lock = threading.Lock()
        self._reminders: dict[str, Reminder] = {}
        self._paths: dict[str, Path] = {}
        self._skipped: list[Path] = []

    @property
    def root(self) -> Path:
        return self._root

    @property
    def last_skipped(self) -> list[Path]:
        """Files skipped as malformed by the most recent :meth:`load`."""
        with self._lock:
            return list(self._skipped)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _candidate_files(self) -> list[Path]:
        try:
            return sorted(
                entry for entry in self._root.iterdir() if entry.name.endswith(REMINDER_SUFFIX) and entry.is_file()
            )
        except OSError as exc:
            raise ReminderIOError(
                f"could not read reminder directory {self._root}: {exc}", path=str(self._root)
            ) from exc

    def load(self) -> int:
        """Replace the in-memory set with the reminders found on disk.

        Files are read in file-name order. Malformed or unreadable files are
        logged and skipped. When two files carry the same medicine name the
        first one wins.

        Returns
        -------
        int
            Number of reminders loaded.
        """
        with self._lock:
            reminders: dict[str, Reminder] = {}
            paths: dict[str, Path] = {}
            skipped: list[Path] = []

            for path in self._candidate_files():
                try:
                    reminder = parse_reminder(path.read_text(encoding="utf-8"), path=str(path))
                except (OSError, UnicodeDecodeError, MalformedReminderFileError) as exc:
                    self._logger.warning("Skipping reminder file %s: %s", path.name, exc)
                    skipped.append(path)
                    continue
                if reminder.name in reminders:
                    self._logger.warning(
                        "Skipping reminder file %s: duplicate medicine %r already loaded from %s",
                        path.name,
                        reminder.name,
                        paths[reminder.name].name,
                    )
                    skipped.append(path)
                    continue
                reminders[reminder.name] = reminder
                paths[reminder.name] = path

            self._reminders = reminders
            self._paths = paths
            self._skipped = skipped
            self._logger.debug("Loaded %d reminder(s) from %s, skipped %d", len(reminders), self._root, len(skipped))
            return len(reminders)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add(self, name: str, time_str: str) -> Reminder:
        """Validate, persist, then record a new reminder.

        Raises
        ------
        EmptyFieldError
            *name* or *time_str* is empty.
        InvalidNameError
            *name* contains non-printable characters.
        InvalidTimeError
            *time_str* is not ``hh:mm AM/PM``.
        NameExistsError
            *name* is already stored, or another stored name maps to the
            same file (:class:`FilenameCollisionError`).
        ReminderIOError
            The file could not be written, or an untracked file already
            occupies its place.
        """
        if not name:
            raise EmptyFieldError("medicine name is required", field="name")
        if not time_str:
            raise EmptyFieldError("reminder time is required", field="time")
        if not name.isprintable():
            raise InvalidNameError(f"medicine name {name!r} contains non-printable characters")
        parse_time_of_day(time_str)
        reminder = Reminder(name=name, time_of_day=time_str)

        with self._lock:
            if name in self._reminders:
                raise NameExistsError(f"medicine {name!r} already exists", name=name)

            path = self._root / reminder_filename(name)
            for other, other_path in self._paths.items():
                if other_path == path:
                    raise FilenameCollisionError(
                        f"medicine {name!r} would share file {path.name} with {other!r}",
                        name=name,
                        existing=other,
                    )
            if path.exists():
                raise ReminderIOError(
                    f"file {path.name} already exists but is not a loaded reminder", path=str(path)
                )

            _write_atomic(path, render_reminder(reminder))
            self._reminders[name] = reminder
            self._paths[name] = path
            self._logger.debug("Added reminder %r at %s -> %s", name, time_str, path.name)
            return reminder

    def delete(self, name: str) -> Reminder:
        """Remove the backing file, then forget the reminder.

        Raises
        ------
        ReminderNotFoundError
            *name* is not stored.
        ReminderIOError
            The file could not be removed, or memory and disk disagree
            about *name*. State is left unchanged.
        """
        with self._lock:
            reminder = self._reminders.get(name)
            if reminder is None:
                orphan = self._root / reminder_filename(name)
                if orphan.exists() and orphan not in self._paths.values():
                    raise ReminderIOError(
                        f"file {orphan.name} exists but medicine {name!r} is not loaded", path=str(orphan)
                    )
                raise ReminderNotFoundError(f"no reminder for medicine {name!r}", name=name)

            path = self._paths[name]
            try:
                path.unlink()
            except FileNotFoundError as exc:
                raise ReminderIOError(
                    f"file {path.name} for medicine {name!r} is missing on disk", path=str(path)
                ) from exc
            except OSError as exc:
                raise ReminderIOError(f"could not delete {path}: {exc}", path=str(path)) from exc

            del self._reminders[name]
            del self._paths[name]
            self._logger.debug("Deleted reminder %r (%s)", name, path.name)
            return reminder

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def exists(self, name: str) -> bool:
        with self._lock:
            return name in self._reminders

    def get(self, name: str) -> Reminder | None:
        with self._lock:
            return self._reminders.get(name)

    def items(self) -> list[tuple[str, str]]:
        """``(name, time)`` pairs in insertion order."""
        with self._lock:
            return [reminder.as_pair() for reminder in self._reminders.values()]

    def reminders(self) -> list[Reminder]:
        with self._lock:
            return list(self._reminders.values())

    def match_now(self, now_str: str) -> list[str]:
        """Names whose time equals *now_str*, ignoring case.

        Returns a copy; callers may hold it after the lock is released.
        """
        with self._lock:
            return [name for name, reminder in self._reminders.items() if times_match(reminder.time_of_day, now_str)]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.exists(name)

    def __len__(self) -> int:
        with self._lock:
            return len(self._reminders)
