"""Custom exception hierarchy for medremind."""

from __future__ import annotations

from enum import StrEnum
from typing import ClassVar


class ReminderErrorKind(StrEnum):
    """Error kinds surfaced to the presentation layer."""

    EMPTY_FIELD = "empty_field"
    INVALID_NAME = "invalid_name"
    INVALID_TIME = "invalid_time"
    NAME_EXISTS = "name_exists"
    NOT_FOUND = "not_found"
    IO_ERROR = "io_error"


class MedRemindError(Exception):
    """Base exception for all medremind errors."""

    kind: ClassVar[ReminderErrorKind] = ReminderErrorKind.IO_ERROR


class ReminderConfigError(MedRemindError):
    """Invalid configuration."""


class EmptyFieldError(MedRemindError):
    """Medicine name or time was left blank."""

    kind = ReminderErrorKind.EMPTY_FIELD

    def __init__(self, message: str, *, field: str = "") -> None:
        self.field = field
        super().__init__(message)


class InvalidNameError(MedRemindError):
    """Medicine name contains characters the file format cannot hold."""

    kind = ReminderErrorKind.INVALID_NAME


class InvalidTimeError(MedRemindError):
    """Time string does not parse as ``hh:mm AM/PM``."""

    kind = ReminderErrorKind.INVALID_TIME

    def __init__(self, message: str, *, value: str = "") -> None:
        self.value = value
        super().__init__(message)


class NameExistsError(MedRemindError):
    """A reminder with this name is already stored."""

    kind = ReminderErrorKind.NAME_EXISTS

    def __init__(self, message: str, *, name: str = "") -> None:
        self.name = name
        super().__init__(message)


class FilenameCollisionError(NameExistsError):
    """Another stored name maps to the same file on disk."""

    def __init__(self, message: str, *, name: str = "", existing: str = "") -> None:
        self.existing = existing
        super().__init__(message, name=name)


class ReminderNotFoundError(MedRemindError):
    """Delete requested for a name that is not stored."""

    kind = ReminderErrorKind.NOT_FOUND

    def __init__(self, message: str, *, name: str = "") -> None:
        self.name = name
        super().__init__(message)


class ReminderIOError(MedRemindError):
    """Persistence failure, or memory and disk disagree."""

    kind = ReminderErrorKind.IO_ERROR

    def __init__(self, message: str, *, path: str = "") -> None:
        self.path = path
        super().__init__(message)


class MalformedReminderFileError(MedRemindError):
    """A reminder file does not have the two-line shape."""

    def __init__(self, message: str, *, path: str = "") -> None:
        self.path = path
        super().__init__(message)
