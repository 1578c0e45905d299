"""Domain models for reminders and presentation-facing results."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from medremind.exceptions import InvalidTimeError, MedRemindError, ReminderErrorKind
from medremind.timefmt import parse_time_of_day


class Reminder(BaseModel):
    """A (medicine name, time-of-day) pair.

    Reminders are immutable; changing the time of a medicine is a delete
    followed by an add.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., description="Medicine name, unique within a store")
    time_of_day: str = Field(..., description="Time in hh:mm AM/PM form, as entered")

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not value:
            raise ValueError("name must be non-empty")
        if not value.isprintable():
            raise ValueError("name must be printable text")
        return value

    @field_validator("time_of_day")
    @classmethod
    def _check_time(cls, value: str) -> str:
        try:
            parse_time_of_day(value)
        except InvalidTimeError as exc:
            raise ValueError(str(exc)) from exc
        return value

    @property
    def minute_of_day(self) -> int:
        return parse_time_of_day(self.time_of_day)

    def as_pair(self) -> tuple[str, str]:
        return (self.name, self.time_of_day)


class OperationResult(BaseModel):
    """Outcome of a presentation-layer request.

    ``ok`` is ``True`` on success. On failure ``error`` names the error
    kind and ``message`` is a human-readable description suitable for
    showing to the user.
    """

    model_config = ConfigDict(frozen=True)

    ok: bool
    error: ReminderErrorKind | None = None
    message: str = ""
    reminder: Reminder | None = None

    @classmethod
    def success(cls, reminder: Reminder | None = None, message: str = "") -> OperationResult:
        return cls(ok=True, reminder=reminder, message=message)

    @classmethod
    def failure(cls, exc: MedRemindError) -> OperationResult:
        return cls(ok=False, error=exc.kind, message=str(exc))

    def __bool__(self) -> bool:
        return self.ok
