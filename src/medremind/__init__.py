"""medremind - medicine reminder store and wall-clock alarm watcher."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("medremind")
except PackageNotFoundError:
    __version__ = "0+local"
from medremind._sanitize import sanitize_filename
from medremind.alerts import (
    AlertDispatcher,
    AlertSink,
    CallbackAlertSink,
    ConsoleAlertSink,
    LoggingAlertSink,
    LoopAlertSink,
)
from medremind.config import ReminderConfig
from medremind.coordinator import ReminderCoordinator
from medremind.exceptions import (
    EmptyFieldError,
    FilenameCollisionError,
    InvalidNameError,
    InvalidTimeError,
    MalformedReminderFileError,
    MedRemindError,
    NameExistsError,
    ReminderConfigError,
    ReminderErrorKind,
    ReminderIOError,
    ReminderNotFoundError,
)
from medremind.models import OperationResult, Reminder
from medremind.store import ReminderStore
from medremind.timefmt import format_now, format_time_of_day, parse_time_of_day
from medremind.watcher import AlarmWatcher, WatcherState

__all__ = [
    "__version__",
    "AlarmWatcher",
    "AlertDispatcher",
    "AlertSink",
    "CallbackAlertSink",
    "ConsoleAlertSink",
    "EmptyFieldError",
    "FilenameCollisionError",
    "InvalidNameError",
    "InvalidTimeError",
    "LoggingAlertSink",
    "LoopAlertSink",
    "MalformedReminderFileError",
    "MedRemindError",
    "NameExistsError",
    "OperationResult",
    "Reminder",
    "ReminderConfig",
    "ReminderConfigError",
    "ReminderCoordinator",
    "ReminderErrorKind",
    "ReminderIOError",
    "ReminderNotFoundError",
    "ReminderStore",
    "WatcherState",
    "format_now",
    "format_time_of_day",
    "parse_time_of_day",
    "sanitize_filename",
]
