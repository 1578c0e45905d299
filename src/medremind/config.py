"""Runtime configuration for medremind."""

from __future__ import annotations

import dataclasses
from pathlib import Path

from medremind.exceptions import ReminderConfigError

DEFAULT_ROOT_DIR = "reminders"


@dataclasses.dataclass(frozen=True)
class ReminderConfig:
    """Coordinator configuration.

    Parameters
    ----------
    root_dir : Path
        Persistence root, one ``.txt`` file per reminder. Relative paths
        resolve against the process working directory. Created on first
        start.
    tick_interval : float
        Seconds between alarm checks. Defaults to one minute.
    alert_queue_size : int
        Alerts buffered for the sink before new ones are dropped.
    shutdown_timeout : float
        Seconds to wait for the watcher and dispatcher threads on close.
    """

    root_dir: Path = Path(DEFAULT_ROOT_DIR)
    tick_interval: float = 60.0
    alert_queue_size: int = 32
    shutdown_timeout: float = 5.0

    def __post_init__(self) -> None:
        # Accept plain strings for convenience.
        if not isinstance(self.root_dir, Path):
            object.__setattr__(self, "root_dir", Path(self.root_dir))
        if self.tick_interval <= 0:
            raise ReminderConfigError(f"tick_interval must be positive, got {self.tick_interval}")
        if self.alert_queue_size < 1:
            raise ReminderConfigError(f"alert_queue_size must be >= 1, got {self.alert_queue_size}")
        if self.shutdown_timeout < 0:
            raise ReminderConfigError(f"shutdown_timeout must be >= 0, got {self.shutdown_timeout}")
