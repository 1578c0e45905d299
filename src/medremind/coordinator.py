"""Core coordinator: owns the store and the watcher.

The presentation layer talks only to :class:`ReminderCoordinator`::

    with ReminderCoordinator(ReminderConfig(), sink=ConsoleAlertSink()) as core:
        result = core.add_reminder("Aspirin", "08:30 AM")
        if not result:
            show_error(result.message)

Requests return an :class:`OperationResult` instead of raising, so each
failure kind can be rendered as a specific message.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime
from typing import Any

from medremind.alerts import AlertSink, LoggingAlertSink
from medremind.config import ReminderConfig
from medremind.exceptions import EmptyFieldError, MedRemindError, ReminderIOError
from medremind.models import OperationResult
from medremind.store import ReminderStore
from medremind.timefmt import local_now
from medremind.watcher import AlarmWatcher

_logger = logging.getLogger(__name__)


class ReminderCoordinator:
    """Startup, shutdown and the presentation-facing reminder API."""

    def __init__(
        self,
        config: ReminderConfig | None = None,
        *,
        sink: AlertSink | None = None,
        clock: Callable[[], datetime] = local_now,
    ) -> None:
        self._config = config or ReminderConfig()
        self._sink: AlertSink = sink or LoggingAlertSink()
        self._clock = clock
        self._lock = threading.Lock()
        self._store: ReminderStore | None = None
        self._watcher: AlarmWatcher | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def __enter__(self) -> ReminderCoordinator:
        self.start()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    @property
    def config(self) -> ReminderConfig:
        return self._config

    @property
    def store(self) -> ReminderStore | None:
        return self._store

    @property
    def watcher(self) -> AlarmWatcher | None:
        return self._watcher

    def _ensure_root(self) -> None:
        root = self._config.root_dir
        if root.exists() and not root.is_dir():
            raise ReminderIOError(f"reminder root {root} exists but is not a directory", path=str(root))
        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ReminderIOError(f"could not create reminder root {root}: {exc}", path=str(root)) from exc

    def start(self) -> None:
        """Create the root if needed, load reminders and start the watcher.

        Raises :class:`ReminderIOError` when the root cannot be created or
        read.
        """
        with self._lock:
            if self._store is not None:
                return
            self._ensure_root()
            store = ReminderStore(self._config.root_dir)
            loaded = store.load()
            watcher = AlarmWatcher(
                store,
                self._sink,
                clock=self._clock,
                interval=self._config.tick_interval,
                queue_size=self._config.alert_queue_size,
                shutdown_timeout=self._config.shutdown_timeout,
            )
            watcher.start()
            self._store = store
            self._watcher = watcher
        _logger.info("Medicine reminders started: %d loaded from %s", loaded, self._config.root_dir)

    def close(self) -> None:
        """Stop the watcher, then release the store."""
        with self._lock:
            watcher, self._watcher = self._watcher, None
            store, self._store = self._store, None
        if watcher is not None:
            watcher.stop()
        if store is not None:
            _logger.info("Medicine reminders closed: %d reminder(s) in %s", len(store), store.root)

    # ------------------------------------------------------------------
    # Presentation interface
    # ------------------------------------------------------------------

    def _require_store(self) -> ReminderStore:
        store = self._store
        if store is None:
            raise ReminderIOError("reminder store is not open")
        return store

    def add_reminder(self, name: str, time_str: str) -> OperationResult:
        """Add a reminder. Surrounding whitespace is ignored."""
        name = name.strip()
        time_str = time_str.strip()
        try:
            if not name or not time_str:
                raise EmptyFieldError(
                    "both medicine name and time are required",
                    field="name" if not name else "time",
                )
            reminder = self._require_store().add(name, time_str)
        except MedRemindError as exc:
            _logger.debug("Add rejected for %r: %s", name, exc)
            return OperationResult.failure(exc)
        return OperationResult.success(reminder)

    def delete_reminder(self, name: str) -> OperationResult:
        """Delete by the exact name returned from :meth:`list_reminders`."""
        try:
            if not name.strip():
                raise EmptyFieldError("medicine name is required", field="name")
            reminder = self._require_store().delete(name)
        except MedRemindError as exc:
            _logger.debug("Delete rejected for %r: %s", name, exc)
            return OperationResult.failure(exc)
        return OperationResult.success(reminder)

    def list_reminders(self) -> list[tuple[str, str]]:
        """``(name, time)`` pairs in load-then-add order."""
        store = self._store
        if store is None:
            return []
        return store.items()

    def reload(self) -> OperationResult:
        """Re-read the persistence root, picking up external changes."""
        try:
            count = self._require_store().load()
        except MedRemindError as exc:
            return OperationResult.failure(exc)
        return OperationResult.success(message=f"loaded {count} reminder(s)")

    def register_alert_sink(self, sink: AlertSink) -> None:
        """Deliver future alerts to *sink*."""
        if not isinstance(sink, AlertSink):
            raise TypeError(f"alert sink must provide fire(name), got {type(sink).__name__}")
        self._sink = sink
        watcher = self._watcher
        if watcher is not None:
            watcher.set_sink(sink)
