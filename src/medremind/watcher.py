"""Wall-clock alarm watcher.

The watcher ticks once immediately on :meth:`AlarmWatcher.start` and then at
a fixed rate measured from that first tick. Each tick formats the current
local time, asks the store for matching reminders and submits their names
to the alert dispatcher. Ticks that land in the same wall-clock minute as
the previous tick are skipped, so a reminder fires at most once per minute.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from datetime import datetime
from enum import StrEnum

from medremind.alerts import AlertDispatcher, AlertSink
from medremind.store import ReminderStore
from medremind.timefmt import format_now, local_now

_logger = logging.getLogger(__name__)

DEFAULT_TICK_INTERVAL = 60.0


class WatcherState(StrEnum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class AlarmWatcher:
    """Background ticker matching stored reminders against the local time.

    Parameters
    ----------
    store : ReminderStore
        Store queried on every tick. Only :meth:`ReminderStore.match_now`
        is used.
    sink : AlertSink
        Receives ``fire(name)`` for each due reminder, on the dispatcher
        thread.
    clock : callable
        Returns the current local wall-clock time. Injected by tests to
        simulate time.
    interval : float
        Nominal seconds between ticks.
    queue_size : int
        Capacity of the alert queue.
    shutdown_timeout : float
        Upper bound, in seconds, for joining each thread in :meth:`stop`.
    """

    def __init__(
        self,
        store: ReminderStore,
        sink: AlertSink,
        *,
        clock: Callable[[], datetime] = local_now,
        interval: float = DEFAULT_TICK_INTERVAL,
        queue_size: int = 32,
        shutdown_timeout: float = 5.0,
        logger: logging.Logger | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._store = store
        self._clock = clock
        self._interval = float(interval)
        self._shutdown_timeout = shutdown_timeout
        self._logger = logger or _logger
        self._dispatcher = AlertDispatcher(
            sink,
            maxsize=queue_size,
            join_timeout=shutdown_timeout,
            logger=self._logger,
        )
        self._lock = threading.Lock()
        self._state = WatcherState.IDLE
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._last_minute: datetime | None = None

    @property
    def state(self) -> WatcherState:
        with self._lock:
            return self._state

    @property
    def is_running(self) -> bool:
        return self.state == WatcherState.RUNNING

    @property
    def sink(self) -> AlertSink:
        return self._dispatcher.sink

    def set_sink(self, sink: AlertSink) -> None:
        """Route subsequent alerts to *sink*."""
        self._dispatcher.set_sink(sink)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start ticking. A no-op unless the watcher is idle."""
        with self._lock:
            if self._state != WatcherState.IDLE:
                if self._state == WatcherState.STOPPED:
                    self._logger.warning("Alarm watcher already stopped, ignoring start()")
                return
            self._state = WatcherState.RUNNING
            self._dispatcher.start()
            self._thread = threading.Thread(target=self._run, name="medremind-watcher", daemon=True)
            self._thread.start()
        self._logger.debug("Alarm watcher started interval=%.1fs", self._interval)

    def stop(self) -> None:
        """Cancel the pending tick and stop delivering alerts.

        Safe to call repeatedly and from any thread. Once this returns, the
        sink receives no further ``fire`` calls.
        """
        with self._lock:
            if self._state == WatcherState.STOPPED:
                return
            self._state = WatcherState.STOPPED
            self._stop_event.set()
            thread = self._thread
            self._thread = None
        if thread is not None and thread is not threading.current_thread():
            thread.join(self._shutdown_timeout)
        self._dispatcher.close()
        self._logger.debug("Alarm watcher stopped")

    # ------------------------------------------------------------------
    # Ticking
    # ------------------------------------------------------------------

    def tick(self) -> list[str]:
        """Run one match-and-fire pass against the clock.

        Returns the names submitted for alerting. Nothing is submitted when
        the watcher is stopped or when the previous tick fell in the same
        minute.
        """
        now = self._clock()
        minute = now.replace(second=0, microsecond=0)
        with self._lock:
            if self._state == WatcherState.STOPPED:
                return []
            if minute == self._last_minute:
                self._logger.debug("Tick in already-checked minute %s, skipping", minute)
                return []
            self._last_minute = minute

        now_str = format_now(now)
        due = self._store.match_now(now_str)
        fired = [name for name in due if self._dispatcher.submit(name)]
        if due:
            self._logger.debug("Tick %s: due=%s submitted=%s", now_str, due, fired)
        return fired

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Wait until every submitted alert has reached the sink."""
        return self._dispatcher.wait_idle(timeout)

    def _safe_tick(self) -> None:
        try:
            self.tick()
        except Exception:
            self._logger.exception("Alarm watcher tick failed")

    def _run(self) -> None:
        start = time.monotonic()
        slot = 0
        while not self._stop_event.is_set():
            self._safe_tick()
            slot, delay = next_slot(start, slot, time.monotonic(), self._interval)
            if self._stop_event.wait(delay):
                break


def next_slot(start: float, slot: int, now: float, interval: float) -> tuple[int, float]:
    """Pick the slot after *slot* on a fixed-rate schedule anchored at *start*.

    Returns the new slot index and the delay until it is due. When *now* is
    already past one or more slots they collapse into a single immediate
    tick at the latest one.
    """
    slot += 1
    delay = start + slot * interval - now
    if delay >= 0:
        return slot, delay
    missed = int(-delay // interval)
    if missed:
        _logger.debug("Alarm watcher behind schedule, coalescing %d missed tick(s)", missed)
    return slot + missed, 0.0
