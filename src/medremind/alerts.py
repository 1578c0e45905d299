"""Alert sinks and the dispatcher that feeds them.

A sink is anything with a ``fire(name)`` method. The watcher never calls a
sink directly: it submits names to an :class:`AlertDispatcher`, whose own
thread drains a bounded queue and invokes the sink. A slow or failing sink
therefore never delays the next tick or a user edit.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import queue
import sys
import threading
from collections.abc import Callable
from typing import Protocol, TextIO, runtime_checkable

_logger = logging.getLogger(__name__)


def format_alert_message(name: str) -> str:
    return f"Time to take: {name}"


@runtime_checkable
class AlertSink(Protocol):
    """Recipient of reminder alerts, implemented by the presentation layer."""

    def fire(self, name: str) -> None: ...


class LoggingAlertSink:
    """Reports alerts on a logger. Used when no sink is registered."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or _logger

    def fire(self, name: str) -> None:
        self._logger.warning("Medicine reminder: %s", format_alert_message(name))


class ConsoleAlertSink:
    """Beeps and prints the reminder on a text stream."""

    def __init__(self, stream: TextIO | None = None, *, beep: bool = True) -> None:
        self._stream = stream
        self._beep = beep

    def fire(self, name: str) -> None:
        stream = self._stream or sys.stdout
        bell = "\a" if self._beep else ""
        stream.write(f"{bell}[Medicine Reminder] {format_alert_message(name)}\n")
        stream.flush()


class CallbackAlertSink:
    """Adapts a plain callable to the sink interface."""

    def __init__(self, callback: Callable[[str], None]) -> None:
        self._callback = callback

    def fire(self, name: str) -> None:
        self._callback(name)


class LoopAlertSink:
    """Hands alerts to a callback running on an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop, callback: Callable[[str], None]) -> None:
        self._loop = loop
        self._callback = callback

    def fire(self, name: str) -> None:
        if self._loop.is_closed():
            _logger.debug("Dropping alert for %r: event loop is closed", name)
            return
        self._loop.call_soon_threadsafe(self._callback, name)


class AlertDispatcher:
    """Delivers alert names to a sink from a dedicated thread.

    ``submit`` never blocks: when the queue is full the alert is dropped and
    a warning is logged. After :meth:`close` returns no further ``fire``
    call is made; alerts still queued at that point are discarded.
    """

    def __init__(
        self,
        sink: AlertSink,
        *,
        maxsize: int = 32,
        join_timeout: float = 5.0,
        logger: logging.Logger | None = None,
    ) -> None:
        self._sink = sink
        self._queue: queue.Queue[str | None] = queue.Queue(maxsize=maxsize)
        self._join_timeout = join_timeout
        self._logger = logger or _logger
        self._cond = threading.Condition()
        self._pending = 0
        self._closed = False
        self._thread: threading.Thread | None = None

    @property
    def sink(self) -> AlertSink:
        with self._cond:
            return self._sink

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def set_sink(self, sink: AlertSink) -> None:
        with self._cond:
            self._sink = sink

    def start(self) -> None:
        with self._cond:
            if self._closed or self._thread is not None:
                return
            self._thread = threading.Thread(target=self._run, name="medremind-alerts", daemon=True)
            self._thread.start()
        self._logger.debug("Alert dispatcher started")

    def submit(self, name: str) -> bool:
        """Queue *name* for delivery. Returns ``False`` if it was dropped."""
        with self._cond:
            if self._closed:
                return False
            try:
                self._queue.put_nowait(name)
            except queue.Full:
                self._logger.warning("Alert queue full, dropping alert for %r", name)
                return False
            self._pending += 1
            return True

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until every submitted alert has been handled or dropped."""
        with self._cond:
            return self._cond.wait_for(lambda: self._pending == 0 or self._closed, timeout)

    def _run(self) -> None:
        while True:
            name = self._queue.get()
            with self._cond:
                if name is None or self._closed:
                    return
                sink = self._sink
            try:
                sink.fire(name)
            except Exception:
                self._logger.exception("Alert sink failed for %r", name)
            finally:
                with self._cond:
                    self._pending = max(0, self._pending - 1)
                    self._cond.notify_all()

    def close(self) -> None:
        with self._cond:
            if self._closed:
                return
            self._closed = True
            self._pending = 0
            self._cond.notify_all()
            thread = self._thread
        with contextlib.suppress(queue.Full):
            self._queue.put_nowait(None)
        if thread is not None and thread is not threading.current_thread():
            thread.join(self._join_timeout)
            if thread.is_alive():
                self._logger.warning("Alert sink still busy after %.1fs at shutdown", self._join_timeout)
        self._logger.debug("Alert dispatcher stopped")
