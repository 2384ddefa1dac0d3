"""Serialized continuation queues.

Every promise continuation is posted to a dispatcher instead of being called
in place. In the application the dispatcher is a ``UiDispatcher`` bound to the
Qt main thread; headless code and tests use a ``CallQueue`` drained by hand.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Callable, Optional, Protocol

from PySide6.QtCore import QObject, Qt, Signal, Slot

logger = logging.getLogger(__name__)


class Dispatcher(Protocol):
    """Anything that accepts callbacks and runs them later, one at a time."""

    def post(self, callback: Callable[[], None]) -> None:
        ...


class CallQueue:
    """Thread-safe FIFO of callbacks, run only when ``drain`` is called."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pending: deque[Callable[[], None]] = deque()

    def post(self, callback: Callable[[], None]) -> None:
        with self._lock:
            self._pending.append(callback)

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)

    def drain(self) -> int:
        """Run queued callbacks, including ones queued while draining.

        Returns:
            Number of callbacks executed
        """
        executed = 0
        while True:
            with self._lock:
                if not self._pending:
                    return executed
                callback = self._pending.popleft()
            try:
                callback()
            except Exception:
                logger.exception("Dispatched callback failed")
            executed += 1


class UiDispatcher(QObject):
    """Runs posted callbacks on the thread that owns this object.

    Create it on the UI thread. ``post`` may be called from any thread; the
    connection is always queued so a callback never runs inside the call that
    posted it, even when posting from the UI thread itself.
    """

    _posted = Signal(object)

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._posted.connect(self._run, Qt.ConnectionType.QueuedConnection)

    def post(self, callback: Callable[[], None]) -> None:
        self._posted.emit(callback)

    @Slot(object)
    def _run(self, callback: Callable[[], None]) -> None:
        try:
            callback()
        except Exception:
            logger.exception("Dispatched callback failed")


_default_dispatcher: Dispatcher = CallQueue()


def get_default_dispatcher() -> Dispatcher:
    """Get the dispatcher used by promises created without one."""
    return _default_dispatcher


def set_default_dispatcher(dispatcher: Dispatcher) -> Dispatcher:
    """Replace the process-wide dispatcher.

    Returns:
        The previous dispatcher, so callers can restore it
    """
    global _default_dispatcher
    previous = _default_dispatcher
    _default_dispatcher = dispatcher
    return previous
