"""Bridge between blocking worker tasks and the UI-owning thread."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from PySide6.QtCore import QRunnable, QThreadPool

from .dispatcher import Dispatcher, get_default_dispatcher
from .promise import Promise

logger = logging.getLogger(__name__)


class _BridgeTask(QRunnable):
    """One unit of blocking work executed on a pool thread."""

    def __init__(
        self,
        work: Callable[..., Any],
        args: tuple,
        kwargs: dict[str, Any],
        on_done: Callable[[Any], None],
        on_error: Callable[[BaseException], None],
    ):
        super().__init__()
        self._work = work
        self._args = args
        self._kwargs = kwargs
        self._on_done = on_done
        self._on_error = on_error

    def run(self) -> None:
        try:
            result = self._work(*self._args, **self._kwargs)
        except Exception as exc:
            logger.warning("Background task %s failed: %s", _describe(self._work), exc)
            self._on_error(exc)
            return
        self._on_done(result)


def _describe(work: Callable[..., Any]) -> str:
    return getattr(work, "__qualname__", None) or repr(work)


class TaskBridge:
    """Runs blocking work on a thread pool and settles promises on the UI thread.

    The worker never calls resolve/reject itself: the outcome is posted to the
    dispatcher first, so every continuation of the returned promise runs on the
    thread that drains the dispatcher.

    Args:
        dispatcher: Queue bound to the UI-owning thread
        thread_pool: Pool executing the work; defaults to the global QThreadPool
    """

    def __init__(
        self,
        dispatcher: Optional[Dispatcher] = None,
        thread_pool: Optional[QThreadPool] = None,
    ):
        self._dispatcher = dispatcher if dispatcher is not None else get_default_dispatcher()
        self._pool = thread_pool if thread_pool is not None else QThreadPool.globalInstance()

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    def run(self, work: Callable[..., Any], *args: Any, **kwargs: Any) -> Promise[Any]:
        """Execute ``work(*args, **kwargs)`` off the UI thread.

        Returns:
            Promise settled with the work's return value or exception
        """
        dispatcher = self._dispatcher

        def executor(resolve, reject) -> None:
            task = _BridgeTask(
                work,
                args,
                kwargs,
                on_done=lambda value: dispatcher.post(lambda: resolve(value)),
                on_error=lambda exc: dispatcher.post(lambda: reject(exc)),
            )
            self._pool.start(task)

        return Promise(executor, dispatcher=dispatcher)

    def wait_for_done(self, msecs: int = -1) -> bool:
        """Block until queued work finishes. Intended for shutdown and tests."""
        return self._pool.waitForDone(msecs)
