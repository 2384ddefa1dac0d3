"""Minimal promise primitive with ordered, deferred continuations."""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar

from core.errors import Err, Ok, Result
from .dispatcher import Dispatcher, get_default_dispatcher

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")

Resolve = Callable[[Any], None]
Reject = Callable[[BaseException], None]


class PromiseState(str, Enum):
    """Settlement state of a promise."""

    PENDING = "pending"
    FULFILLED = "fulfilled"
    REJECTED = "rejected"


class Promise(Generic[T]):
    """A value that becomes available later.

    The executor runs synchronously in the constructor and receives the
    ``resolve`` and ``reject`` capabilities. Only the first call to either has
    an effect. Continuations registered with ``then``/``catch`` are posted to
    the dispatcher once the promise settles, in registration order, and each
    runs exactly once.

    Args:
        executor: Callable receiving (resolve, reject)
        dispatcher: Queue continuations are posted to; defaults to the
            process-wide dispatcher
    """

    def __init__(
        self,
        executor: Optional[Callable[[Resolve, Reject], None]] = None,
        dispatcher: Optional[Dispatcher] = None,
    ):
        self._dispatcher = dispatcher if dispatcher is not None else get_default_dispatcher()
        self._lock = threading.Lock()
        self._state = PromiseState.PENDING
        self._value: Any = None
        self._error: Optional[BaseException] = None
        self._continuations: list[tuple[Callable[[Any], None], Callable[[BaseException], None]]] = []
        # Guards against a second adoption racing the first resolve call.
        self._locked_in = False

        if executor is not None:
            try:
                executor(self._resolve, self._reject)
            except Exception as exc:
                self._reject(exc)

    # ---- Construction helpers ----

    @classmethod
    def resolved(cls, value: T, dispatcher: Optional[Dispatcher] = None) -> "Promise[T]":
        """Create an already-fulfilled promise."""
        promise: Promise[T] = cls(dispatcher=dispatcher)
        promise._resolve(value)
        return promise

    @classmethod
    def rejected(cls, error: BaseException, dispatcher: Optional[Dispatcher] = None) -> "Promise[Any]":
        """Create an already-rejected promise."""
        promise: Promise[Any] = cls(dispatcher=dispatcher)
        promise._reject(error)
        return promise

    # ---- State ----

    @property
    def state(self) -> PromiseState:
        return self._state

    @property
    def is_settled(self) -> bool:
        return self._state is not PromiseState.PENDING

    @property
    def value(self) -> Any:
        """Fulfilled value, or None while pending or rejected."""
        return self._value

    @property
    def error(self) -> Optional[BaseException]:
        """Rejection error, or None while pending or fulfilled."""
        return self._error

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    # ---- Settlement ----

    def _resolve(self, value: Any) -> None:
        if isinstance(value, Promise):
            if value is self:
                self._reject(TypeError("A promise cannot be resolved with itself"))
                return
            with self._lock:
                if self._locked_in or self._state is not PromiseState.PENDING:
                    return
                self._locked_in = True
            value._subscribe(self._fulfill, self._settle_rejected)
            return
        with self._lock:
            if self._locked_in or self._state is not PromiseState.PENDING:
                return
            self._locked_in = True
        self._fulfill(value)

    def _reject(self, error: BaseException) -> None:
        with self._lock:
            if self._locked_in or self._state is not PromiseState.PENDING:
                return
            self._locked_in = True
        self._settle_rejected(error)

    def _fulfill(self, value: Any) -> None:
        with self._lock:
            if self._state is not PromiseState.PENDING:
                return
            self._state = PromiseState.FULFILLED
            self._value = value
        self._schedule_flush()

    def _settle_rejected(self, error: BaseException) -> None:
        with self._lock:
            if self._state is not PromiseState.PENDING:
                return
            self._state = PromiseState.REJECTED
            self._error = error
        logger.debug("Promise rejected: %s", error)
        self._schedule_flush()

    def _schedule_flush(self) -> None:
        self._dispatcher.post(self._flush)

    def _flush(self) -> None:
        with self._lock:
            if self._state is PromiseState.PENDING or not self._continuations:
                return
            continuations = self._continuations
            self._continuations = []
            state, value, error = self._state, self._value, self._error

        for on_fulfilled, on_rejected in continuations:
            if state is PromiseState.FULFILLED:
                on_fulfilled(value)
            else:
                on_rejected(error)

    def _subscribe(
        self,
        on_fulfilled: Callable[[Any], None],
        on_rejected: Callable[[BaseException], None],
    ) -> None:
        with self._lock:
            self._continuations.append((on_fulfilled, on_rejected))
            settled = self._state is not PromiseState.PENDING
        if settled:
            self._schedule_flush()

    # ---- Chaining ----

    def then(
        self,
        on_fulfilled: Optional[Callable[[T], Any]] = None,
        on_rejected: Optional[Callable[[BaseException], Any]] = None,
    ) -> "Promise[Any]":
        """Register continuations and return the derived promise.

        A callback returning a promise makes the derived promise adopt that
        promise's outcome. A callback raising rejects the derived promise.
        Missing callbacks forward the value or error unchanged.
        """
        child: Promise[Any] = Promise(dispatcher=self._dispatcher)

        def handle_fulfilled(value: Any) -> None:
            if on_fulfilled is None:
                child._resolve(value)
                return
            try:
                child._resolve(on_fulfilled(value))
            except Exception as exc:
                child._reject(exc)

        def handle_rejected(error: BaseException) -> None:
            if on_rejected is None:
                child._reject(error)
                return
            try:
                child._resolve(on_rejected(error))
            except Exception as exc:
                child._reject(exc)

        self._subscribe(handle_fulfilled, handle_rejected)
        return child

    def catch(self, on_rejected: Callable[[BaseException], Any]) -> "Promise[Any]":
        """Handle the first unhandled rejection from any upstream step."""
        return self.then(None, on_rejected)

    def settle(self) -> "Promise[Result]":
        """Fold the outcome into a promise that always fulfills with a Result."""
        return self.then(Ok, Err)

    def __repr__(self) -> str:
        return f"<Promise {self._state.value}>"
