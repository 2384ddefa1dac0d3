"""Cooperative cancellation for multi-step chains."""

from __future__ import annotations

import threading

from core.errors import CancelledError


class CancellationToken:
    """Flag checked by a chain before it starts its next step.

    Cancelling never interrupts a request already in flight; its result is
    discarded when the chain next checks the token.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CancelledError()
