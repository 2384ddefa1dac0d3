"""Promise, dispatch and worker-thread primitives."""

from .cancellation import CancellationToken
from .dispatcher import (
    CallQueue,
    Dispatcher,
    UiDispatcher,
    get_default_dispatcher,
    set_default_dispatcher,
)
from .promise import Promise, PromiseState
from .task_bridge import TaskBridge

__all__ = [
    "CallQueue",
    "CancellationToken",
    "Dispatcher",
    "Promise",
    "PromiseState",
    "TaskBridge",
    "UiDispatcher",
    "get_default_dispatcher",
    "set_default_dispatcher",
]
