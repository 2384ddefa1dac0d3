"""Error taxonomy and result type for asynchronous chains."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar, Union

T = TypeVar("T")


class ValidationError(Exception):
    """Expected user mistake detected before any network call (no files, missing file)."""


class NetworkError(Exception):
    """A remote service call failed.

    Attributes:
        status_code: HTTP status when the server answered, None for transport errors
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class CancelledError(Exception):
    """A chain was aborted by cooperative cancellation."""

    def __init__(self, message: str = "Operation cancelled"):
        super().__init__(message)


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """Failed outcome carrying the original exception."""

    error: BaseException

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[Any], Err]
