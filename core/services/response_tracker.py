"""
Tracking of server-stored response ids.

Every id returned by the /responses endpoint is remembered for chaining the
next request (``last_id``) and appended to a plain-text log so that ids which
no longer belong to any chat session can be found and deleted later.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

logger = logging.getLogger(__name__)


class ResponseIdTracker:
    """Response ids of the running conversation plus the persisted id log."""

    def __init__(self, log_path: Optional[Path] = None):
        self._log_path = Path(log_path) if log_path else None
        self._ids: list[str] = []
        self._log_ids: list[str] = []
        self._last_id = ""
        self._load_log()

    @property
    def last_id(self) -> str:
        return self._last_id

    @property
    def ids(self) -> list[str]:
        return list(self._ids)

    @property
    def log_ids(self) -> list[str]:
        return list(self._log_ids)

    def add(self, response_id: str) -> None:
        if not response_id.strip() or response_id in self._ids:
            return
        self._ids.append(response_id)
        self._log_ids.append(response_id)
        self._last_id = response_id
        self._save_log()

    def reset(self, ids: Iterable[str] = ()) -> None:
        """Switch to another conversation whose responses are already logged."""
        self._ids = [response_id for response_id in ids if response_id]
        self._last_id = self._ids[-1] if self._ids else ""

    def remove_id(self, response_id: str) -> None:
        if response_id in self._log_ids:
            self._log_ids.remove(response_id)
            self._save_log()

    def get_orphans(self, session_ids: Iterable[str]) -> list[str]:
        """Logged ids not referenced by any chat session."""
        known = set(session_ids)
        return [response_id for response_id in self._log_ids if response_id not in known]

    def _load_log(self) -> None:
        if self._log_path is None or not self._log_path.is_file():
            return
        raw = self._log_path.read_text(encoding="utf-8")
        self._log_ids.extend(line for line in raw.splitlines() if line.strip())

    def _save_log(self) -> None:
        if self._log_path is None:
            return
        self._log_path.parent.mkdir(parents=True, exist_ok=True)
        self._log_path.write_text("\n".join(self._log_ids), encoding="utf-8")
