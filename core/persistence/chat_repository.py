"""Chat session repository implementation."""

from __future__ import annotations

import time
import uuid
from pathlib import Path
from typing import Optional

from core.constants import NEW_CHAT_TITLE
from core.types import ChatSession, ChatSessionList, ChatTurn
from .json_store import JsonDocumentStore


class ChatSessionRepository:
    """JSON-backed chat sessions plus the session currently being written to."""

    def __init__(self, path: Path):
        self._store: JsonDocumentStore[ChatSessionList] = JsonDocumentStore(path, ChatSessionList)
        self._document = ChatSessionList()
        self._current: Optional[ChatSession] = None

    @property
    def sessions(self) -> list[ChatSession]:
        return self._document.sessions

    @property
    def current(self) -> Optional[ChatSession]:
        return self._current

    def set_current(self, session: Optional[ChatSession]) -> None:
        self._current = session

    def load(self) -> ChatSessionList:
        self._document = self._store.load()
        self._current = None
        return self._document

    def save(self) -> None:
        self._store.save(self._document)

    def get_by_id(self, session_id: str) -> Optional[ChatSession]:
        for session in self._document.sessions:
            if session.id == session_id:
                return session
        return None

    def add_session(self) -> ChatSession:
        now = int(time.time())
        session = ChatSession(
            id=str(uuid.uuid4()),
            title=NEW_CHAT_TITLE,
            created_at=now,
            modified_at=now,
        )
        self._document.sessions.append(session)
        self._current = session
        return session

    def add_turn(self, prompt: str) -> ChatTurn:
        """Append a turn to the current session, creating a session when none is active.

        The first turn of a session stamps its creation time and resets its
        title to the placeholder so it gets named.
        """
        session = self._current or self.add_session()
        turn = ChatTurn(prompt=prompt)
        session.turns.append(turn)
        now = int(time.time())
        if len(session.turns) == 1:
            session.created_at = now
            session.title = NEW_CHAT_TITLE
        session.modified_at = now
        return turn

    def rename(self, session: ChatSession, title: str) -> None:
        session.title = title
        session.modified_at = int(time.time())

    def delete(self, session_id: str) -> list[str]:
        """Remove a session.

        Returns:
            Response ids of its server-stored turns, for remote cleanup
        """
        session = self.get_by_id(session_id)
        if session is None:
            return []
        self._document.sessions.remove(session)
        if self._current is session:
            self._current = None
        return [turn.id for turn in session.turns if turn.storage and turn.id]

    def response_ids(self) -> list[str]:
        return self._document.response_ids()
