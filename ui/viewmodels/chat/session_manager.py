"""SessionManager - Switches, starts and deletes chat sessions."""

import logging
from typing import Optional

from PySide6.QtCore import QObject, Signal

from core.concurrency import Promise
from core.persistence import ChatSessionRepository
from core.protocols import LinkServiceProtocol
from core.services import ResponseIdTracker
from core.types import ChatSession

logger = logging.getLogger(__name__)


class SessionManager(QObject):
    """Manages which chat session receives the next prompt.

    This class handles:
    - Loading a stored session and re-chaining on its responses
    - Starting a fresh session
    - Deleting sessions along with their server-stored responses

    Signals:
        session_loaded(str): Emitted with the active session id ('' for a new chat)
        sessions_changed(): Emitted when a session is deleted
    """

    session_loaded = Signal(str)
    sessions_changed = Signal()

    def __init__(
        self,
        chat_repository: ChatSessionRepository,
        tracker: ResponseIdTracker,
        link_service: LinkServiceProtocol,
        parent: Optional[QObject] = None,
    ):
        """Initialize the session manager.

        Args:
            chat_repository: Repository holding the sessions
            tracker: Response id tracker chaining prompts
            link_service: Service deleting stored responses
            parent: Optional parent QObject
        """
        super().__init__(parent)
        self._chat_repository = chat_repository
        self._tracker = tracker
        self._link_service = link_service

    @property
    def sessions(self) -> list[ChatSession]:
        return self._chat_repository.sessions

    @property
    def current_session(self) -> Optional[ChatSession]:
        """Get the session the next prompt is added to."""
        return self._chat_repository.current

    def load_session(self, session_id: str) -> bool:
        """Make a stored session current.

        The tracker is reset to the session's answered turns so the next
        prompt chains on that session's last response.

        Args:
            session_id: The ID of the session to load

        Returns:
            False when no such session exists
        """
        session = self._chat_repository.get_by_id(session_id)
        if session is None:
            logger.warning(f"Session {session_id} not found")
            return False

        self._chat_repository.set_current(session)
        self._tracker.reset(turn.id for turn in session.turns if turn.id)
        self.session_loaded.emit(session.id)
        return True

    def new_session(self) -> None:
        """Start a new chat; the session itself is created by the first prompt."""
        self._chat_repository.set_current(None)
        self._tracker.reset()
        self.session_loaded.emit("")

    def delete_session(self, session_id: str) -> list[Promise[str]]:
        """Delete a session and its stored responses.

        Args:
            session_id: The ID of the session to delete

        Returns:
            Promises of the remote response deletions
        """
        was_current = self.current_session is not None and self.current_session.id == session_id
        response_ids = self._chat_repository.delete(session_id)
        self._chat_repository.save()
        if was_current:
            self.new_session()
        self.sessions_changed.emit()
        return [self._delete_response(response_id) for response_id in response_ids]

    def _delete_response(self, response_id: str) -> Promise[str]:
        def on_deleted(result: str) -> str:
            self._tracker.remove_id(response_id)
            return result

        def on_failed(error: BaseException) -> str:
            # Left in the log; the orphan purge retries it on the next start.
            logger.warning("Could not delete response %s: %s", response_id, error)
            return ""

        return self._link_service.delete_response(response_id).then(on_deleted, on_failed)
