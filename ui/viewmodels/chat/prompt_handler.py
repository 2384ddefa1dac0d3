"""PromptHandler - Submits prompts and publishes responses and titles."""

import logging
from typing import Optional

from PySide6.QtCore import QObject, Signal

from core.concurrency import Promise
from core.errors import Result
from core.persistence import ChatSessionRepository
from core.protocols import AlertService, ChatServiceProtocol
from ui.viewmodels.chat.naming_pipeline import NamingPipeline

logger = logging.getLogger(__name__)


class PromptHandler(QObject):
    """Handles prompt submission for the chat view.

    This class manages:
    - Validating and sending the prompt through the chat service
    - Publishing the response, or the error, to the view
    - Attaching the session naming hop after the first exchange

    Signals:
        response_received(str): Emitted with the response text
        error_occurred(str): Emitted when the primary request fails
        session_renamed(str): Emitted with the new session title
        is_busy_changed(bool): Emitted when a request starts or ends
    """

    response_received = Signal(str)
    error_occurred = Signal(str)
    session_renamed = Signal(str)
    is_busy_changed = Signal(bool)

    def __init__(
        self,
        chat_service: ChatServiceProtocol,
        chat_repository: ChatSessionRepository,
        naming_pipeline: NamingPipeline,
        alerts: AlertService,
        parent: Optional[QObject] = None,
    ):
        """Initialize the prompt handler.

        Args:
            chat_service: Service executing prompts
            chat_repository: Repository holding the current session
            naming_pipeline: Pipeline titling new sessions
            alerts: Alert service for request errors
            parent: Optional parent QObject
        """
        super().__init__(parent)
        self._chat_service = chat_service
        self._chat_repository = chat_repository
        self._naming_pipeline = naming_pipeline
        self._alerts = alerts
        self._is_busy = False

    @property
    def is_busy(self) -> bool:
        return self._is_busy

    def _set_busy(self, busy: bool) -> None:
        if self._is_busy != busy:
            self._is_busy = busy
            self.is_busy_changed.emit(busy)

    def submit(self, prompt: str) -> Optional[Promise[str]]:
        """Send a prompt.

        Args:
            prompt: Text typed by the user

        Returns:
            Promise of the response text ('' on failure), or None when the
            prompt was not sent
        """
        prompt = prompt.strip()
        if not prompt:
            logger.debug("Ignoring blank prompt")
            return None
        if self._is_busy:
            logger.warning("A prompt is already running")
            return None

        self._set_busy(True)
        primary = self._chat_service.execute(prompt)

        session = self._chat_repository.current
        if session is not None:
            naming = self._naming_pipeline.attach(primary, session, prompt)
            if naming is not None:
                naming.then(self._on_naming_settled)

        def on_success(response: str) -> str:
            self._set_busy(False)
            self.response_received.emit(response)
            return response

        def on_failure(error: BaseException) -> str:
            self._set_busy(False)
            message = str(error)
            logger.error("Prompt failed: %s", message)
            self._alerts.show_error(message)
            self.error_occurred.emit(message)
            return ""

        return primary.then(on_success, on_failure)

    def _on_naming_settled(self, result: Result) -> None:
        if result.ok and result.value:
            self.session_renamed.emit(result.value)
