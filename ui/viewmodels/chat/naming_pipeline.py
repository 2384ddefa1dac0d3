"""NamingPipeline - Titles a chat session from its first exchange."""

import logging
from typing import Optional

from core.concurrency import Promise
from core.constants import NAMING_INSTRUCTION, NEW_CHAT_TITLE
from core.errors import Result
from core.models import NamingContext
from core.persistence import ChatSessionRepository
from core.protocols import ChatServiceProtocol
from core.types import ChatSession

logger = logging.getLogger(__name__)


def needs_naming(session: ChatSession) -> bool:
    """A session is named after its first turn, or while it still has the placeholder title."""
    return len(session.turns) == 1 or session.title == NEW_CHAT_TITLE


class NamingPipeline:
    """Chains a silent title request behind a primary chat request.

    The title request never affects the primary response: its failures are
    folded into an ``Err`` result and logged.
    """

    def __init__(self, chat_service: ChatServiceProtocol, chat_repository: ChatSessionRepository):
        self._chat_service = chat_service
        self._chat_repository = chat_repository

    def attach(
        self,
        primary: Promise[str],
        session: ChatSession,
        prompt: str,
    ) -> Optional[Promise[Result]]:
        """Attach the naming hop to a primary request.

        Args:
            primary: Promise of the primary response text
            session: Session the primary request belongs to
            prompt: Prompt of the primary request

        Returns:
            Promise of the naming outcome (``Ok(title)`` or ``Err(error)``),
            or None when the session is already named
        """
        if not needs_naming(session):
            return None

        def request_title(context: NamingContext) -> Promise[NamingContext]:
            return self._chat_service.execute_silently(
                context.naming_prompt, NAMING_INSTRUCTION
            ).then(context.with_title)

        def apply_title(context: NamingContext) -> str:
            if not context.title:
                logger.info("Empty title generated for session %s", session.id)
                return ""
            self._chat_repository.rename(session, context.title)
            self._chat_repository.save()
            logger.info("Session %s renamed to %r", session.id, context.title)
            return context.title

        def report(result: Result) -> Result:
            if not result.ok:
                logger.warning("Could not name session %s: %s", session.id, result.error)
            return result

        return (
            primary.then(lambda response: NamingContext.create(prompt, response))
            .then(request_title)
            .then(apply_title)
            .settle()
            .then(report)
        )
