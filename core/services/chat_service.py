"""Chat service: primary prompt execution and silent one-shot requests."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from core.concurrency import Promise, TaskBridge
from core.config import AppSettings
from core.llm.openai_client import OpenAIClient, extract_output_text
from core.persistence.chat_repository import ChatSessionRepository
from .response_tracker import ResponseIdTracker

logger = logging.getLogger(__name__)


class ChatService:
    """
    Sends prompts to the /responses endpoint.

    ``execute`` records a turn in the current chat session and chains the
    request on the previous stored response. ``execute_silently`` is a
    stateless request used for helper prompts such as title generation.
    """

    def __init__(
        self,
        client: OpenAIClient,
        bridge: TaskBridge,
        repository: ChatSessionRepository,
        tracker: ResponseIdTracker,
        settings: AppSettings,
        vector_store_provider: Callable[[], str] = lambda: "",
        instructions_provider: Callable[[], str] = lambda: "",
    ):
        self._client = client
        self._bridge = bridge
        self._repository = repository
        self._tracker = tracker
        self._settings = settings
        self._vector_store_provider = vector_store_provider
        self._instructions_provider = instructions_provider

    def _file_search_tools(self) -> list[dict[str, Any]]:
        vector_store_id = self._vector_store_provider()
        if not vector_store_id:
            return []
        return [{"type": "file_search", "vector_store_ids": [vector_store_id]}]

    def build_request(self, prompt: str, previous_response_id: Optional[str] = None) -> dict[str, Any]:
        body: dict[str, Any] = {
            "model": self._settings.model,
            "input": prompt,
            "store": True,
        }
        instructions = self._instructions_provider()
        if instructions:
            body["instructions"] = instructions
        tools = self._file_search_tools()
        if tools:
            body["tools"] = tools
            body["include"] = ["file_search_call.results"]
        if previous_response_id:
            body["previous_response_id"] = previous_response_id
        return body

    def execute(self, prompt: str) -> Promise[str]:
        """
        Run a prompt in the current chat session.

        Args:
            prompt: User prompt

        Returns:
            Promise of the response text
        """
        turn = self._repository.add_turn(prompt)
        turn.storage = True
        body = self.build_request(prompt, self._tracker.last_id)
        self._repository.save()

        def on_success(response: dict[str, Any]) -> str:
            turn.id = str(response.get("id", ""))
            turn.response = extract_output_text(response)
            self._tracker.add(turn.id)
            self._repository.save()
            return turn.response

        def on_failure(error: BaseException) -> str:
            # last_id still points at the last answered turn.
            logger.warning("Prompt execution failed: %s", error)
            raise error

        return self._bridge.run(self._client.create_response, body).then(on_success, on_failure)

    def execute_silently(self, prompt: str, instructions: str) -> Promise[str]:
        """Run an unstored request outside any chat session and resolve its text."""
        body = {
            "model": self._settings.model,
            "input": prompt,
            "instructions": instructions,
            "store": False,
        }
        return self._bridge.run(self._client.create_response, body).then(extract_output_text)
