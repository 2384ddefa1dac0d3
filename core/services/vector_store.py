"""Remote vector stores and their file links."""

from __future__ import annotations

import logging
from typing import Callable

from core.concurrency import Promise, TaskBridge
from core.constants import VECTOR_STORE_NAME
from core.errors import NetworkError
from core.llm.openai_client import OpenAIClient

logger = logging.getLogger(__name__)


def _empty_when_missing(call: Callable[[], str]) -> str:
    """Run a retrieve call, mapping a 404 to ''."""
    try:
        return call()
    except NetworkError as exc:
        if exc.is_not_found:
            return ""
        raise


class VectorStoreManager:
    """Promise-returning wrapper over the /vector_stores endpoints."""

    def __init__(self, client: OpenAIClient, bridge: TaskBridge):
        self._client = client
        self._bridge = bridge

    # ---- Vector store ----

    def retrieve_vector_store_id(self, vector_store_id: str) -> Promise[str]:
        if not vector_store_id.strip():
            return Promise.resolved("", dispatcher=self._bridge.dispatcher)
        return self._bridge.run(
            _empty_when_missing,
            lambda: self._client.retrieve_vector_store(vector_store_id),
        )

    def create_vector_store(self) -> Promise[str]:
        logger.info("Creating vector store %r", VECTOR_STORE_NAME)
        return self._bridge.run(self._client.create_vector_store, VECTOR_STORE_NAME)

    def ensure_vector_store_id(self, vector_store_id: str) -> Promise[str]:
        """Resolve with an existing vector store id, creating a store when it is unknown."""
        if not vector_store_id.strip():
            return self.create_vector_store()

        def create_if_missing(found: str):
            return found if found.strip() else self.create_vector_store()

        return self.retrieve_vector_store_id(vector_store_id).then(create_if_missing)

    def delete_vector_store(self, vector_store_id: str) -> Promise[str]:
        return self._bridge.run(self._client.delete_vector_store, vector_store_id).then(
            lambda _: "deleted"
        )

    # ---- Vector store files ----

    def retrieve_vector_store_file_id(self, vector_store_id: str, file_id: str) -> Promise[str]:
        return self._bridge.run(
            _empty_when_missing,
            lambda: self._client.retrieve_vector_store_file(vector_store_id, file_id),
        )

    def create_vector_store_file(self, vector_store_id: str, file_id: str) -> Promise[str]:
        return self._bridge.run(
            self._client.create_vector_store_file, vector_store_id, file_id
        ).then(lambda _: "created")

    def ensure_vector_store_file_id(self, vector_store_id: str, file_id: str) -> Promise[str]:
        """Link ``file_id`` to the store unless the link already exists."""

        def create_if_missing(found: str):
            if found.strip():
                return "exists"
            return self.create_vector_store_file(vector_store_id, file_id)

        return self.retrieve_vector_store_file_id(vector_store_id, file_id).then(create_if_missing)

    def delete_vector_store_file(self, vector_store_id: str, file_id: str) -> Promise[str]:
        return self._bridge.run(
            self._client.delete_vector_store_file, vector_store_id, file_id
        ).then(lambda _: "deleted")
