"""Link service: ensure a local file is uploaded and attached to a vector store."""

from __future__ import annotations

import logging
import os
from typing import Callable, Optional

from core.concurrency import Promise, TaskBridge
from core.llm.openai_client import OpenAIClient
from core.models import LinkResponse
from .file_store import FileStoreManager
from .vector_store import VectorStoreManager

logger = logging.getLogger(__name__)


class LinkService:
    """
    Facade used by the file-linking pipeline and teardown code.

    ``ensure_linked`` resolves with the composite string
    ``"<vectorStoreId>\\n<uploadId>"`` (see LinkResponse).
    """

    def __init__(
        self,
        client: OpenAIClient,
        bridge: TaskBridge,
        file_store: Optional[FileStoreManager] = None,
        vector_store: Optional[VectorStoreManager] = None,
        file_exists: Callable[[str], bool] = os.path.isfile,
    ):
        self._client = client
        self._bridge = bridge
        self._file_store = file_store or FileStoreManager(client, bridge)
        self._vector_store = vector_store or VectorStoreManager(client, bridge)
        self._file_exists = file_exists

    def ensure_linked(self, file_name: str, upload_id_hint: str, vector_store_id: str) -> Promise[str]:
        """
        Upload the file if needed, ensure the vector store exists, link both.

        Args:
            file_name: Local path of the file
            upload_id_hint: Previously known upload id, or ''
            vector_store_id: Previously known vector store id, or ''

        Returns:
            Promise of the composite response, '' when the file does not exist locally
        """
        if not self._file_exists(file_name):
            logger.warning("Cannot link missing file %s", file_name)
            return Promise.resolved("", dispatcher=self._bridge.dispatcher)

        def link_to_store(file_id: str) -> Promise[str]:
            return self._vector_store.ensure_vector_store_id(vector_store_id).then(
                lambda store_id: self._vector_store.ensure_vector_store_file_id(store_id, file_id).then(
                    lambda _: LinkResponse(store_id, file_id).encode()
                )
            )

        return self._file_store.ensure_file_id(file_name, upload_id_hint).then(link_to_store)

    def delete_vector_store(self, vector_store_id: str) -> Promise[str]:
        return self._vector_store.delete_vector_store(vector_store_id)

    def delete_vector_store_file(self, vector_store_id: str, file_id: str) -> Promise[str]:
        return self._vector_store.delete_vector_store_file(vector_store_id, file_id)

    def delete_file(self, file_id: str) -> Promise[str]:
        return self._bridge.run(self._client.delete_file, file_id).then(
            lambda deleted_id: f"{deleted_id} deleted"
        )

    def delete_response(self, response_id: str) -> Promise[str]:
        return self._bridge.run(self._client.delete_response, response_id).then(
            lambda deleted_id: f"{deleted_id} deleted"
        )
