"""Remote file store: make sure a local file has an uploaded counterpart."""

from __future__ import annotations

import logging
import os

from core.concurrency import Promise, TaskBridge
from core.constants import FILE_PURPOSE
from core.llm.openai_client import OpenAIClient

logger = logging.getLogger(__name__)


class FileStoreManager:
    """Promise-returning wrapper over the /files endpoints."""

    def __init__(self, client: OpenAIClient, bridge: TaskBridge):
        self._client = client
        self._bridge = bridge

    def _find_uploaded(self, file_name: str, file_id: str) -> str:
        base_name = os.path.basename(file_name)
        for item in self._client.list_files():
            if (
                item.get("purpose") == FILE_PURPOSE
                and item.get("filename") == base_name
                and item.get("id") == file_id
            ):
                return file_id
        return ""

    def check_file_uploaded(self, file_name: str, file_id: str) -> Promise[str]:
        """Resolve with ``file_id`` if the remote store still holds it for this file, else ''."""
        return self._bridge.run(self._find_uploaded, file_name, file_id)

    def upload_file(self, file_name: str) -> Promise[str]:
        logger.info("Uploading %s", file_name)
        return self._bridge.run(self._client.upload_file, file_name, FILE_PURPOSE)

    def ensure_file_id(self, file_name: str, file_id: str) -> Promise[str]:
        """Resolve with an upload id for ``file_name``, uploading only when needed."""
        if not file_id.strip():
            return self.upload_file(file_name)

        def upload_if_missing(found: str):
            if found:
                return found
            return self.upload_file(file_name)

        return self.check_file_uploaded(file_name, file_id).then(upload_if_missing)
