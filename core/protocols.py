"""Collaborator protocols used by the pipelines."""

from __future__ import annotations

from typing import Protocol

from core.concurrency import Promise


class AlertService(Protocol):
    def show_warning(self, message: str) -> None: ...

    def show_error(self, message: str) -> None: ...

    def show_confirmation(self, message: str) -> bool: ...


class LinkServiceProtocol(Protocol):
    def ensure_linked(self, file_name: str, upload_id_hint: str, vector_store_id: str) -> Promise[str]: ...

    def delete_vector_store(self, vector_store_id: str) -> Promise[str]: ...

    def delete_vector_store_file(self, vector_store_id: str, file_id: str) -> Promise[str]: ...

    def delete_file(self, file_id: str) -> Promise[str]: ...

    def delete_response(self, response_id: str) -> Promise[str]: ...


class ChatServiceProtocol(Protocol):
    def execute(self, prompt: str) -> Promise[str]: ...

    def execute_silently(self, prompt: str, instructions: str) -> Promise[str]: ...
