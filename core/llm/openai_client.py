"""
Blocking OpenAI REST client for files, vector stores and responses.

Every method performs one HTTP request and is meant to run on a worker
thread through TaskBridge. Failures are raised as NetworkError.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Optional

import httpx

from core.config import get_openai_api_key
from core.constants import DEFAULT_TIMEOUT_SECONDS, FILE_PURPOSE, OPENAI_API_BASE_URL
from core.errors import NetworkError

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return response.text or response.reason_phrase


class OpenAIClient:
    """Thin synchronous wrapper over the OpenAI v1 REST API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = OPENAI_API_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
        api_key_provider: Callable[[], str] = get_openai_api_key,
    ):
        self._api_key = api_key
        self._api_key_provider = api_key_provider
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key or self._api_key_provider()}",
            "OpenAI-Beta": "assistants=v2",
        }

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        logger.debug("%s %s", method, path)
        try:
            response = self._client.request(method, path, headers=self._headers(), **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise NetworkError(
                f"error {status}: {_error_message(exc.response)}",
                status_code=status,
            ) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"request failed: {exc}") from exc
        if not response.content:
            return {}
        return response.json()

    # ---- Files ----

    def list_files(self) -> list[dict[str, Any]]:
        return list(self._request("GET", "/files").get("data", []))

    def upload_file(self, file_name: str, purpose: str = FILE_PURPOSE) -> str:
        path = Path(file_name)
        with open(path, "rb") as handle:
            payload = self._request(
                "POST",
                "/files",
                data={"purpose": purpose},
                files={"file": (path.name, handle)},
            )
        return str(payload["id"])

    def delete_file(self, file_id: str) -> str:
        return str(self._request("DELETE", f"/files/{file_id}").get("id", file_id))

    # ---- Vector stores ----

    def retrieve_vector_store(self, vector_store_id: str) -> str:
        return str(self._request("GET", f"/vector_stores/{vector_store_id}")["id"])

    def create_vector_store(self, name: str) -> str:
        return str(self._request("POST", "/vector_stores", json={"name": name})["id"])

    def delete_vector_store(self, vector_store_id: str) -> str:
        return str(self._request("DELETE", f"/vector_stores/{vector_store_id}").get("id", vector_store_id))

    # ---- Vector store files ----

    def retrieve_vector_store_file(self, vector_store_id: str, file_id: str) -> str:
        path = f"/vector_stores/{vector_store_id}/files/{file_id}"
        return str(self._request("GET", path)["id"])

    def create_vector_store_file(self, vector_store_id: str, file_id: str) -> str:
        path = f"/vector_stores/{vector_store_id}/files"
        return str(self._request("POST", path, json={"file_id": file_id})["id"])

    def delete_vector_store_file(self, vector_store_id: str, file_id: str) -> str:
        path = f"/vector_stores/{vector_store_id}/files/{file_id}"
        return str(self._request("DELETE", path).get("id", file_id))

    # ---- Responses ----

    def create_response(self, body: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", "/responses", json=body)

    def delete_response(self, response_id: str) -> str:
        return str(self._request("DELETE", f"/responses/{response_id}").get("id", response_id))


def extract_output_text(response: dict[str, Any]) -> str:
    """Concatenate every text part of a /responses payload."""
    parts: list[str] = []
    for item in response.get("output") or []:
        if not isinstance(item, dict):
            continue
        for content in item.get("content") or []:
            if isinstance(content, dict) and content.get("text"):
                parts.append(str(content["text"]))
    return "".join(parts)
