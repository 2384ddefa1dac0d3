"""Tests for LinkService and the file/vector store managers it drives."""

import json
from pathlib import Path

import httpx
import pytest

from core.concurrency import CallQueue, TaskBridge
from core.errors import NetworkError
from core.llm.openai_client import OpenAIClient
from core.services import LinkService, VectorStoreManager


class InlinePool:
    def start(self, runnable):
        runnable.run()

    def waitForDone(self, msecs=-1):
        return True


class FakeOpenAI:
    """In-memory OpenAI endpoints recording every request."""

    def __init__(self):
        self.files: list[dict] = []
        self.stores: set[str] = set()
        self.links: set[tuple[str, str]] = set()
        self.requests: list[tuple[str, str]] = []
        self.fail_upload = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        method, path = request.method, request.url.path.removeprefix("/v1")
        self.requests.append((method, path))
        parts = path.strip("/").split("/")

        if path == "/files" and method == "GET":
            return httpx.Response(200, json={"data": self.files})
        if path == "/files" and method == "POST":
            if self.fail_upload:
                return httpx.Response(500, json={"error": {"message": "upload failed"}})
            file_id = f"file_{len(self.files) + 1}"
            filename = request.content.split(b'filename="')[1].split(b'"')[0].decode()
            self.files.append({"id": file_id, "filename": filename, "purpose": "user_data"})
            return httpx.Response(200, json={"id": file_id})
        if parts[0] == "files" and method == "DELETE":
            return httpx.Response(200, json={"id": parts[1], "deleted": True})
        if path == "/vector_stores" and method == "POST":
            store_id = f"vs_{len(self.stores) + 1}"
            self.stores.add(store_id)
            return httpx.Response(200, json={"id": store_id})
        if parts[0] == "vector_stores" and len(parts) == 2:
            if parts[1] not in self.stores:
                return httpx.Response(404, json={"error": {"message": "No vector store found"}})
            if method == "DELETE":
                self.stores.discard(parts[1])
            return httpx.Response(200, json={"id": parts[1]})
        if parts[0] == "vector_stores" and len(parts) == 3 and method == "POST":
            file_id = json.loads(request.content)["file_id"]
            self.links.add((parts[1], file_id))
            return httpx.Response(200, json={"id": file_id})
        if parts[0] == "vector_stores" and len(parts) == 4:
            if (parts[1], parts[3]) not in self.links:
                return httpx.Response(404, json={"error": {"message": "No file found"}})
            if method == "DELETE":
                self.links.discard((parts[1], parts[3]))
            return httpx.Response(200, json={"id": parts[3]})
        return httpx.Response(400, json={"error": {"message": f"unexpected {method} {path}"}})

    def writes(self) -> list[tuple[str, str]]:
        return [r for r in self.requests if r[0] != "GET"]


@pytest.fixture
def api():
    return FakeOpenAI()


@pytest.fixture
def queue():
    return CallQueue()


@pytest.fixture
def bridge(queue):
    return TaskBridge(queue, thread_pool=InlinePool())


@pytest.fixture
def client(api):
    return OpenAIClient(api_key="sk-test", base_url="https://api.test/v1", transport=httpx.MockTransport(api))


@pytest.fixture
def service(client, bridge):
    return LinkService(client, bridge)


@pytest.fixture
def doc(tmp_path: Path) -> str:
    path = tmp_path / "guide.txt"
    path.write_text("documentation")
    return str(path)


class TestEnsureLinked:
    def test_fresh_file_creates_everything(self, service, api, queue, doc):
        promise = service.ensure_linked(doc, "", "")
        queue.drain()

        assert promise.value == "vs_1\nfile_1"
        assert api.writes() == [
            ("POST", "/files"),
            ("POST", "/vector_stores"),
            ("POST", "/vector_stores/vs_1/files"),
        ]

    def test_already_linked_file_is_reused(self, service, api, queue, doc):
        api.files.append({"id": "file_9", "filename": "guide.txt", "purpose": "user_data"})
        api.stores.add("vs_9")
        api.links.add(("vs_9", "file_9"))

        promise = service.ensure_linked(doc, "file_9", "vs_9")
        queue.drain()

        assert promise.value == "vs_9\nfile_9"
        assert api.writes() == []

    def test_stale_upload_id_triggers_upload(self, service, api, queue, doc):
        api.stores.add("vs_9")

        promise = service.ensure_linked(doc, "file_gone", "vs_9")
        queue.drain()

        assert promise.value == "vs_9\nfile_1"
        assert ("POST", "/files") in api.writes()

    def test_unknown_vector_store_is_recreated(self, service, api, queue, doc):
        promise = service.ensure_linked(doc, "", "vs_deleted")
        queue.drain()

        assert promise.value == "vs_1\nfile_1"
        assert ("GET", "/vector_stores/vs_deleted") in api.requests

    def test_missing_local_file_resolves_empty(self, service, api, queue, tmp_path):
        promise = service.ensure_linked(str(tmp_path / "nope.txt"), "", "")
        queue.drain()

        assert promise.value == ""
        assert api.requests == []

    def test_server_error_rejects(self, service, api, queue, doc):
        api.fail_upload = True

        promise = service.ensure_linked(doc, "", "")
        queue.drain()

        assert isinstance(promise.error, NetworkError)
        assert str(promise.error) == "error 500: upload failed"


class TestDeletion:
    def test_delete_file(self, service, queue):
        promise = service.delete_file("file_1")
        queue.drain()
        assert promise.value == "file_1 deleted"

    def test_delete_vector_store(self, service, api, queue):
        api.stores.add("vs_1")
        promise = service.delete_vector_store("vs_1")
        queue.drain()

        assert promise.value == "deleted"
        assert "vs_1" not in api.stores

    def test_delete_vector_store_file(self, service, api, queue):
        api.links.add(("vs_1", "file_1"))
        promise = service.delete_vector_store_file("vs_1", "file_1")
        queue.drain()

        assert promise.value == "deleted"
        assert api.links == set()


class TestVectorStoreManager:
    def test_retrieve_empty_id_skips_request(self, client, bridge, api, queue):
        manager = VectorStoreManager(client, bridge)
        promise = manager.retrieve_vector_store_id("  ")
        queue.drain()

        assert promise.value == ""
        assert api.requests == []

    def test_ensure_vector_store_file_reports_existing(self, client, bridge, api, queue):
        api.stores.add("vs_1")
        api.links.add(("vs_1", "file_1"))
        manager = VectorStoreManager(client, bridge)

        promise = manager.ensure_vector_store_file_id("vs_1", "file_1")
        queue.drain()

        assert promise.value == "exists"

    def test_non_404_errors_propagate(self, bridge, queue):
        def handler(request):
            return httpx.Response(401, json={"error": {"message": "Invalid API key"}})

        client = OpenAIClient(api_key="bad", base_url="https://api.test/v1", transport=httpx.MockTransport(handler))
        promise = VectorStoreManager(client, bridge).ensure_vector_store_id("vs_1")
        queue.drain()

        assert isinstance(promise.error, NetworkError)
        assert promise.error.status_code == 401
