"""Unit tests for VectorResourceManager."""

from pathlib import Path
from unittest.mock import Mock

import pytest

from core.concurrency import CallQueue, Promise, set_default_dispatcher
from core.config import AppSettings
from core.errors import CancelledError, NetworkError
from core.persistence import VectorResourceRepository
from core.services import ChatService
from core.types import VectorResourceItem, VectorResourceList
from ui.viewmodels.resources.resource_manager import (
    VectorResourceManager,
    build_instructions,
    default_resources,
)


@pytest.fixture
def queue():
    """Install a drainable default dispatcher for the test."""
    queue = CallQueue()
    previous = set_default_dispatcher(queue)
    yield queue
    set_default_dispatcher(previous)


@pytest.fixture
def repository(tmp_path: Path):
    return VectorResourceRepository(tmp_path / "VectorResources.json")


@pytest.fixture
def pipeline():
    return Mock()


@pytest.fixture
def link_service():
    return Mock()


@pytest.fixture
def alerts():
    return Mock()


@pytest.fixture
def manager(qtbot, repository, pipeline, link_service, alerts, tmp_path):
    return VectorResourceManager(repository, pipeline, link_service, alerts, data_dir=tmp_path / "data")


def seed(repository, count=3, item_index=0):
    repository.replace(
        VectorResourceList(
            item_index=item_index,
            data=[
                VectorResourceItem(name=f"R{i}", files=[f"r{i}.txt"], vector_store_id=f"vs_{i}")
                for i in range(count)
            ],
        )
    )
    repository.save()


class TestLoad:
    def test_first_run_seeds_defaults(self, manager, repository, tmp_path):
        changed = []
        manager.resources_changed.connect(lambda: changed.append(True))

        manager.load()

        assert repository.exists()
        assert manager.item_index == 0
        assert manager.current.name == "GenAI"
        assert manager.current.files == [str(tmp_path / "data" / "GenAI_documentation.txt")]
        assert changed == [True]

    def test_existing_file_is_loaded(self, manager, repository):
        seed(repository, item_index=1)

        manager.load()

        assert manager.current.name == "R1"
        assert manager.vector_store_id == "vs_1"


def test_default_resources_have_at_most_five_files(tmp_path):
    resources = default_resources(tmp_path)
    assert resources.item_index == 0
    assert all(1 <= len(item.files) <= 5 for item in resources.data)


class TestSelect:
    def test_select_persists_and_emits(self, manager, repository):
        seed(repository)
        manager.load()
        selected = []
        manager.selection_changed.connect(selected.append)

        manager.select(2)

        assert selected == [2]
        assert VectorResourceRepository(repository._store.path).load().item_index == 2

    def test_select_out_of_range_is_ignored(self, manager, repository):
        seed(repository)
        manager.load()

        manager.select(7)

        assert manager.item_index == 0


class TestLinkCurrent:
    def test_success_emits_vector_store(self, manager, repository, pipeline, queue):
        seed(repository)
        manager.load()
        pipeline.link.return_value = Promise.resolved("vs_linked", dispatcher=queue)
        changed = []
        manager.vector_store_changed.connect(changed.append)

        promise = manager.link_current()
        queue.drain()

        assert promise.value == "vs_linked"
        assert changed == ["vs_linked"]
        assert manager.vector_store_id == "vs_linked"
        item, token = pipeline.link.call_args.args
        assert item is manager.current
        assert not token.is_cancelled

    def test_network_error_is_shown_once(self, manager, repository, pipeline, alerts, queue):
        seed(repository)
        manager.load()
        pipeline.link.return_value = Promise.rejected(
            NetworkError("error 401: Invalid API key", status_code=401), dispatcher=queue
        )
        failures = []
        manager.link_failed.connect(failures.append)

        promise = manager.link_current()
        queue.drain()

        assert promise.value == ""
        alerts.show_error.assert_called_once_with("error 401: Invalid API key")
        assert failures == ["error 401: Invalid API key"]

    def test_cancellation_is_silent(self, manager, repository, pipeline, alerts, queue):
        seed(repository)
        manager.load()
        pipeline.link.return_value = Promise.rejected(CancelledError(), dispatcher=queue)
        failures = []
        manager.link_failed.connect(failures.append)

        promise = manager.link_current()
        queue.drain()

        assert promise.value == ""
        alerts.show_error.assert_not_called()
        assert failures == []

    def test_validation_result_does_not_emit(self, manager, repository, pipeline, queue):
        seed(repository)
        manager.load()
        pipeline.link.return_value = Promise.resolved("", dispatcher=queue)
        changed = []
        manager.vector_store_changed.connect(changed.append)

        manager.link_current()
        queue.drain()

        assert changed == []

    def test_new_link_cancels_previous(self, manager, repository, pipeline, queue):
        seed(repository)
        manager.load()
        pipeline.link.return_value = Promise(dispatcher=queue)

        manager.link_current()
        first_token = pipeline.link.call_args.args[1]
        manager.link_current()

        assert first_token.is_cancelled

    def test_no_selection_warns(self, manager, repository, pipeline, alerts):
        repository.replace(VectorResourceList())

        promise = manager.link_current()

        assert promise.value == ""
        alerts.show_warning.assert_called_once()
        pipeline.link.assert_not_called()


class TestDeleteResource:
    def test_delete_tears_down_vector_store(self, manager, repository, link_service, queue):
        seed(repository, item_index=2)
        manager.load()
        link_service.delete_vector_store.return_value = Promise.resolved("deleted", dispatcher=queue)

        promise = manager.delete_resource(0)
        queue.drain()

        assert promise.value == "deleted"
        link_service.delete_vector_store.assert_called_once_with("vs_0")
        assert [item.name for item in manager.resources] == ["R1", "R2"]
        assert manager.current.name == "R2"

    def test_delete_selected_last_item(self, manager, repository, link_service, queue):
        seed(repository, count=2, item_index=1)
        manager.load()
        link_service.delete_vector_store.return_value = Promise.resolved("deleted", dispatcher=queue)

        manager.delete_resource(1)

        assert manager.item_index == 0

    def test_delete_without_vector_store(self, manager, repository, link_service):
        repository.replace(VectorResourceList(item_index=0, data=[VectorResourceItem(name="Local")]))

        promise = manager.delete_resource(0)

        assert promise.value == ""
        link_service.delete_vector_store.assert_not_called()
        assert manager.item_index == -1

    def test_teardown_failure_is_reported(self, manager, repository, link_service, alerts, queue):
        seed(repository)
        manager.load()
        link_service.delete_vector_store.return_value = Promise.rejected(
            NetworkError("error 500: down", status_code=500), dispatcher=queue
        )

        promise = manager.delete_resource(1)
        queue.drain()

        assert promise.value == ""
        alerts.show_error.assert_called_once_with("error 500: down")


class TestInstructions:
    def test_built_from_description_and_github(self):
        item = VectorResourceItem(name="GenAI", description="Wrapper for OpenAI", github="https://github.com/x/genai")

        prompt = build_instructions(item)

        assert "Wrapper for OpenAI" in prompt
        assert prompt.endswith("The project sources are at https://github.com/x/genai.")

    def test_resource_instructions_take_precedence(self):
        item = VectorResourceItem(name="GenAI", description="Wrapper", instructions="  Answer in French.  ")

        assert build_instructions(item) == "Answer in French."

    def test_request_instructions_follow_selection(self, manager, repository, tmp_path):
        repository.replace(
            VectorResourceList(
                item_index=0,
                data=[
                    VectorResourceItem(name="GenAI", description="Wrapper for OpenAI"),
                    VectorResourceItem(name="Gemini", description="Wrapper for Gemini"),
                ],
            )
        )
        repository.save()
        manager.load()
        service = ChatService(
            Mock(),
            Mock(),
            Mock(),
            Mock(),
            AppSettings(data_dir=tmp_path, model="gpt-test"),
            instructions_provider=lambda: manager.instructions,
        )

        assert "Wrapper for OpenAI" in service.build_request("Q")["instructions"]
        manager.select(1)
        assert "Wrapper for Gemini" in service.build_request("Q")["instructions"]

    def test_no_selection_has_no_instructions(self, manager, repository):
        repository.replace(VectorResourceList())

        assert manager.instructions == ""


class TestRemoveFile:
    @pytest.fixture
    def linked(self, manager, repository, link_service, queue):
        repository.replace(
            VectorResourceList(
                item_index=0,
                data=[
                    VectorResourceItem(
                        name="R",
                        files=["a.txt", "b.txt", "c.txt"],
                        file_upload_id=["file_a", "file_b"],
                        vector_store_id="vs_1",
                    )
                ],
            )
        )
        repository.save()
        manager.load()
        link_service.delete_vector_store_file.return_value = Promise.resolved("detached", dispatcher=queue)
        link_service.delete_file.return_value = Promise.resolved("deleted", dispatcher=queue)
        return manager.current

    def test_removes_pair_and_remote_copies(self, manager, linked, link_service, repository, queue):
        cleanups = manager.remove_file(0)
        queue.drain()

        assert linked.files == ["b.txt", "c.txt"]
        assert linked.file_upload_id == ["file_b"]
        link_service.delete_vector_store_file.assert_called_once_with("vs_1", "file_a")
        link_service.delete_file.assert_called_once_with("file_a")
        assert [p.value for p in cleanups] == ["detached", "deleted"]
        assert VectorResourceRepository(repository._store.path).load().data[0].files == ["b.txt", "c.txt"]

    def test_unlinked_file_needs_no_remote_cleanup(self, manager, linked, link_service):
        assert manager.remove_file(2) == []

        assert linked.files == ["a.txt", "b.txt"]
        assert linked.file_upload_id == ["file_a", "file_b"]
        link_service.delete_file.assert_not_called()

    def test_out_of_range_is_ignored(self, manager, linked):
        assert manager.remove_file(9) == []
        assert len(linked.files) == 3
