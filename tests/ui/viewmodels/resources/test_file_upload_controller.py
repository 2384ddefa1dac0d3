"""Unit tests for FileUploadController."""

from unittest.mock import Mock

import pytest

from core.concurrency import CallQueue, Promise
from core.types import VectorResourceItem
from ui.viewmodels.resources.file_upload_controller import FileUploadController


@pytest.fixture
def queue():
    return CallQueue()


@pytest.fixture
def repository():
    return Mock()


@pytest.fixture
def link_service(queue):
    service = Mock()
    service.delete_vector_store_file.side_effect = lambda store, file_id: Promise.resolved("deleted", dispatcher=queue)
    service.delete_file.side_effect = lambda file_id: Promise.resolved(f"{file_id} deleted", dispatcher=queue)
    return service


@pytest.fixture
def controller(repository, link_service):
    return FileUploadController(repository, link_service)


@pytest.fixture
def item():
    return VectorResourceItem(
        name="GenAI",
        files=["a.txt", "b.txt", "c.txt"],
        file_upload_id=["file_a", "file_b"],
        vector_store_id="vs_1",
    )


def test_begin_edit_snapshots_files(controller, item):
    controller.begin_edit(item)

    assert controller.draft_files == ["a.txt", "b.txt", "c.txt"]
    assert controller.draft_count == 3
    assert not controller.is_dirty


def test_add_rejects_duplicates_and_overflow(controller, item):
    controller.begin_edit(item)

    assert not controller.add_file("a.txt")
    assert controller.add_file("d.txt")
    assert controller.add_file("e.txt")
    assert not controller.add_file("f.txt")
    assert controller.draft_count == 5
    assert controller.is_dirty


def test_cancel_edit_restores_snapshot(controller, item):
    controller.begin_edit(item)
    controller.remove_file("a.txt")

    controller.cancel_edit()

    assert controller.draft_files == ["a.txt", "b.txt", "c.txt"]


def test_save_deletes_removed_linked_files(controller, item, link_service, repository, queue):
    controller.begin_edit(item)
    assert controller.remove_file("b.txt")
    assert controller.remove_file("c.txt")
    assert not controller.remove_file("missing.txt")
    controller.add_file("d.txt")

    cleanups = controller.save_changes()
    queue.drain()

    link_service.delete_vector_store_file.assert_called_once_with("vs_1", "file_b")
    link_service.delete_file.assert_called_once_with("file_b")
    assert [p.value for p in cleanups] == ["deleted", "file_b deleted"]
    assert item.files == ["a.txt", "d.txt"]
    assert item.file_upload_id == ["file_a"]
    repository.save.assert_called_once()
    assert not controller.is_dirty


def test_upload_ids_stop_at_first_unlinked_file(controller, item):
    controller.begin_edit(item)
    controller.remove_file("a.txt")

    controller.save_changes()

    # b.txt keeps its id; c.txt was never linked.
    assert item.files == ["b.txt", "c.txt"]
    assert item.file_upload_id == ["file_b"]


def test_cleanup_failure_is_logged_not_raised(controller, item, link_service, queue):
    link_service.delete_file.side_effect = lambda file_id: Promise.rejected(RuntimeError("gone"), dispatcher=queue)
    controller.begin_edit(item)
    controller.remove_file("a.txt")

    cleanups = controller.save_changes()
    queue.drain()

    assert [p.value for p in cleanups] == ["deleted", ""]


def test_save_requires_begin_edit(controller):
    with pytest.raises(RuntimeError):
        controller.save_changes()
