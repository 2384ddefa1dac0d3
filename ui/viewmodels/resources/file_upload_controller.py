"""FileUploadController - Snapshot/draft editing of a resource's file list."""

import logging
from typing import Optional

from core.concurrency import Promise
from core.constants import MAX_RESOURCE_FILES
from core.persistence import VectorResourceRepository
from core.protocols import LinkServiceProtocol
from core.types import VectorResourceItem

logger = logging.getLogger(__name__)


def _log_cleanup_failure(error: BaseException) -> str:
    logger.warning("Remote cleanup failed: %s", error)
    return ""


class FileUploadController:
    """Tracks edits to a resource's files before they are committed.

    ``begin_edit`` captures a snapshot of the file -> upload id mapping and a
    draft copy the editor mutates. ``save_changes`` writes the draft back and
    removes the remote copies of files that were dropped from the draft.
    """

    def __init__(self, repository: VectorResourceRepository, link_service: LinkServiceProtocol):
        self._repository = repository
        self._link_service = link_service
        self._item: Optional[VectorResourceItem] = None
        self._snapshot: dict[str, str] = {}
        self._draft: dict[str, str] = {}

    @property
    def draft_count(self) -> int:
        return len(self._draft)

    @property
    def draft_files(self) -> list[str]:
        return list(self._draft)

    @property
    def is_dirty(self) -> bool:
        return list(self._draft.items()) != list(self._snapshot.items())

    def begin_edit(self, item: VectorResourceItem) -> None:
        self._item = item
        self._snapshot = {
            file_name: item.get_upload_id(index) for index, file_name in enumerate(item.files)
        }
        self._draft = dict(self._snapshot)

    def add_file(self, file_name: str) -> bool:
        """Add a file to the draft.

        Returns:
            False when the file is already listed or the draft is full
        """
        if file_name in self._draft:
            return False
        if len(self._draft) >= MAX_RESOURCE_FILES:
            logger.warning("Cannot add %s: at most %d files per resource", file_name, MAX_RESOURCE_FILES)
            return False
        self._draft[file_name] = ""
        return True

    def remove_file(self, file_name: str) -> bool:
        if file_name not in self._draft:
            return False
        del self._draft[file_name]
        return True

    def cancel_edit(self) -> None:
        self._draft = dict(self._snapshot)

    def removed_upload_ids(self) -> list[str]:
        """Upload ids of snapshot files that are no longer in the draft."""
        return [
            upload_id
            for file_name, upload_id in self._snapshot.items()
            if file_name not in self._draft and upload_id
        ]

    def save_changes(self) -> list[Promise[str]]:
        """Commit the draft onto the resource and persist it.

        Upload ids are kept only for the leading files that were already
        linked; files after the first unlinked one get linked again on the
        next run.

        Returns:
            Promises of the remote deletions issued for removed files
        """
        if self._item is None:
            raise RuntimeError("save_changes called before begin_edit")

        item = self._item
        cleanups: list[Promise[str]] = []
        for upload_id in self.removed_upload_ids():
            if item.vector_store_id:
                cleanups.append(
                    self._link_service.delete_vector_store_file(item.vector_store_id, upload_id)
                    .catch(_log_cleanup_failure)
                )
            cleanups.append(self._link_service.delete_file(upload_id).catch(_log_cleanup_failure))

        upload_ids: list[str] = []
        for upload_id in self._draft.values():
            if not upload_id:
                break
            upload_ids.append(upload_id)

        item.files = list(self._draft)
        item.file_upload_id = upload_ids
        self._repository.save()
        self._snapshot = dict(self._draft)
        return cleanups
