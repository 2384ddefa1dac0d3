"""VectorResourceManager - Owns the resource list and links the selected resource."""

import logging
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QObject, Signal

from core.concurrency import CancellationToken, Promise
from core.constants import SYSTEM_PROMPT_SOURCES, SYSTEM_PROMPT_TEMPLATE
from core.errors import CancelledError, NetworkError
from core.persistence import VectorResourceRepository
from core.protocols import AlertService, LinkServiceProtocol
from core.types import VectorResourceItem, VectorResourceList
from ui.viewmodels.resources.file_link_pipeline import FileLinkPipeline

logger = logging.getLogger(__name__)

_DEFAULT_ENTRIES = (
    (
        "GenAI",
        "Wrapper for OpenAI",
        "https://github.com/MaxiDonkey/DelphiGenAI",
        ["GenAI_documentation.txt"],
    ),
    (
        "MistralAI",
        "Wrapper for MistralAI",
        "https://github.com/MaxiDonkey/DelphiMistralAI",
        ["MistralAI_documentation.txt"],
    ),
    (
        "Anthropic",
        "Wrapper for Anthropic (Claude)",
        "https://github.com/MaxiDonkey/DelphiAnthropic",
        ["Anthropic_documentation.txt"],
    ),
    (
        "Gemini",
        "Wrapper for Gemini",
        "https://github.com/MaxiDonkey/DelphiGemini",
        ["Gemini_documentation.txt"],
    ),
    (
        "file2knowledge",
        "Best practices around the v1/responses endpoint",
        "https://github.com/MaxiDonkey/file2knowledge",
        ["File2knowledgeAI_part4.txt", "GenAI_documentation.txt"],
    ),
)


def default_resources(data_dir: Path) -> VectorResourceList:
    """Seed resource list used when no resource file exists yet.

    Args:
        data_dir: Directory holding the bundled documentation files

    Returns:
        A list with the first resource selected
    """
    items = [
        VectorResourceItem(
            name=name,
            description=description,
            github=github,
            files=[str(Path(data_dir) / file_name) for file_name in files],
        )
        for name, description, github, files in _DEFAULT_ENTRIES
    ]
    return VectorResourceList(item_index=0, data=items)


def build_instructions(item: VectorResourceItem) -> str:
    """System prompt for primary requests made against a resource.

    A resource's own ``instructions`` take precedence over the template.
    """
    if item.instructions.strip():
        return item.instructions.strip()
    description = item.description or item.name
    if not description:
        return ""
    prompt = SYSTEM_PROMPT_TEMPLATE.format(description=description)
    if item.github:
        prompt += SYSTEM_PROMPT_SOURCES.format(github=item.github)
    return prompt


class VectorResourceManager(QObject):
    """Manages the vector resources and the active vector store.

    Signals:
        resources_changed(): Emitted when the list is loaded or edited
        selection_changed(int): Emitted when another resource is selected
        vector_store_changed(str): Emitted when linking yields a vector store id
        link_failed(str): Emitted with the error message when linking fails
    """

    resources_changed = Signal()
    selection_changed = Signal(int)
    vector_store_changed = Signal(str)
    link_failed = Signal(str)

    def __init__(
        self,
        repository: VectorResourceRepository,
        pipeline: FileLinkPipeline,
        link_service: LinkServiceProtocol,
        alerts: AlertService,
        data_dir: Optional[Path] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._repository = repository
        self._pipeline = pipeline
        self._link_service = link_service
        self._alerts = alerts
        self._data_dir = Path(data_dir) if data_dir else Path.cwd() / "data"
        self._vector_store_id = ""
        self._cancellation: Optional[CancellationToken] = None

    @property
    def resources(self) -> list[VectorResourceItem]:
        return self._repository.items

    @property
    def item_index(self) -> int:
        return self._repository.document.item_index

    @property
    def current(self) -> Optional[VectorResourceItem]:
        """Get the selected resource."""
        return self._repository.get(self.item_index)

    @property
    def vector_store_id(self) -> str:
        """Vector store id of the last successful link."""
        return self._vector_store_id

    @property
    def instructions(self) -> str:
        """Instructions for primary requests, built from the selected resource."""
        current = self.current
        return build_instructions(current) if current else ""

    def load(self) -> None:
        """Load resources from disk, seeding defaults on first run."""
        if self._repository.exists():
            self._repository.load()
        else:
            logger.info("No resource file found, seeding defaults")
            self._repository.replace(default_resources(self._data_dir))
            self._repository.save()
        current = self.current
        self._vector_store_id = current.vector_store_id if current else ""
        self.resources_changed.emit()

    def save(self) -> None:
        self._repository.save()

    def select(self, index: int) -> None:
        """Select a resource.

        Args:
            index: Position in the resource list
        """
        if self._repository.get(index) is None:
            logger.warning("Resource index %d out of range", index)
            return
        if index == self.item_index:
            return
        self.cancel_link()
        self._repository.document.item_index = index
        self._repository.save()
        self.selection_changed.emit(index)

    def remove_file(self, file_index: int) -> list[Promise[str]]:
        """Remove one file of the selected resource and its remote copies.

        Args:
            file_index: Position in the selected resource's file list

        Returns:
            Promises of the remote deletions (empty when the file was never linked)
        """
        item = self.current
        if item is None:
            return []
        upload_id = item.get_upload_id(file_index)
        if not item.delete_file_pair(file_index):
            logger.warning("File index %d out of range for %r", file_index, item.name)
            return []
        self._repository.save()
        self.resources_changed.emit()
        if not upload_id:
            return []

        def on_failed(error: BaseException) -> str:
            logger.warning("Could not delete upload %s: %s", upload_id, error)
            return ""

        cleanups = []
        if item.vector_store_id:
            cleanups.append(
                self._link_service.delete_vector_store_file(item.vector_store_id, upload_id).catch(on_failed)
            )
        cleanups.append(self._link_service.delete_file(upload_id).catch(on_failed))
        return cleanups

    def cancel_link(self) -> None:
        if self._cancellation is not None:
            self._cancellation.cancel()
            self._cancellation = None

    def link_current(self) -> Promise[str]:
        """Link the selected resource's files and publish its vector store.

        Network failures are shown to the user and reported through
        ``link_failed``; cancellation is silent. The returned promise always
        fulfills, with '' when nothing was linked.
        """
        item = self.current
        if item is None:
            self._alerts.show_warning("No vector resource selected")
            return Promise.resolved("")

        self.cancel_link()
        token = CancellationToken()
        self._cancellation = token

        def on_linked(vector_store_id: str) -> str:
            if self._cancellation is token:
                self._cancellation = None
            if vector_store_id:
                self._vector_store_id = vector_store_id
                self.vector_store_changed.emit(vector_store_id)
            return vector_store_id

        def on_failed(error: BaseException) -> str:
            if self._cancellation is token:
                self._cancellation = None
            if isinstance(error, CancelledError):
                logger.info("Linking of %r cancelled", item.name)
                return ""
            message = str(error)
            if isinstance(error, NetworkError):
                logger.error("Linking of %r failed: %s", item.name, message)
            else:
                logger.exception("Unexpected error while linking %r", item.name, exc_info=error)
            self._alerts.show_error(message)
            self.link_failed.emit(message)
            return ""

        return self._pipeline.link(item, token).then(on_linked, on_failed)

    def delete_resource(self, index: int) -> Promise[str]:
        """Remove a resource and tear down its remote vector store.

        Args:
            index: Position in the resource list

        Returns:
            Promise resolving when the vector store is deleted ('' when there was none)
        """
        item = self._repository.get(index)
        if item is None:
            return Promise.resolved("")

        document = self._repository.document
        del document.data[index]
        if document.item_index >= len(document.data) or document.item_index > index:
            document.item_index = document.item_index - 1 if document.data else -1
        self._repository.save()
        self.resources_changed.emit()

        if not item.vector_store_id:
            return Promise.resolved("")
        if item.vector_store_id == self._vector_store_id:
            self._vector_store_id = ""

        def on_failed(error: BaseException) -> str:
            logger.warning("Could not delete vector store %s: %s", item.vector_store_id, error)
            self._alerts.show_error(str(error))
            return ""

        return self._link_service.delete_vector_store(item.vector_store_id).catch(on_failed)
