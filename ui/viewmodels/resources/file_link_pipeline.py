"""FileLinkPipeline - Sequentially links a resource's files to one vector store."""

import logging
import os
from typing import Callable, Optional

from core.concurrency import CancellationToken, Dispatcher, Promise
from core.constants import MAX_RESOURCE_FILES
from core.errors import ValidationError
from core.models import LinkAccumulator, LinkResponse, LinkStep
from core.persistence import VectorResourceRepository
from core.protocols import AlertService, LinkServiceProtocol
from core.types import VectorResourceItem

logger = logging.getLogger(__name__)


class FileLinkPipeline:
    """Ensures every file of a resource is uploaded and attached to its vector store.

    Files are processed one at a time, in list order. The vector store id
    returned by the first step is authoritative for the rest of the chain, and
    the collected upload ids are written back onto the resource and persisted
    once the chain ends.
    """

    def __init__(
        self,
        link_service: LinkServiceProtocol,
        repository: VectorResourceRepository,
        alerts: AlertService,
        file_exists: Callable[[str], bool] = os.path.isfile,
        dispatcher: Optional[Dispatcher] = None,
    ):
        """Initialize the pipeline.

        Args:
            link_service: Service performing the per-file upload and link
            repository: Repository persisting the resource list
            alerts: Alert service for validation warnings
            file_exists: Predicate telling whether a local file exists
            dispatcher: Dispatcher for the pipeline's own promises
        """
        self._link_service = link_service
        self._repository = repository
        self._alerts = alerts
        self._file_exists = file_exists
        self._dispatcher = dispatcher

    def validate(self, item: VectorResourceItem) -> None:
        """Raise ValidationError when the resource cannot be linked."""
        if not item.files:
            raise ValidationError(f'No files exist for vector store "{item.name}"')
        if len(item.files) > MAX_RESOURCE_FILES:
            raise ValidationError(
                f'Vector store "{item.name}" has {len(item.files)} files; '
                f"at most {MAX_RESOURCE_FILES} are supported"
            )
        for file_name in item.files:
            if not self._file_exists(file_name):
                raise ValidationError(
                    f'File "{file_name}" not found\nvector store not valid for "{item.name}"'
                )

    def link(
        self,
        item: VectorResourceItem,
        cancellation: Optional[CancellationToken] = None,
    ) -> Promise[str]:
        """Link every file of ``item``.

        Args:
            item: Resource whose files are linked; updated in place
            cancellation: Token checked before each step

        Returns:
            Promise of the final vector store id, or '' when validation fails
        """
        try:
            self.validate(item)
        except ValidationError as exc:
            logger.warning("%s", exc)
            self._alerts.show_warning(str(exc))
            return Promise.resolved("", dispatcher=self._dispatcher)

        file_count = len(item.files)

        def check_cancelled() -> None:
            if cancellation is not None:
                cancellation.raise_if_cancelled()

        def run_step(acc: LinkAccumulator) -> Promise[LinkAccumulator]:
            check_cancelled()
            index = acc.next_index
            step = LinkStep(
                index=index,
                file_name=item.files[index],
                vector_store_id=acc.vector_store_id,
                existing_upload_id=item.get_upload_id(index) or None,
            )
            logger.debug("Linking %s (step %d)", step.file_name, step.index)
            return self._link_service.ensure_linked(
                step.file_name,
                step.existing_upload_id or "",
                step.vector_store_id,
            ).then(lambda raw: advance(acc, step, raw))

        def advance(acc: LinkAccumulator, step: LinkStep, raw: str):
            check_cancelled()
            acc = acc.absorb(step, LinkResponse.parse(raw), file_count)
            if step.index == 0:
                item.vector_store_id = acc.vector_store_id
            if acc.next_index is None:
                return acc
            return run_step(acc)

        def finish(acc: LinkAccumulator) -> str:
            item.file_upload_id = list(acc.upload_ids)
            item.vector_store_id = acc.vector_store_id
            self._repository.save()
            logger.info(
                "Linked %d file(s) of %r to vector store %s",
                len(acc.upload_ids), item.name, acc.vector_store_id,
            )
            return acc.vector_store_id

        initial = LinkAccumulator(vector_store_id=item.vector_store_id)
        return Promise.resolved(initial, dispatcher=self._dispatcher).then(run_step).then(finish)
