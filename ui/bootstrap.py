"""
Application wiring.

Builds every service and viewmodel once, on the UI thread, and installs the
Qt dispatcher as the process-wide default so that promise continuations run
on the main thread.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from core.concurrency import Promise, TaskBridge, UiDispatcher, set_default_dispatcher
from core.config import AppSettings, load_settings
from core.errors import NetworkError
from core.llm import OpenAIClient
from core.persistence import ChatSessionRepository, VectorResourceRepository
from core.protocols import AlertService
from core.services import ChatService, LinkService, ResponseIdTracker
from ui.services.alert_service import MessageBoxAlertService
from ui.viewmodels.chat import NamingPipeline, PromptHandler, SessionManager
from ui.viewmodels.resources import FileLinkPipeline, FileUploadController, VectorResourceManager

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: AppSettings
    dispatcher: UiDispatcher
    bridge: TaskBridge
    client: OpenAIClient
    alerts: AlertService
    link_service: LinkService
    resource_repository: VectorResourceRepository
    chat_repository: ChatSessionRepository
    tracker: ResponseIdTracker
    resource_manager: VectorResourceManager
    upload_controller: FileUploadController
    chat_service: ChatService
    naming_pipeline: NamingPipeline
    prompt_handler: PromptHandler
    session_manager: SessionManager

    def close(self) -> None:
        self.resource_manager.cancel_link()
        self.bridge.wait_for_done(5000)
        self.client.close()


def build_context(
    settings: Optional[AppSettings] = None,
    alerts: Optional[AlertService] = None,
) -> AppContext:
    """Create the application services. Must be called on the Qt main thread."""
    settings = settings or load_settings()
    dispatcher = UiDispatcher()
    set_default_dispatcher(dispatcher)
    bridge = TaskBridge(dispatcher)
    client = OpenAIClient(base_url=settings.base_url, timeout=settings.timeout)
    alerts = alerts or MessageBoxAlertService()

    link_service = LinkService(client, bridge)
    resource_repository = VectorResourceRepository(settings.resources_path)
    chat_repository = ChatSessionRepository(settings.chat_sessions_path)
    tracker = ResponseIdTracker(settings.response_log_path)

    pipeline = FileLinkPipeline(link_service, resource_repository, alerts, dispatcher=dispatcher)
    resource_manager = VectorResourceManager(
        resource_repository,
        pipeline,
        link_service,
        alerts,
        data_dir=settings.data_dir / "data",
    )
    upload_controller = FileUploadController(resource_repository, link_service)

    chat_service = ChatService(
        client,
        bridge,
        chat_repository,
        tracker,
        settings,
        vector_store_provider=lambda: resource_manager.vector_store_id,
        instructions_provider=lambda: resource_manager.instructions,
    )
    naming_pipeline = NamingPipeline(chat_service, chat_repository)
    prompt_handler = PromptHandler(chat_service, chat_repository, naming_pipeline, alerts)
    session_manager = SessionManager(chat_repository, tracker, link_service)

    return AppContext(
        settings=settings,
        dispatcher=dispatcher,
        bridge=bridge,
        client=client,
        alerts=alerts,
        link_service=link_service,
        resource_repository=resource_repository,
        chat_repository=chat_repository,
        tracker=tracker,
        resource_manager=resource_manager,
        upload_controller=upload_controller,
        chat_service=chat_service,
        naming_pipeline=naming_pipeline,
        prompt_handler=prompt_handler,
        session_manager=session_manager,
    )


def purge_orphan_responses(context: AppContext) -> list[Promise[str]]:
    """Delete logged responses that no chat session references any more."""
    orphans = context.tracker.get_orphans(context.chat_repository.response_ids())
    if orphans:
        logger.info("Deleting %d orphan response(s)", len(orphans))

    def forget(response_id: str):
        def on_deleted(result: str) -> str:
            context.tracker.remove_id(response_id)
            return result

        def on_failed(error: BaseException) -> str:
            # Already gone server side.
            if isinstance(error, NetworkError) and error.is_not_found:
                context.tracker.remove_id(response_id)
            else:
                logger.warning("Orphan cleanup of %s failed: %s", response_id, error)
            return ""

        return on_deleted, on_failed

    return [
        context.link_service.delete_response(response_id).then(*forget(response_id))
        for response_id in orphans
    ]
