"""
Main entry point for File2Knowledge Desk.

Loads the resources and chat sessions, links the selected resource's files to
its vector store and, when a prompt is given on the command line, answers it
against that store before exiting.
"""

import logging
import sys

from PySide6.QtWidgets import QApplication

from core.config import load_settings
from core.constants import APP_TITLE
from core.errors import Result
from core.infrastructure.logging_config import configure_logging
from ui.bootstrap import build_context, purge_orphan_responses

logger = logging.getLogger(__name__)


def main():
    """Main entry point for the application."""
    settings = load_settings()
    log_path = configure_logging(settings.data_dir / "logs")
    logger.info("Logging to %s", log_path)

    app = QApplication(sys.argv)
    app.setApplicationName(APP_TITLE)
    app.setOrganizationName("File2Knowledge")

    context = build_context(settings)
    context.resource_manager.load()
    context.chat_repository.load()
    context.session_manager.new_session()
    purge_orphan_responses(context)

    prompt = " ".join(sys.argv[1:]).strip()

    def report(result: Result) -> None:
        if result.ok:
            print(result.value)
        else:
            logger.error("Run failed: %s", result.error)

    def ask(vector_store_id: str):
        logger.info("Active vector store: %s", vector_store_id or "<none>")
        if not prompt:
            return vector_store_id
        return context.prompt_handler.submit(prompt)

    def shutdown(_) -> None:
        context.close()
        app.quit()

    (
        context.resource_manager.link_current()
        .then(ask)
        .settle()
        .then(report)
        .then(shutdown)
    )

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
