"""Chat subsystem - Prompt submission, session switching and naming."""

from .naming_pipeline import NamingPipeline, needs_naming
from .prompt_handler import PromptHandler
from .session_manager import SessionManager

__all__ = [
    "NamingPipeline",
    "PromptHandler",
    "SessionManager",
    "needs_naming",
]
