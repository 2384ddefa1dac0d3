"""ViewModels package for File2Knowledge Desk."""

from ui.viewmodels.chat import NamingPipeline, PromptHandler, SessionManager
from ui.viewmodels.resources import (
    FileLinkPipeline,
    FileUploadController,
    VectorResourceManager,
)

__all__ = [
    "FileLinkPipeline",
    "FileUploadController",
    "NamingPipeline",
    "PromptHandler",
    "SessionManager",
    "VectorResourceManager",
]
