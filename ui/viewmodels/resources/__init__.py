"""Resources subsystem - Vector resources and their file links."""

from .file_link_pipeline import FileLinkPipeline
from .file_upload_controller import FileUploadController
from .resource_manager import VectorResourceManager, default_resources

__all__ = [
    "FileLinkPipeline",
    "FileUploadController",
    "VectorResourceManager",
    "default_resources",
]
