"""Services package: OpenAI-backed file, vector store and chat operations."""

from .file_store import FileStoreManager
from .vector_store import VectorStoreManager
from .link_service import LinkService
from .response_tracker import ResponseIdTracker
from .chat_service import ChatService

__all__ = [
    "FileStoreManager",
    "VectorStoreManager",
    "LinkService",
    "ResponseIdTracker",
    "ChatService",
]
