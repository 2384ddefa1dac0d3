"""Persistence package exports."""

from .json_store import JsonDocumentStore
from .resource_repository import VectorResourceRepository
from .chat_repository import ChatSessionRepository

__all__ = [
    "JsonDocumentStore",
    "VectorResourceRepository",
    "ChatSessionRepository",
]
