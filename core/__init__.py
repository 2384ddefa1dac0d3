# File2Knowledge Desk - Core Package
"""
Core package for File2Knowledge Desk.
This package contains the promise core, the OpenAI client and services,
and JSON persistence, and can be used independently of the UI layer.
"""

from core.config import get_api_key, load_settings
from core.types import (
    ChatSession,
    ChatTurn,
    VectorResourceItem,
    VectorResourceList,
)

__all__ = [
    "get_api_key",
    "load_settings",
    "ChatSession",
    "ChatTurn",
    "VectorResourceItem",
    "VectorResourceList",
]
