"""Vector resource repository implementation."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from core.types import VectorResourceItem, VectorResourceList
from .json_store import JsonDocumentStore


class VectorResourceRepository:
    """JSON-backed list of vector resources, loaded and saved as a whole."""

    def __init__(self, path: Path):
        self._store: JsonDocumentStore[VectorResourceList] = JsonDocumentStore(path, VectorResourceList)
        self._document = VectorResourceList()

    @property
    def document(self) -> VectorResourceList:
        return self._document

    @property
    def items(self) -> list[VectorResourceItem]:
        return self._document.data

    def exists(self) -> bool:
        return self._store.exists()

    def load(self) -> VectorResourceList:
        self._document = self._store.load()
        return self._document

    def save(self) -> None:
        self._store.save(self._document)

    def replace(self, document: VectorResourceList) -> None:
        self._document = document

    def get(self, index: int) -> Optional[VectorResourceItem]:
        if 0 <= index < len(self._document.data):
            return self._document.data[index]
        return None
