"""JSON file storage for pydantic documents."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Generic, Type, TypeVar

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class JsonDocumentStore(Generic[M]):
    """Load and save one pydantic document as a JSON file.

    Saving writes a sibling temporary file and renames it over the target so a
    crash never leaves a half-written document.
    """

    def __init__(self, path: Path, model_type: Type[M]):
        self._path = Path(path)
        self._model_type = model_type

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def load(self) -> M:
        """Read the document, or return an empty one when the file is missing or invalid."""
        if not self.exists():
            return self._model_type()
        try:
            return self._model_type.model_validate_json(self._path.read_text(encoding="utf-8"))
        except ValidationError as exc:
            logger.error("Invalid JSON document %s: %s", self._path, exc)
            return self._model_type()

    def save(self, document: M) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        tmp_path.write_text(
            document.model_dump_json(by_alias=True, indent=2),
            encoding="utf-8",
        )
        os.replace(tmp_path, self._path)
        logger.debug("Saved %s", self._path)
