"""Ephemeral domain models passed between pipeline steps."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional


@dataclass(frozen=True)
class LinkStep:
    """One iteration of ensuring a single file is linked to a vector store."""

    index: int
    file_name: str
    vector_store_id: str
    existing_upload_id: Optional[str] = None


@dataclass(frozen=True)
class LinkResponse:
    """Parsed form of the link service's ``"<vectorStoreId>\\n<uploadId>"`` reply."""

    vector_store_id: str
    upload_id: Optional[str] = None

    @classmethod
    def parse(cls, raw: str) -> "LinkResponse":
        """Split on the first newline only."""
        head, sep, tail = (raw or "").partition("\n")
        return cls(vector_store_id=head, upload_id=tail if sep else None)

    def encode(self) -> str:
        if self.upload_id is None:
            return self.vector_store_id
        return f"{self.vector_store_id}\n{self.upload_id}"


@dataclass(frozen=True)
class LinkAccumulator:
    """State folded through the linking chain, one step at a time."""

    vector_store_id: str
    upload_ids: tuple[str, ...] = field(default_factory=tuple)
    next_index: Optional[int] = 0

    def absorb(self, step: LinkStep, response: LinkResponse, file_count: int) -> "LinkAccumulator":
        """Fold one step's response and compute the next index to process.

        The first step's (non-empty) vector store id is authoritative. A reply
        without an upload id, or running out of files, ends the chain.
        """
        vector_store_id = self.vector_store_id
        if step.index == 0 and response.vector_store_id:
            vector_store_id = response.vector_store_id
        upload_ids = self.upload_ids
        if response.upload_id is not None:
            upload_ids = upload_ids + (response.upload_id,)
        next_index: Optional[int] = step.index + 1
        if response.upload_id is None or next_index >= file_count:
            next_index = None
        return replace(
            self,
            vector_store_id=vector_store_id,
            upload_ids=upload_ids,
            next_index=next_index,
        )


@dataclass(frozen=True)
class NamingContext:
    """Inputs and output of the chat auto-naming hop."""

    prompt: str
    response: str
    naming_prompt: str = ""
    title: str = ""

    @classmethod
    def create(cls, prompt: str, response: str) -> "NamingContext":
        return cls(
            prompt=prompt,
            response=response,
            naming_prompt=f"Question: {prompt}\nResponse: {response}",
        )

    def with_title(self, title: str) -> "NamingContext":
        return replace(self, title=title.strip())
