"""
Persisted document types.
All types are Pydantic models serialized to the JSON stores.
"""

from pydantic import BaseModel, Field


# ----- Vector Resources -----

class VectorResourceItem(BaseModel):
    """A documentation resource whose files are indexed in one vector store."""
    name: str = ""
    description: str = ""
    image: str = ""
    github: str = ""
    getit: str = ""
    instructions: str = ""
    files: list[str] = Field(default_factory=list)
    file_upload_id: list[str] = Field(
        default_factory=list,
        alias="fileUploadId",
        description="Upload ids parallel to files; shorter while linking is incomplete.",
    )
    vector_store_id: str = Field(default="", alias="vectorStoreId")

    class Config:
        populate_by_name = True

    def get_upload_id(self, index: int) -> str:
        """Upload id for files[index], or an empty string when not linked yet."""
        if 0 <= index < len(self.file_upload_id):
            return self.file_upload_id[index]
        return ""

    def delete_file_pair(self, index: int) -> bool:
        """Remove a file and its upload id (when present) at the same position."""
        if not 0 <= index < len(self.files):
            return False
        del self.files[index]
        if index < len(self.file_upload_id):
            del self.file_upload_id[index]
        return True


class VectorResourceList(BaseModel):
    """All resources plus the currently selected index."""
    item_index: int = Field(default=-1, alias="itemIndex")
    data: list[VectorResourceItem] = Field(default_factory=list)

    class Config:
        populate_by_name = True


# ----- Chat Sessions -----

class ChatTurn(BaseModel):
    """One prompt/response exchange."""
    id: str = Field(default="", description="Remote response id.")
    storage: bool = Field(
        default=False,
        description="Whether the response is stored server side and must be deleted on teardown.",
    )
    prompt: str = ""
    response: str = ""


class ChatSession(BaseModel):
    """A titled conversation made of turns."""
    id: str
    title: str = ""
    created_at: int = Field(default=0, alias="createdAt")
    modified_at: int = Field(default=0, alias="modifiedAt")
    turns: list[ChatTurn] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class ChatSessionList(BaseModel):
    """Every persisted chat session."""
    sessions: list[ChatSession] = Field(default_factory=list)

    def response_ids(self) -> list[str]:
        return [turn.id for session in self.sessions for turn in session.turns if turn.id]
