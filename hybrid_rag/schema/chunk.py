"""Common schema for chunks: what segmentation produces and what the store keeps."""
from typing import Literal

from pydantic import BaseModel, Field

ChunkKind = Literal["prose", "code", "sql", "list"]


class Chunk(BaseModel):
    """A retrievable unit of text from one source, immutable once ingested."""
    source_id: str  # filename or logical document id
    index: int  # ordinal within its source
    text: str
    kind: ChunkKind | None = None
    metadata: dict = Field(default_factory=dict)

    @property
    def length(self) -> int:
        return len(self.text)


class StoredChunk(Chunk):
    """Chunk as read back from a vector store, with its decoded embeddings."""
    id: int
    content_vector: list[float] = Field(default_factory=list)
    intent_vectors: list[list[float]] = Field(default_factory=list)
    questions: list[str] = Field(default_factory=list)
