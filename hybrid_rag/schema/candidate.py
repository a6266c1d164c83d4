"""Scored reference to a stored chunk, alive for one query."""
from pydantic import BaseModel, Field

from .chunk import ChunkKind


class Candidate(BaseModel):
    """Retrieval candidate. `similarity` is the working score every stage sorts by."""
    id: int
    source_id: str
    index: int | None = None
    text: str
    kind: ChunkKind | None = None
    similarity: float
    content_similarity: float = 0.0
    intent_similarity: float = 0.0
    distance: float | None = None
    rerank_score: float | None = None
    expanded: bool = False  # added as a neighbour during context assembly, not scored on its own
    metadata: dict = Field(default_factory=dict)


class SourceRef(BaseModel):
    """Source metadata returned to callers alongside an answer."""
    id: int
    source_id: str
    index: int | None = None
    text: str
    similarity: float

    @classmethod
    def from_candidate(cls, c: Candidate) -> "SourceRef":
        return cls(id=c.id, source_id=c.source_id, index=c.index, text=c.text, similarity=c.similarity)
