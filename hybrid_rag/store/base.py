"""Vector store interface: key -> (chunk, content vector, intent vectors) with KNN over content."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from pydantic import BaseModel

from hybrid_rag.schema import Chunk, StoredChunk


class KnnHit(BaseModel):
    """One KNN result. distance is cosine distance (1 - cosine) in [0, 2]; None when not computed."""
    chunk: StoredChunk
    distance: float | None = None


class VectorStore(ABC):
    """Interface for chunk stores. Vectors are normalized on insert."""

    @abstractmethod
    def insert(
        self,
        chunk: Chunk,
        content_vector: Sequence[float],
        intent_vectors: Sequence[Sequence[float]] | None = None,
        questions: list[str] | None = None,
    ) -> int:
        """Store one chunk and return its id."""
        ...

    @abstractmethod
    def knn(self, query_vector: Sequence[float], k: int) -> list[KnnHit]:
        """k nearest chunks by content vector, closest first."""
        ...

    @abstractmethod
    def all_chunks(self) -> list[StoredChunk]:
        ...

    @abstractmethod
    def get_by_range(self, source_id: str, start: int, end: int) -> list[StoredChunk]:
        """Chunks of source_id with start <= index <= end, in index order."""
        ...

    @abstractmethod
    def count(self) -> int:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...
