"""In-process store for tests and small collections."""
from __future__ import annotations

import threading
from typing import Sequence

import numpy as np

from hybrid_rag.errors import DimensionMismatchError, VectorIndexError
from hybrid_rag.schema import Chunk, StoredChunk
from hybrid_rag.vectors import normalize
from .base import KnnHit, VectorStore


class InMemoryVectorStore(VectorStore):
    def __init__(self) -> None:
        self._rows: dict[int, StoredChunk] = {}
        self._next_id = 1
        self._dim: int | None = None
        self._lock = threading.Lock()

    def _check_dim(self, vector: Sequence[float]) -> None:
        if self._dim is not None and len(vector) != self._dim:
            raise VectorIndexError(f"Collection dimension is {self._dim}, got {len(vector)}",
                                   DimensionMismatchError(self._dim, len(vector)))

    def insert(
        self,
        chunk: Chunk,
        content_vector: Sequence[float],
        intent_vectors: Sequence[Sequence[float]] | None = None,
        questions: list[str] | None = None,
    ) -> int:
        self._check_dim(content_vector)
        for v in intent_vectors or []:
            if len(v) != len(content_vector):
                raise VectorIndexError("Intent vectors must match the content vector dimension",
                                       DimensionMismatchError(len(content_vector), len(v)))
        with self._lock:
            self._dim = len(content_vector)
            chunk_id = self._next_id
            self._next_id += 1
            self._rows[chunk_id] = StoredChunk(
                id=chunk_id,
                **chunk.model_dump(),
                content_vector=normalize(content_vector),
                intent_vectors=[normalize(v) for v in intent_vectors or []],
                questions=list(questions or []),
            )
        return chunk_id

    def knn(self, query_vector: Sequence[float], k: int) -> list[KnnHit]:
        self._check_dim(query_vector)
        with self._lock:
            rows = list(self._rows.values())
        if not rows or k <= 0:
            return []
        matrix = np.asarray([r.content_vector for r in rows], dtype=float)
        q = np.asarray(normalize(query_vector), dtype=float)
        distances = 1.0 - matrix @ q
        order = np.argsort(distances, kind="stable")[:k]
        return [KnnHit(chunk=rows[int(i)], distance=float(distances[int(i)])) for i in order]

    def all_chunks(self) -> list[StoredChunk]:
        with self._lock:
            return list(self._rows.values())

    def get_by_range(self, source_id: str, start: int, end: int) -> list[StoredChunk]:
        with self._lock:
            rows = [r for r in self._rows.values() if r.source_id == source_id and start <= r.index <= end]
        return sorted(rows, key=lambda r: r.index)

    def count(self) -> int:
        with self._lock:
            return len(self._rows)

    def clear(self) -> None:
        with self._lock:
            self._rows.clear()
            self._dim = None
