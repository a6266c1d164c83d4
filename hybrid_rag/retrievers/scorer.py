"""Hybrid score: blend of content similarity and intent (hypothetical question) similarity."""
from __future__ import annotations

from typing import Sequence

from hybrid_rag.schema import Candidate
from hybrid_rag.store import KnnHit
from hybrid_rag.vectors import cosine_similarity, max_cosine_similarity


def content_similarity_from_distance(distance: float) -> float:
    """Map a KNN distance in [0, 2] back to a cosine similarity in [-1, 1]."""
    # stores report distance as 1 - cos(query, content)
    return 1.0 - distance


class HybridScorer:
    """hybrid = intent_similarity * question_weight + content_similarity * content_weight."""

    def __init__(self, question_weight: float = 0.6, content_weight: float = 0.4) -> None:
        self.question_weight = question_weight
        self.content_weight = content_weight

    def combine(self, intent_similarity: float, content_similarity: float) -> float:
        return intent_similarity * self.question_weight + content_similarity * self.content_weight

    def score(self, query_vector: Sequence[float], hit: KnnHit) -> Candidate:
        chunk = hit.chunk
        if chunk.content_vector:
            content = cosine_similarity(query_vector, chunk.content_vector)
        elif hit.distance is not None:
            content = content_similarity_from_distance(hit.distance)
        else:
            content = 0.0
        intent = max_cosine_similarity(query_vector, chunk.intent_vectors)
        return Candidate(
            id=chunk.id,
            source_id=chunk.source_id,
            index=chunk.index,
            text=chunk.text,
            kind=chunk.kind,
            similarity=self.combine(intent, content),
            content_similarity=content,
            intent_similarity=intent,
            distance=hit.distance,
            metadata=chunk.metadata,
        )

    def score_all(self, query_vector: Sequence[float], hits: list[KnnHit]) -> list[Candidate]:
        """Score every hit, highest hybrid score first (stable on ties)."""
        scored = [self.score(query_vector, h) for h in hits]
        return sorted(scored, key=lambda c: -c.similarity)
