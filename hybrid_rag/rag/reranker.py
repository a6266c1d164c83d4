"""Candidate reduction: Reciprocal Rank Fusion, near-duplicate removal, MMR diversity, heuristic rerank."""
from __future__ import annotations

import logging

from hybrid_rag.schema import Candidate
from hybrid_rag.text import jaccard_similarity

logger = logging.getLogger(__name__)

# RRF constant (typically 60); rank is 0-based so the top item scores 1 / (k + 1)
RRF_K = 60
RERANK_TOP_K = 10

TERM_BOOST = 0.1
POSITION_BOOST = 0.05
POSITION_DECAY = 0.005
SHORT_CHUNK_CHARS = 200
SHORT_CHUNK_PENALTY = 0.05


def rrf_score(rank: int, k: int = RRF_K) -> float:
    """1 / (k + rank + 1)."""
    return 1.0 / (k + rank + 1)


def reciprocal_rank_fusion(result_lists: list[list[Candidate]], k: int = RRF_K) -> list[Candidate]:
    """Merge ranked lists by summed RRF score, keyed by chunk id. Ties keep first-seen order."""
    fused: dict[int, tuple[Candidate, float]] = {}
    for results in result_lists:
        for rank, c in enumerate(results):
            prev = fused.get(c.id)
            if prev is None:
                fused[c.id] = (c, rrf_score(rank, k))
            else:
                fused[c.id] = (prev[0], prev[1] + rrf_score(rank, k))
    ordered = sorted(fused.values(), key=lambda x: -x[1])
    out = [c.model_copy(update={"rerank_score": score}) for c, score in ordered]
    logger.info("RRF combined %d result sets into %d unique results", len(result_lists), len(out))
    return out


def is_near_duplicate(a: Candidate, b: Candidate, threshold: float) -> bool:
    """Same source, positions at most one apart, token Jaccard >= threshold."""
    if a.source_id != b.source_id or a.index is None or b.index is None:
        return False
    if abs(a.index - b.index) > 1:
        return False
    return jaccard_similarity(a.text, b.text) >= threshold


def deduplicate(candidates: list[Candidate], threshold: float = 0.95) -> list[Candidate]:
    """Drop near-duplicates, keeping the higher-scoring member of each pair in the earlier slot."""
    kept: list[Candidate] = []
    for c in candidates:
        for i, k in enumerate(kept):
            if is_near_duplicate(k, c, threshold):
                if c.similarity > k.similarity:
                    kept[i] = c
                break
        else:
            kept.append(c)
    logger.info("Deduplication reduced %d to %d results", len(candidates), len(kept))
    return kept


def mmr_select(candidates: list[Candidate], top_k: int, lam: float = 0.7) -> list[Candidate]:
    """Maximal Marginal Relevance over Jaccard similarity.

    The highest-relevance candidate is taken first; each later pick maximizes
    lam * relevance + (1 - lam) * (1 - max similarity to the picks so far).
    Ties go to the earlier candidate.
    """
    if top_k <= 0 or not candidates:
        return []
    remaining = sorted(candidates, key=lambda c: -c.similarity)
    selected = [remaining.pop(0)]
    while remaining and len(selected) < top_k:
        best_i = 0
        best_score = float("-inf")
        for i, c in enumerate(remaining):
            max_sim = max(jaccard_similarity(c.text, s.text) for s in selected)
            score = lam * c.similarity + (1 - lam) * (1 - max_sim)
            if score > best_score:
                best_score = score
                best_i = i
        selected.append(remaining.pop(best_i))
    return selected


def rerank_score(candidate: Candidate, query: str) -> float:
    """Similarity plus query-term and early-position boosts, minus a short-chunk penalty."""
    terms = query.lower().split()
    text = candidate.text.lower()
    term_boost = (sum(1 for t in terms if t in text) / len(terms)) * TERM_BOOST if terms else 0.0
    position_boost = 0.0
    if candidate.index is not None:
        position_boost = max(0.0, POSITION_BOOST - candidate.index * POSITION_DECAY)
    length_penalty = -SHORT_CHUNK_PENALTY if len(candidate.text) < SHORT_CHUNK_CHARS else 0.0
    return candidate.similarity + term_boost + position_boost + length_penalty


def heuristic_rerank(candidates: list[Candidate], query: str, top_k: int = RERANK_TOP_K) -> list[Candidate]:
    """Rescore, re-sort and truncate. The rerank score replaces similarity for later stages."""
    rescored = []
    for c in candidates:
        score = rerank_score(c, query)
        rescored.append(c.model_copy(update={"rerank_score": score, "similarity": score}))
    rescored.sort(key=lambda c: -c.similarity)
    return rescored[:top_k]
