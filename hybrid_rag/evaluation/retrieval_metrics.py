"""Ranking quality: Hit@k, MRR, Precision@k, Recall@k, NDCG@k.

Results are anything with the `key` attribute (chunk `id` by default; `source_id`
when judging at document level).
"""
from __future__ import annotations

import math
from typing import Any, Hashable, Sequence


def _ids(results: Sequence[Any], key: str) -> list[Hashable]:
    return [getattr(r, key) for r in results]


def hit_at_k(results: Sequence[Any], relevant: set, k: int = 5, key: str = "id") -> float:
    """1.0 if any of the top-k results is relevant."""
    return 1.0 if set(_ids(results[:k], key)) & relevant else 0.0


def mrr(results: Sequence[Any], relevant: set, key: str = "id") -> float:
    """Reciprocal of the 1-based rank of the first relevant result; 0.0 if none."""
    for i, rid in enumerate(_ids(results, key)):
        if rid in relevant:
            return 1.0 / (i + 1)
    return 0.0


def precision_at_k(results: Sequence[Any], relevant: set, k: int, key: str = "id") -> float:
    """Relevant fraction of the top-k window (0.0 for an empty window)."""
    top = _ids(results[:k], key)
    if not top:
        return 0.0
    return sum(1 for rid in top if rid in relevant) / len(top)


def recall_at_k(results: Sequence[Any], relevant: set, k: int, key: str = "id") -> float:
    """Fraction of the relevant set found in the top-k window."""
    if not relevant:
        return 0.0
    return len(set(_ids(results[:k], key)) & relevant) / len(relevant)


def ndcg_at_k(results: Sequence[Any], relevance: dict, k: int, key: str = "id") -> float:
    """DCG = sum(rel_i / log2(i + 2)) over the top-k, divided by the DCG of the ideal ordering.

    An id repeated in the window only earns its gain once.
    """
    dcg = 0.0
    seen = set()
    for i, rid in enumerate(_ids(results[:k], key)):
        if rid in seen:
            continue
        seen.add(rid)
        dcg += relevance.get(rid, 0) / math.log2(i + 2)
    ideal = sorted(relevance.values(), reverse=True)[:k]
    idcg = sum(rel / math.log2(i + 2) for i, rel in enumerate(ideal))
    return dcg / idcg if idcg > 0 else 0.0


def evaluate_results(results: Sequence[Any], relevant: set, k: int = 10, key: str = "id") -> dict[str, float]:
    """All ranking metrics for one query, with binary relevance."""
    return {
        "mrr": mrr(results, relevant, key),
        "precision_at_k": precision_at_k(results, relevant, k, key),
        "recall_at_k": recall_at_k(results, relevant, k, key),
        "ndcg": ndcg_at_k(results, {rid: 1 for rid in relevant}, k, key),
    }
