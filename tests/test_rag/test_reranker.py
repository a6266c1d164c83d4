"""Test rank fusion, deduplication, MMR and the heuristic rerank."""
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(ROOT))

from hybrid_rag.rag.reranker import (
    RRF_K,
    deduplicate,
    heuristic_rerank,
    is_near_duplicate,
    mmr_select,
    reciprocal_rank_fusion,
    rerank_score,
    rrf_score,
)
from hybrid_rag.schema import Candidate


def cand(cid: int, similarity: float, text: str = "", source_id: str = "doc.md", index: int | None = 0) -> Candidate:
    return Candidate(id=cid, source_id=source_id, index=index, text=text or f"chunk number {cid}", similarity=similarity)


def test_rrf_score() -> None:
    assert rrf_score(0) == pytest.approx(1 / 61)
    assert rrf_score(2, k=10) == pytest.approx(1 / 13)


def test_rrf_fuses_lists() -> None:
    a, b, c, d = cand(1, 0.9), cand(2, 0.8), cand(3, 0.7), cand(4, 0.6)
    fused = reciprocal_rank_fusion([[a, b, c], [b, a, d]], k=RRF_K)
    assert [x.id for x in fused] == [1, 2, 3, 4]
    assert fused[0].rerank_score == pytest.approx(fused[1].rerank_score)
    assert fused[0].rerank_score == pytest.approx(1 / 61 + 1 / 62)
    assert fused[2].rerank_score == pytest.approx(1 / 63)
    assert min(fused[0].rerank_score, fused[1].rerank_score) > max(fused[2].rerank_score, fused[3].rerank_score)


def test_rrf_keeps_first_seen_candidate_fields() -> None:
    first = cand(1, 0.9, text="first copy")
    second = cand(1, 0.1, text="first copy")
    [fused] = reciprocal_rank_fusion([[first], [second]])
    assert fused.similarity == 0.9
    assert fused.rerank_score == pytest.approx(2 / 61)


def test_rrf_of_nothing() -> None:
    assert reciprocal_rank_fusion([]) == []
    assert reciprocal_rank_fusion([[], []]) == []


def _near_duplicate_texts() -> tuple[str, str]:
    words = [f"token{i:02d}" for i in range(25)]
    return " ".join(words), " ".join(words[:24])


def test_dedup_keeps_higher_scored_neighbour() -> None:
    text_a, text_b = _near_duplicate_texts()
    lower = cand(1, 0.7, text_a, index=4)
    higher = cand(2, 0.9, text_b, index=5)
    other = cand(3, 0.8, "something else entirely different", index=9)
    out = deduplicate([lower, other, higher], threshold=0.95)
    assert [c.id for c in out] == [2, 3]


def test_dedup_requires_same_source_and_adjacent_positions() -> None:
    text_a, text_b = _near_duplicate_texts()
    assert is_near_duplicate(cand(1, 0.5, text_a, index=4), cand(2, 0.5, text_b, index=5), 0.95)
    assert not is_near_duplicate(cand(1, 0.5, text_a, index=4), cand(2, 0.5, text_b, index=6), 0.95)
    assert not is_near_duplicate(
        cand(1, 0.5, text_a, index=4), cand(2, 0.5, text_b, source_id="other.md", index=5), 0.95
    )
    assert not is_near_duplicate(cand(1, 0.5, text_a, index=4), cand(2, 0.5, text_b, index=5), 0.97)
    assert not is_near_duplicate(cand(1, 0.5, text_a, index=None), cand(2, 0.5, text_a, index=None), 0.5)


def test_dedup_result_is_a_subset() -> None:
    items = [cand(i, 1.0 - i / 10, f"distinct text {i} " * 3, index=i * 3) for i in range(5)]
    out = deduplicate(items)
    assert [c.id for c in out] == [c.id for c in items]


def test_mmr_lambda_one_is_relevance_order() -> None:
    items = [cand(1, 0.5, "alpha beta gamma"), cand(2, 0.9, "alpha beta gamma"), cand(3, 0.7, "delta epsilon zeta")]
    assert [c.id for c in mmr_select(items, 3, lam=1.0)] == [2, 3, 1]


def test_mmr_lambda_zero_prefers_diversity() -> None:
    items = [cand(1, 0.9, "alpha beta gamma"), cand(2, 0.8, "alpha beta gamma"), cand(3, 0.7, "delta epsilon zeta")]
    assert [c.id for c in mmr_select(items, 2, lam=0.0)] == [1, 3]
    assert [c.id for c in mmr_select(items, 2, lam=1.0)] == [1, 2]


def test_mmr_edge_cases() -> None:
    assert mmr_select([], 3) == []
    assert mmr_select([cand(1, 0.5)], 0) == []
    assert len(mmr_select([cand(1, 0.5), cand(2, 0.4)], 5)) == 2


def test_rerank_score_components() -> None:
    long_text = "reset the password from the settings page " * 6
    early = cand(1, 0.5, long_text, index=0)
    assert rerank_score(early, "reset password") == pytest.approx(0.5 + 0.1 + 0.05)
    late = cand(2, 0.5, long_text, index=20)
    assert rerank_score(late, "reset password") == pytest.approx(0.6)
    short = cand(3, 0.5, "reset", index=None)
    assert rerank_score(short, "reset password") == pytest.approx(0.5 + 0.05 - 0.05)


def test_heuristic_rerank_sorts_and_truncates() -> None:
    body = " filler words to pass the short chunk limit" * 5
    items = [
        cand(1, 0.60, "nothing relevant" + body, index=30),
        cand(2, 0.58, "refund policy details" + body, index=0),
        cand(3, 0.10, "refund" + body, index=40),
    ]
    out = heuristic_rerank(items, "refund policy", top_k=2)
    assert [c.id for c in out] == [2, 1]
    assert out[0].similarity == out[0].rerank_score
    assert out[0].similarity == pytest.approx(0.58 + 0.1 + 0.05)
