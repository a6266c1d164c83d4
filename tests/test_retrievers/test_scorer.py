"""Test hybrid scoring of content and intent similarity."""
import math
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(ROOT))

from conftest import StaticEmbedder
from hybrid_rag.config import RAGConfig
from hybrid_rag.retrievers import HybridRetriever, HybridScorer, content_similarity_from_distance
from hybrid_rag.schema import Chunk, StoredChunk
from hybrid_rag.store import InMemoryVectorStore, KnnHit

QUERY = [1.0, 0.0, 0.0]


def _hit(content=None, intents=None, distance=None, chunk_id=1) -> KnnHit:
    chunk = StoredChunk(
        id=chunk_id,
        source_id="doc.md",
        index=0,
        text="text",
        content_vector=content or [],
        intent_vectors=intents or [],
    )
    return KnnHit(chunk=chunk, distance=distance)


def _three_doc_store() -> InMemoryVectorStore:
    store = InMemoryVectorStore()
    store.insert(Chunk(source_id="doc1.md", index=0, text="unrelated shipping notes " * 10), [0.0, 1.0, 0.0])
    store.insert(
        Chunk(source_id="doc2.md", index=0, text="account recovery guide " * 10),
        [0.5, 0.0, math.sqrt(0.75)],
        [[0.9, math.sqrt(0.19), 0.0], [0.0, 0.0, 1.0]],
        ["How do I recover my account?", "Where is the billing page?"],
    )
    store.insert(Chunk(source_id="doc3.md", index=0, text="release notes " * 10), [0.0, 0.0, 1.0])
    return store


def test_combine_uses_weights() -> None:
    scorer = HybridScorer(0.7, 0.3)
    assert scorer.combine(0.9, 0.5) == pytest.approx(0.78)
    assert HybridScorer().combine(1.0, 0.0) == pytest.approx(0.6)


def test_score_takes_best_intent_vector() -> None:
    scorer = HybridScorer(0.7, 0.3)
    hit = _hit(content=[0.5, 0.0, math.sqrt(0.75)], intents=[[0.0, 1.0, 0.0], [0.9, math.sqrt(0.19), 0.0]])
    c = scorer.score(QUERY, hit)
    assert c.intent_similarity == pytest.approx(0.9)
    assert c.content_similarity == pytest.approx(0.5)
    assert c.similarity == pytest.approx(0.78)


def test_chunk_without_intents_scores_on_content_only() -> None:
    c = HybridScorer(0.6, 0.4).score(QUERY, _hit(content=[1.0, 0.0, 0.0]))
    assert c.intent_similarity == 0.0
    assert c.similarity == pytest.approx(0.4)


def test_content_similarity_from_distance_when_vector_missing() -> None:
    assert content_similarity_from_distance(0.0) == 1.0
    assert content_similarity_from_distance(2.0) == -1.0
    c = HybridScorer(0.0, 1.0).score(QUERY, _hit(distance=1.0))
    assert c.content_similarity == pytest.approx(0.0)


def test_distance_from_store_maps_back_to_cosine() -> None:
    store = InMemoryVectorStore()
    vectors = {"same": [2.0, 0.0, 0.0], "orthogonal": [0.0, 3.0, 0.0], "opposite": [-1.0, 0.0, 0.0]}
    for i, (name, vector) in enumerate(vectors.items()):
        store.insert(Chunk(source_id=name, index=i, text=name), vector)
    by_source = {hit.chunk.source_id: hit.distance for hit in store.knn(QUERY, 3)}
    assert content_similarity_from_distance(by_source["same"]) == pytest.approx(1.0)
    assert content_similarity_from_distance(by_source["orthogonal"]) == pytest.approx(0.0)
    assert content_similarity_from_distance(by_source["opposite"]) == pytest.approx(-1.0)


def test_score_is_monotone_in_each_component() -> None:
    scorer = HybridScorer(0.6, 0.4)
    assert scorer.combine(0.8, 0.5) > scorer.combine(0.7, 0.5)
    assert scorer.combine(0.7, 0.6) > scorer.combine(0.7, 0.5)


def test_score_all_sorts_descending_and_stable() -> None:
    hits = [
        _hit(content=[0.0, 1.0, 0.0], chunk_id=1),
        _hit(content=[1.0, 0.0, 0.0], chunk_id=2),
        _hit(content=[0.0, 1.0, 0.0], chunk_id=3),
    ]
    ranked = HybridScorer().score_all(QUERY, hits)
    assert [c.id for c in ranked] == [2, 1, 3]


def test_hybrid_search_weighted_score() -> None:
    config = RAGConfig(question_weight=0.7, content_weight=0.3, enable_reranking=False, log_search_metrics=False)
    retriever = HybridRetriever(_three_doc_store(), StaticEmbedder({}, default=QUERY), config)

    resp = retriever.retrieve("how do i recover my account", top_k=3, min_similarity=0.5)
    [top] = resp.results
    assert top.source_id == "doc2.md"
    assert top.similarity == pytest.approx(0.78)

    excluded = retriever.retrieve("how do i recover my account", top_k=3, min_similarity=0.8)
    assert excluded.results == []
