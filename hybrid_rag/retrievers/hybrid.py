"""Hybrid retriever: query expansion -> per-query hybrid search -> RRF -> dedup -> heuristic rerank."""
from __future__ import annotations

import logging

from hybrid_rag.config import RAGConfig
from hybrid_rag.errors import validate_query, validate_similarity_threshold, validate_top_k
from hybrid_rag.logging.query_logger import elapsed_ms, log_search_metrics, now_ms
from hybrid_rag.rag.query_expansion import expand_query
from hybrid_rag.rag.reranker import deduplicate, heuristic_rerank, reciprocal_rank_fusion
from hybrid_rag.schema import Candidate, SearchResponse
from hybrid_rag.store import KnnHit, VectorStore
from hybrid_rag.text import normalize_for_embedding
from .base import BaseRetriever
from .scorer import HybridScorer

logger = logging.getLogger(__name__)


class HybridRetriever(BaseRetriever):
    """Score stored chunks with content + intent similarity and reduce the candidate set.

    Every stage after the per-query search is switched by RAGConfig. The generator is
    only used for query expansion and may be None.
    """

    name = "hybrid"

    def __init__(self, store: VectorStore, embedder, config: RAGConfig | None = None, generator=None) -> None:
        self.store = store
        self.embedder = embedder
        self.config = config or RAGConfig()
        self.generator = generator
        self.scorer = HybridScorer(self.config.question_weight, self.config.content_weight)

    def _hits(self, query_vector: list[float]) -> list[KnnHit]:
        if self.config.candidate_pool:
            return self.store.knn(query_vector, self.config.candidate_pool)
        return [KnnHit(chunk=c) for c in self.store.all_chunks()]

    def search_one(self, query: str, min_similarity: float) -> list[Candidate]:
        """Hybrid-score candidates for one query string, threshold, keep the best initial_retrieval_k."""
        query_vector = self.embedder.embed(normalize_for_embedding(query))
        scored = self.scorer.score_all(query_vector, self._hits(query_vector))
        if self.config.enable_deduplication and self.config.dedup_before_threshold:
            scored = deduplicate(scored, self.config.deduplication_threshold)
        filtered = [c for c in scored if c.similarity >= min_similarity]
        return filtered[: self.config.initial_retrieval_k]

    def retrieve(self, query: str, top_k: int = 5, min_similarity: float | None = None) -> SearchResponse:
        cfg = self.config
        min_similarity = cfg.similarity_threshold if min_similarity is None else min_similarity
        validate_query(query, cfg.max_query_length)
        validate_top_k(top_k, cfg.max_top_k)
        validate_similarity_threshold(min_similarity)

        t0 = now_ms()
        total = self.store.count()
        logger.info("Hybrid search over %d chunks: top_k=%d min_similarity=%.2f", total, top_k, min_similarity)
        if total == 0:
            return SearchResponse(query=query, results=[], took_ms=elapsed_ms(t0))

        if cfg.enable_query_expansion:
            queries = expand_query(query, self.generator, cfg.query_expansion_count)
            result_sets = [self.search_one(q, min_similarity) for q in queries]
            candidates = reciprocal_rank_fusion(result_sets, cfg.rrf_k)
        else:
            candidates = self.search_one(query, min_similarity)
        initial = len(candidates)

        if cfg.enable_deduplication and candidates:
            candidates = deduplicate(candidates, cfg.deduplication_threshold)
        after_dedup = len(candidates)

        if cfg.enable_reranking and candidates:
            candidates = heuristic_rerank(candidates, query, cfg.rerank_top_k)

        results = candidates[:top_k]
        took = elapsed_ms(t0)
        avg = sum(c.similarity for c in results) / len(results) if results else 0.0
        if cfg.log_search_metrics:
            log_search_metrics(query, total, initial, after_dedup, len(results), avg, took, cfg.log_dir)
        if results:
            logger.info("Returning %d results (took %.1fms), top: %s (%.4f)",
                        len(results), took, results[0].source_id, results[0].similarity)
        else:
            logger.info("No results above %.2f (took %.1fms)", min_similarity, took)
        return SearchResponse(query=query, results=results, took_ms=took)
