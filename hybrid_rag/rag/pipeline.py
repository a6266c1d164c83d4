"""RAG pipeline: validate -> hybrid search -> context assembly -> generate, synchronous or streamed."""
from __future__ import annotations

import logging
from typing import Iterator

from hybrid_rag.config import RAGConfig
from hybrid_rag.errors import GenerationError, validate_query, validate_similarity_threshold, validate_top_k
from hybrid_rag.evaluation.answer_metrics import answer_confidence, answer_faithfulness, hallucination_check
from hybrid_rag.logging.query_logger import elapsed_ms, log_query_metrics, now_ms
from hybrid_rag.providers import EmbeddingProvider, GenerationProvider
from hybrid_rag.retrievers import HybridRetriever
from hybrid_rag.schema import (
    AskResult,
    Candidate,
    ChunkEvent,
    DoneEvent,
    ErrorEvent,
    SearchResponse,
    SourceRef,
    SourcesEvent,
    StreamEvent,
)
from hybrid_rag.store import VectorStore
from .context import assemble
from .llm import DEFAULT_SYSTEM_PROMPT, NO_ANSWER, build_context_block, build_question_block

logger = logging.getLogger(__name__)


class RAGPipeline:
    """Answer questions from a vector store with hybrid retrieval.

    Providers and store are passed in once; each call is independent. `ask` returns a
    complete AskResult and propagates errors. `stream` yields StreamEvents: at most one
    sources event, then chunk events, then exactly one done or error event.
    """

    def __init__(
        self,
        store: VectorStore,
        embedder: EmbeddingProvider,
        generator: GenerationProvider | None = None,
        config: RAGConfig | None = None,
    ) -> None:
        self.store = store
        self.embedder = embedder
        self.generator = generator
        self.config = config or RAGConfig()
        self.retriever = HybridRetriever(store, embedder, self.config, generator)

    def _validate(self, question: str, top_k: int, min_similarity: float) -> None:
        validate_query(question, self.config.max_query_length)
        validate_top_k(top_k, self.config.max_top_k)
        validate_similarity_threshold(min_similarity)

    def search(self, query: str, top_k: int | None = None, min_similarity: float | None = None) -> SearchResponse:
        """Retrieval only, no generation."""
        top_k = self.config.top_k if top_k is None else top_k
        min_similarity = self.config.similarity_threshold if min_similarity is None else min_similarity
        return self.retriever.retrieve(query, top_k, min_similarity)

    def build_context(self, results: list[Candidate], top_k: int) -> tuple[str, list[Candidate]]:
        cfg = self.config
        return assemble(
            results,
            cfg.max_context_length,
            expand_adjacent_chunks=cfg.enable_adjacent_chunks,
            diversify=cfg.enable_mmr,
            store=self.store,
            top_k=top_k,
            mmr_lambda=cfg.mmr_lambda,
            adjacent_discount=cfg.adjacent_discount,
            overlap_threshold=cfg.context_overlap_threshold,
        )

    def _require_generator(self) -> GenerationProvider:
        if self.generator is None:
            raise GenerationError("No generation provider configured", retryable=False)
        return self.generator

    def _check_answer(self, question: str, answer: str, context: str, used: list[Candidate], took_ms: float) -> dict:
        """Advisory quality signals. Logged, never used to withhold the answer."""
        faithfulness = answer_faithfulness(answer, context)
        hallucination = hallucination_check(answer, used)
        confidence = answer_confidence(used)
        if not faithfulness.faithful:
            logger.warning("Low faithfulness score (%.2f): %s", faithfulness.confidence, "; ".join(faithfulness.issues))
        if hallucination.has_hallucination:
            logger.warning("Potential hallucinations: %s", ", ".join(hallucination.suspicious_phrases))
        logger.info("Answer confidence: %.2f", confidence)
        if self.config.log_search_metrics:
            log_query_metrics(
                question, len(answer), len(used), confidence, faithfulness.confidence,
                hallucination.has_hallucination, took_ms, self.config.log_dir,
            )
        return {"faithfulness": faithfulness, "hallucination": hallucination, "confidence": confidence}

    def ask(
        self,
        question: str,
        top_k: int | None = None,
        min_similarity: float | None = None,
        max_answer_length: int | None = None,
        system_prompt: str | None = None,
    ) -> AskResult:
        """Search, build context, generate the full answer."""
        t0 = now_ms()
        top_k = self.config.top_k if top_k is None else top_k
        min_similarity = self.config.similarity_threshold if min_similarity is None else min_similarity
        self._validate(question, top_k, min_similarity)
        logger.info("Question: %r (top_k=%d, min_similarity=%.2f)", question, top_k, min_similarity)

        results = self.search(question, top_k, min_similarity).results
        if not results:
            logger.info("No relevant chunks found")
            return AskResult(question=question, answer=NO_ANSWER, sources=[], took_ms=elapsed_ms(t0))

        context, used = self.build_context(results, top_k)
        generator = self._require_generator()
        try:
            answer = generator.generate(
                system_prompt or DEFAULT_SYSTEM_PROMPT,
                build_context_block(context),
                build_question_block(question),
                max_tokens=max_answer_length or self.config.max_answer_tokens,
            )
        except GenerationError as e:
            logger.error("Generation failed: %s", e)
            raise
        took = elapsed_ms(t0)
        logger.info("Generated answer: %d characters from %d sources", len(answer), len(used))
        checks = self._check_answer(question, answer, context, used, took)
        return AskResult(
            question=question,
            answer=answer,
            sources=[SourceRef.from_candidate(c) for c in used],
            took_ms=took,
            **checks,
        )

    def stream(
        self,
        question: str,
        top_k: int | None = None,
        min_similarity: float | None = None,
        max_answer_length: int | None = None,
        system_prompt: str | None = None,
    ) -> Iterator[StreamEvent]:
        """Yield sources, answer fragments, then done. Failures end the stream with one error event.

        Closing the generator early closes the provider stream.
        """
        t0 = now_ms()
        gen_stream = None
        try:
            top_k = self.config.top_k if top_k is None else top_k
            min_similarity = self.config.similarity_threshold if min_similarity is None else min_similarity
            self._validate(question, top_k, min_similarity)

            results = self.search(question, top_k, min_similarity).results
            if not results:
                logger.info("No relevant chunks found")
                yield ChunkEvent(text=NO_ANSWER)
                yield DoneEvent(took_ms=elapsed_ms(t0))
                return

            context, used = self.build_context(results, top_k)
            generator = self._require_generator()
            yield SourcesEvent(sources=[SourceRef.from_candidate(c) for c in used])

            gen_stream = generator.generate_stream(
                system_prompt or DEFAULT_SYSTEM_PROMPT,
                build_context_block(context),
                build_question_block(question),
                max_tokens=max_answer_length or self.config.max_answer_tokens,
            )
            for fragment in gen_stream:
                yield ChunkEvent(text=fragment)
            took = elapsed_ms(t0)
            logger.info("Stream completed in %.1fms", took)
            yield DoneEvent(took_ms=took)
        except Exception as e:
            logger.error("Stream failed: %s", e)
            yield ErrorEvent(error=str(e))
        finally:
            if gen_stream is not None:
                gen_stream.close()
