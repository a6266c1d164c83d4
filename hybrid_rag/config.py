"""Pipeline tunables: chunking, retrieval weights, reranking, context and generation limits."""
from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field

CHUNK_SIZE = 1200


class RAGConfig(BaseModel):
    """All knobs of the retrieval-and-answer pipeline. Defaults are the production values."""

    # Chunking
    chunk_size: int = CHUNK_SIZE
    chunk_overlap: int = 400
    min_chunk_size: int = 50
    strategy: str = "fixed"

    # Hypothetical question generation
    questions_per_chunk: int = 5

    # Retrieval
    top_k: int = 5
    max_top_k: int = 100
    max_query_length: int = 1000
    similarity_threshold: float = 0.6
    initial_retrieval_k: int = 20
    candidate_pool: int | None = None  # KNN pre-filter size; None scores every stored chunk
    question_weight: float = 0.6
    content_weight: float = 0.4
    dedup_before_threshold: bool = False

    # Reranking
    enable_query_expansion: bool = False
    query_expansion_count: int = 3
    enable_deduplication: bool = True
    deduplication_threshold: float = 0.95
    enable_reranking: bool = True
    rerank_top_k: int = 10
    rrf_k: int = 60

    # Context assembly
    enable_mmr: bool = True
    mmr_lambda: float = 0.7
    enable_adjacent_chunks: bool = True
    adjacent_discount: float = 0.9
    context_overlap_threshold: float = 0.7
    max_context_length: int = CHUNK_SIZE * 40

    # Generation
    max_answer_tokens: int = CHUNK_SIZE * 5
    temperature: float = 0.3

    # Providers
    embedding_cache_size: int = 1000
    embedding_batch_size: int = 32
    retry_attempts: int = 3

    log_search_metrics: bool = True
    log_dir: Path | None = Field(default=None)

    @classmethod
    def from_yaml(cls, path: Path | str, **overrides) -> "RAGConfig":
        """Load from YAML. Sections (chunking:, retrieval:, ...) are flattened into one namespace."""
        path = Path(path)
        values: dict = {}
        if path.exists():
            with open(path, encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
            for key, value in raw.items():
                if isinstance(value, dict):
                    values.update(value)
                else:
                    values[key] = value
        values.update(overrides)
        return cls(**values)


def load_config(**overrides) -> RAGConfig:
    """RAGConfig from config/rag.yaml (if present) with log_dir from settings."""
    try:
        from config.settings import LOG_DIR, RAG_CONFIG_PATH
    except Exception:
        return RAGConfig(**overrides)
    overrides.setdefault("log_dir", LOG_DIR)
    return RAGConfig.from_yaml(RAG_CONFIG_PATH, **overrides)
