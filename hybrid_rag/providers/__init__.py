"""Provider handles, built once at startup and passed into the pipeline."""
from __future__ import annotations

import logging

from .base import EmbeddingProvider, GenerationProvider, GenerationStream
from .embeddings import CachedEmbedder, OpenAIEmbedder, SentenceTransformerEmbedder
from .generation import EMPTY_ANSWER, OpenAIGenerator, clean_answer

logger = logging.getLogger(__name__)


def build_providers(config=None) -> tuple[EmbeddingProvider, GenerationProvider | None]:
    """Embedder (cached) and generator from config/settings. Generator is None without an API endpoint."""
    from config import settings
    from hybrid_rag.config import RAGConfig

    config = config or RAGConfig()
    if settings.PROVIDER_TYPE == "openai":
        embedder: EmbeddingProvider = OpenAIEmbedder(
            model_name=settings.EMBEDDING_MODEL,
            api_key=settings.OPENAI_API_KEY,
            base_url=settings.OPENAI_BASE_URL,
            retry_attempts=config.retry_attempts,
        )
    else:
        embedder = SentenceTransformerEmbedder(
            model_name=settings.EMBEDDING_MODEL,
            batch_size=config.embedding_batch_size,
            retry_attempts=config.retry_attempts,
        )
    embedder = CachedEmbedder(embedder, capacity=config.embedding_cache_size)

    generator: GenerationProvider | None = None
    if settings.OPENAI_API_KEY or settings.OPENAI_BASE_URL:
        generator = OpenAIGenerator(
            model_name=settings.LLM_MODEL,
            api_key=settings.OPENAI_API_KEY,
            base_url=settings.OPENAI_BASE_URL,
            temperature=config.temperature,
            retry_attempts=config.retry_attempts,
        )
    else:
        logger.warning("No OPENAI_API_KEY or OPENAI_BASE_URL set; answer generation is disabled")
    return embedder, generator


__all__ = [
    "EmbeddingProvider",
    "GenerationProvider",
    "GenerationStream",
    "CachedEmbedder",
    "OpenAIEmbedder",
    "SentenceTransformerEmbedder",
    "OpenAIGenerator",
    "EMPTY_ANSWER",
    "clean_answer",
    "build_providers",
]
