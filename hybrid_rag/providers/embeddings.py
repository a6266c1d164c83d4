"""Embedding providers: local sentence-transformers, OpenAI-compatible API, and a bounded cache."""
from __future__ import annotations

import logging
import threading

from hybrid_rag.errors import EmbeddingError, retry_call
from .base import EmbeddingProvider

logger = logging.getLogger(__name__)


class SentenceTransformerEmbedder(EmbeddingProvider):
    """Local model, loaded on first use. Vectors come back L2-normalized."""

    def __init__(self, model_name: str = "all-MiniLM-L6-v2", batch_size: int = 32, retry_attempts: int = 3) -> None:
        self.model_name = model_name
        self.batch_size = batch_size
        self.retry_attempts = retry_attempts
        self._model = None
        self._lock = threading.Lock()

    def _load(self):
        with self._lock:
            if self._model is None:
                logger.info("Loading embedding model %s", self.model_name)
                try:
                    from sentence_transformers import SentenceTransformer
                    self._model = SentenceTransformer(self.model_name)
                except Exception as e:
                    raise EmbeddingError(f"Failed to load embedding model {self.model_name}: {e}", e, retryable=False) from e
        return self._model

    def _encode(self, texts: list[str]) -> list[list[float]]:
        model = self._load()
        try:
            vectors = model.encode(texts, convert_to_numpy=True, normalize_embeddings=True)
        except Exception as e:
            raise EmbeddingError(f"Failed to generate embedding: {e}", e) from e
        return [v.astype(float).tolist() for v in vectors]

    def embed(self, text: str) -> list[float]:
        return retry_call(lambda: self._encode([text])[0], attempts=self.retry_attempts)

    def _embed_slice(self, texts: list[str]) -> list[list[float]]:
        return retry_call(lambda: self._encode(texts), attempts=self.retry_attempts)


class OpenAIEmbedder(EmbeddingProvider):
    """Embeddings over the OpenAI API or any compatible server (LM Studio, vLLM, ...)."""

    def __init__(
        self,
        model_name: str = "text-embedding-3-small",
        api_key: str | None = None,
        base_url: str | None = None,
        batch_size: int = 64,
        retry_attempts: int = 3,
        client=None,
    ) -> None:
        self.model_name = model_name
        self.batch_size = batch_size
        self.retry_attempts = retry_attempts
        if client is None:
            from openai import OpenAI
            client = OpenAI(api_key=api_key or "not-needed", base_url=base_url)
        self._client = client

    def _create(self, texts: list[str]) -> list[list[float]]:
        import openai
        try:
            resp = self._client.embeddings.create(model=self.model_name, input=texts)
        except (openai.APITimeoutError, openai.APIConnectionError, openai.RateLimitError, openai.InternalServerError) as e:
            raise EmbeddingError(f"Embedding request failed: {e}", e) from e
        except openai.OpenAIError as e:
            raise EmbeddingError(f"Embedding request rejected: {e}", e, retryable=False) from e
        return [list(d.embedding) for d in sorted(resp.data, key=lambda d: d.index)]

    def embed(self, text: str) -> list[float]:
        return self._embed_slice([text])[0]

    def _embed_slice(self, texts: list[str]) -> list[list[float]]:
        return retry_call(lambda: self._create(texts), attempts=self.retry_attempts)


def _cache_key(text: str) -> str:
    return " ".join(text.split())


class CachedEmbedder(EmbeddingProvider):
    """Wrap a provider with a shared cache keyed by whitespace-normalized text.

    Safe for concurrent readers and writers. Once `capacity` entries are held no new
    ones are added.
    """

    def __init__(self, provider: EmbeddingProvider, capacity: int = 1000) -> None:
        self.provider = provider
        self.capacity = capacity
        self.model_name = provider.model_name
        self.batch_size = provider.batch_size
        self._cache: dict[str, list[float]] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def _get(self, key: str) -> list[float] | None:
        with self._lock:
            vec = self._cache.get(key)
            if vec is None:
                self.misses += 1
            else:
                self.hits += 1
            return vec

    def _put(self, key: str, vector: list[float]) -> None:
        with self._lock:
            if key in self._cache or len(self._cache) >= self.capacity:
                return
            self._cache[key] = list(vector)

    def embed(self, text: str) -> list[float]:
        key = _cache_key(text)
        cached = self._get(key)
        if cached is not None:
            return list(cached)
        vector = self.provider.embed(text)
        self._put(key, vector)
        return list(vector)

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        keys = [_cache_key(t) for t in texts]
        out: list[list[float] | None] = [self._get(k) for k in keys]
        missing = [i for i, v in enumerate(out) if v is None]
        if missing:
            fresh = self.provider.embed_batch([texts[i] for i in missing])
            for i, vector in zip(missing, fresh):
                out[i] = vector
                self._put(keys[i], vector)
        return [list(v) for v in out]

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
