"""Pytest fixtures: deterministic fake providers, in-memory stores, a small corpus."""
import hashlib
import math
import re
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from hybrid_rag.config import RAGConfig
from hybrid_rag.errors import EmbeddingError, GenerationError
from hybrid_rag.providers import EmbeddingProvider, GenerationProvider, GenerationStream
from hybrid_rag.schema import Chunk
from hybrid_rag.store import InMemoryVectorStore

DIM = 64


class FakeEmbedder(EmbeddingProvider):
    """Hashed bag of words: texts sharing words get similar vectors. No model download."""

    model_name = "fake-hash-64"
    batch_size = 8

    def __init__(self, dim: int = DIM, fail: bool = False) -> None:
        self.dim = dim
        self.fail = fail
        self.calls: list[str] = []

    def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.fail:
            raise EmbeddingError("embedding backend down", retryable=False)
        vec = [0.0] * self.dim
        for word in re.findall(r"\w+", text.lower()):
            bucket = int(hashlib.md5(word.encode("utf-8")).hexdigest(), 16) % self.dim
            vec[bucket] += 1.0
        norm = math.sqrt(sum(v * v for v in vec))
        return [v / norm for v in vec] if norm else vec


class StaticEmbedder(EmbeddingProvider):
    """Fixed vectors per (normalized) text, for exact-score tests."""

    model_name = "static"

    def __init__(self, vectors: dict[str, list[float]], default: list[float] | None = None) -> None:
        self.vectors = vectors
        self.default = default

    def embed(self, text: str) -> list[float]:
        if text in self.vectors:
            return list(self.vectors[text])
        if self.default is None:
            raise KeyError(text)
        return list(self.default)


class FakeGenerator(GenerationProvider):
    """Scripted answers. Streams `fragments`; records whether the stream was closed."""

    model_name = "fake-llm"

    def __init__(
        self,
        answer: str = "Scripted answer.",
        fragments: list[str] | None = None,
        completion: str = "",
        fail: bool = False,
        fail_after: int | None = None,
    ) -> None:
        self.answer = answer
        self.fragments = fragments if fragments is not None else ["Scripted ", "answer."]
        self.completion = completion
        self.fail = fail
        self.fail_after = fail_after
        self.calls: list[dict] = []
        self.streams_closed = 0
        self.fragments_pulled = 0

    def generate(self, system_prompt, context, question, max_tokens=None) -> str:
        self.calls.append({"system": system_prompt, "context": context, "question": question, "max_tokens": max_tokens})
        if self.fail:
            raise GenerationError("generator unavailable", retryable=False)
        return self.answer

    def complete(self, system_prompt, prompt, temperature=0.7) -> str:
        self.calls.append({"system": system_prompt, "prompt": prompt})
        if self.fail:
            raise GenerationError("generator unavailable", retryable=False)
        return self.completion

    def generate_stream(self, system_prompt, context, question, max_tokens=None) -> GenerationStream:
        self.calls.append({"system": system_prompt, "context": context, "question": question, "max_tokens": max_tokens})
        if self.fail:
            raise GenerationError("generator unavailable", retryable=False)

        def fragments():
            for i, f in enumerate(self.fragments):
                if self.fail_after is not None and i >= self.fail_after:
                    raise GenerationError("stream dropped", retryable=False)
                self.fragments_pulled += 1
                yield f

        def on_close():
            self.streams_closed += 1

        return GenerationStream(fragments(), on_close=on_close)


CORPUS = {
    "passwords.md": [
        "To reset your password open the account settings page and choose reset password. "
        "A reset link is sent to the email address on file and expires after one hour.",
        "Passwords must contain at least twelve characters including a number and a symbol. "
        "Reusing any of the last five passwords is not allowed by the account policy.",
        "If the reset email does not arrive check the spam folder or contact support to verify "
        "the email address registered on the account.",
    ],
    "refunds.md": [
        "Refunds are issued to the original payment method within ten business days after "
        "the returned item is received at the warehouse and inspected.",
        "Items bought on sale can be returned for store credit only and are not eligible for "
        "a refund to the original payment method.",
    ],
    "shipping.md": [
        "Standard shipping takes three to five business days. Express shipping arrives the "
        "next business day when the order is placed before noon.",
    ],
}


def add_chunk(store, embedder, source_id: str, index: int, text: str, questions: list[str] | None = None) -> int:
    intents = [embedder.embed(q) for q in questions] if questions else None
    chunk = Chunk(source_id=source_id, index=index, text=text, metadata={"chunking_strategy": "fixed"})
    return store.insert(chunk, embedder.embed(text), intents, questions)


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture
def corpus_store(embedder) -> InMemoryVectorStore:
    s = InMemoryVectorStore()
    for source_id, texts in CORPUS.items():
        for i, text in enumerate(texts):
            add_chunk(s, embedder, source_id, i, text)
    return s


@pytest.fixture
def config(tmp_path) -> RAGConfig:
    """Production defaults with a permissive threshold and logs under tmp_path."""
    return RAGConfig(similarity_threshold=0.0, log_dir=tmp_path / "logs")


@pytest.fixture
def sample_query() -> str:
    return "How do I reset my password?"
