"""Provider interfaces: text -> vector, (system, context, question) -> answer text."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Iterable, Iterator


class EmbeddingProvider(ABC):
    """Interface for embedding models. Vectors of one provider share one dimension."""

    model_name: str = "unknown"
    batch_size: int = 32

    @abstractmethod
    def embed(self, text: str) -> list[float]:
        ...

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed many texts, calling the model in slices of batch_size."""
        out: list[list[float]] = []
        for start in range(0, len(texts), max(1, self.batch_size)):
            out.extend(self._embed_slice(texts[start:start + self.batch_size]))
        return out

    def _embed_slice(self, texts: list[str]) -> list[list[float]]:
        return [self.embed(t) for t in texts]


class GenerationStream:
    """Pull-based stream of answer fragments. Consumed once; close() releases the provider connection."""

    def __init__(self, fragments: Iterable[str], on_close: Callable[[], None] | None = None) -> None:
        self._it: Iterator[str] = iter(fragments)
        self._on_close = on_close
        self.closed = False

    def __iter__(self) -> "GenerationStream":
        return self

    def __next__(self) -> str:
        if self.closed:
            raise StopIteration
        try:
            return next(self._it)
        except StopIteration:
            self.close()
            raise

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        close = getattr(self._it, "close", None)
        if close is not None:
            close()
        if self._on_close is not None:
            self._on_close()

    def __enter__(self) -> "GenerationStream":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class GenerationProvider(ABC):
    """Interface for text generation models."""

    model_name: str = "unknown"

    @abstractmethod
    def generate(self, system_prompt: str, context: str, question: str, max_tokens: int | None = None) -> str:
        ...

    @abstractmethod
    def generate_stream(
        self, system_prompt: str, context: str, question: str, max_tokens: int | None = None
    ) -> GenerationStream:
        ...

    def complete(self, system_prompt: str, prompt: str, temperature: float = 0.7) -> str:
        """Free-form completion, used for question generation and query expansion."""
        return self.generate(system_prompt, "", prompt)
