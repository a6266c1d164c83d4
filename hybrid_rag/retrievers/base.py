"""Pluggable retriever interface."""
from abc import ABC, abstractmethod

from hybrid_rag.schema import SearchResponse


class BaseRetriever(ABC):
    """Interface for retrievers: query -> scored candidates + latency."""

    name: str

    @abstractmethod
    def retrieve(self, query: str, top_k: int = 5, min_similarity: float | None = None) -> SearchResponse:
        """Return up to top_k candidates, best first, with elapsed time."""
        ...
