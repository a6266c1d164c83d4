from .base import BaseRetriever
from .hybrid import HybridRetriever
from .scorer import HybridScorer, content_similarity_from_distance

__all__ = ["BaseRetriever", "HybridRetriever", "HybridScorer", "content_similarity_from_distance"]
