from .reranker import deduplicate, heuristic_rerank, mmr_select, reciprocal_rank_fusion
from .query_expansion import expand_query
from .context import assemble
from .llm import DEFAULT_SYSTEM_PROMPT, NO_ANSWER
from .streaming import format_sse, sse_stream

# RAGPipeline lives in hybrid_rag.rag.pipeline; it depends on hybrid_rag.retrievers, which uses this package.

__all__ = [
    "deduplicate",
    "heuristic_rerank",
    "mmr_select",
    "reciprocal_rank_fusion",
    "expand_query",
    "assemble",
    "DEFAULT_SYSTEM_PROMPT",
    "NO_ANSWER",
    "format_sse",
    "sse_stream",
]
