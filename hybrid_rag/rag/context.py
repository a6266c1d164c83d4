"""Context assembly: MMR, adjacent-chunk expansion, overlap trimming, citation-annotated concatenation."""
from __future__ import annotations

import logging

from hybrid_rag.schema import Candidate, StoredChunk
from hybrid_rag.store import VectorStore
from hybrid_rag.text import jaccard_similarity
from .reranker import mmr_select

logger = logging.getLogger(__name__)

SEPARATOR = "\n\n---\n\n"
TRUNCATION_MARKER = " [...truncated]"


def citation(c: Candidate) -> str:
    """[source] or [source #n] with a 1-based ordinal."""
    if c.index is None:
        return f"[{c.source_id}]"
    return f"[{c.source_id} #{c.index + 1}]"


def format_entry(c: Candidate) -> str:
    return f"{citation(c)}\n{c.text}"


def _from_neighbour(chunk: StoredChunk, similarity: float) -> Candidate:
    return Candidate(
        id=chunk.id,
        source_id=chunk.source_id,
        index=chunk.index,
        text=chunk.text,
        kind=chunk.kind,
        similarity=similarity,
        expanded=True,
        metadata=chunk.metadata,
    )


def expand_adjacent(candidates: list[Candidate], store: VectorStore, discount: float = 0.9) -> list[Candidate]:
    """Add the chunks at index +-1 of each candidate, scored at discount x the anchor's similarity."""
    by_id: dict[int, Candidate] = {}
    for c in candidates:
        if c.index is None:
            neighbours = []
        else:
            neighbours = store.get_by_range(c.source_id, max(0, c.index - 1), c.index + 1)
        for item in [c] + [_from_neighbour(n, c.similarity * discount) for n in neighbours if n.id != c.id]:
            prev = by_id.get(item.id)
            if prev is None or (prev.expanded and not item.expanded) or (
                prev.expanded == item.expanded and item.similarity > prev.similarity
            ):
                by_id[item.id] = item
    expanded = list(by_id.values())
    logger.info("Expanded %d candidates to %d with adjacent chunks", len(candidates), len(expanded))
    return expanded


def document_order(candidates: list[Candidate]) -> list[Candidate]:
    """Sources ordered by their best score; chunks within a source in index order."""
    best: dict[str, float] = {}
    for c in candidates:
        best[c.source_id] = max(best.get(c.source_id, float("-inf")), c.similarity)
    source_rank = {s: i for i, s in enumerate(sorted(best, key=lambda s: -best[s]))}
    return sorted(
        candidates,
        key=lambda c: (
            source_rank[c.source_id],
            c.index if c.index is not None else float("inf"),
            -c.similarity,
        ),
    )


def trim_overlap(candidates: list[Candidate], threshold: float = 0.7) -> list[Candidate]:
    """Drop an item whose Jaccard similarity to the previous kept item exceeds threshold."""
    if len(candidates) <= 1:
        return list(candidates)
    kept = [candidates[0]]
    for c in candidates[1:]:
        sim = jaccard_similarity(c.text, kept[-1].text)
        if sim > threshold:
            logger.debug("Skipped overlapping chunk %d (similarity %.2f)", c.id, sim)
            continue
        kept.append(c)
    return kept


def _truncate_entry(c: Candidate, max_length: int) -> str:
    header = f"{citation(c)}\n"
    room = max_length - len(header) - len(TRUNCATION_MARKER)
    if room <= 0:
        return (header + c.text)[:max_length]
    return header + c.text[:room] + TRUNCATION_MARKER


def serialize(candidates: list[Candidate], max_context_length: int) -> tuple[str, list[Candidate]]:
    """Join citation-prefixed entries while the total stays within max_context_length.

    The first entry is always present, truncated if it alone is too long. The first
    later entry that would overflow ends the context.
    """
    if not candidates:
        return "", []
    first = format_entry(candidates[0])
    if len(first) > max_context_length:
        logger.info("First context item truncated from %d to %d chars", len(first), max_context_length)
        return _truncate_entry(candidates[0], max_context_length), [candidates[0]]
    parts = [first]
    used = [candidates[0]]
    total = len(first)
    for c in candidates[1:]:
        entry = format_entry(c)
        if total + len(SEPARATOR) + len(entry) > max_context_length:
            logger.info("Reached max context length at item %d", len(parts) + 1)
            break
        parts.append(entry)
        used.append(c)
        total += len(SEPARATOR) + len(entry)
    return SEPARATOR.join(parts), used


def assemble(
    candidates: list[Candidate],
    max_context_length: int,
    expand_adjacent_chunks: bool = True,
    diversify: bool = True,
    store: VectorStore | None = None,
    top_k: int | None = None,
    mmr_lambda: float = 0.7,
    adjacent_discount: float = 0.9,
    overlap_threshold: float = 0.7,
) -> tuple[str, list[Candidate]]:
    """Build the context string and the list of candidates it cites, in citation order."""
    selected = list(candidates)
    if diversify and len(selected) > 1:
        selected = mmr_select(selected, top_k or len(selected), mmr_lambda)
    if expand_adjacent_chunks and store is not None:
        selected = document_order(expand_adjacent(selected, store, adjacent_discount))
    selected = trim_overlap(selected, overlap_threshold)
    context, used = serialize(selected, max_context_length)
    logger.info("Built context with %d items (%d chars)", len(used), len(context))
    return context, used
