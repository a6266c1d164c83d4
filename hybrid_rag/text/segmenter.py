"""Split document text into retrievable chunks.

Two strategies:
  fixed      pack paragraphs greedily up to max_chunk_size, seeding each new chunk
             with a trailing overlap window of the previous one. Oversized paragraphs
             are split by sentence, oversized sentences by word.
  structure  keep fenced code, SQL statements and lists intact, split long prose at
             sentence boundaries, then merge small neighbouring units.

Chunks shorter than min_chunk_size are dropped.
"""
from __future__ import annotations

import logging
import re
from typing import NamedTuple

from .structure import split_semantic_units
from .text_utils import split_sentences

logger = logging.getLogger(__name__)

FIXED = "fixed"
STRUCTURE = "structure"
STRATEGIES = (FIXED, STRUCTURE)

# Structured units larger than this multiple of the target always stand alone
OVERSIZE_FACTOR = 1.5

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
_SENTENCE_BOUNDARY = re.compile(r"[.!?]\s+")


class Segment(NamedTuple):
    text: str
    kind: str | None = None


def overlap_text(text: str, target: int) -> str:
    """Last ~target characters of text, starting at a sentence boundary, else a word boundary."""
    if target <= 0:
        return ""
    if len(text) <= target:
        return text
    tail = text[len(text) - target:]
    m = _SENTENCE_BOUNDARY.search(tail)
    if m and tail[m.end():].strip():
        return tail[m.end():].strip()
    space = tail.find(" ")
    if space != -1 and tail[space + 1:].strip():
        return tail[space + 1:].strip()
    return tail.strip()


def _split_oversized(text: str, max_size: int, joiner: str) -> list[tuple[str, str]]:
    """(unit, joiner-before) pairs for text longer than max_size: sentences, then words, then raw cuts."""
    units: list[tuple[str, str]] = []

    def add(unit: str, sep: str) -> None:
        units.append((unit, joiner if not units else sep))

    for sentence in split_sentences(text):
        if len(sentence) <= max_size:
            add(sentence, " ")
            continue
        for word in sentence.split():
            if len(word) <= max_size:
                add(word, " ")
                continue
            for start in range(0, len(word), max_size):
                add(word[start:start + max_size], " " if start == 0 else "")
    return units


def pack(units: list[tuple[str, str]], max_size: int, overlap: int) -> list[str]:
    """Greedy packer over (unit, joiner) pairs; each flushed chunk seeds the next with its overlap tail."""
    chunks: list[str] = []
    current = ""
    for unit, joiner in units:
        if not current:
            current = unit
            continue
        if len(current) + len(joiner) + len(unit) <= max_size:
            current += joiner + unit
            continue
        chunks.append(current)
        budget = min(overlap, max_size - len(unit) - len(joiner))
        tail = overlap_text(current, budget)
        current = tail + joiner + unit if tail else unit
    if current:
        chunks.append(current)
    return chunks


def fixed_size_chunks(text: str, max_chunk_size: int, overlap: int) -> list[str]:
    units: list[tuple[str, str]] = []
    for paragraph in _PARAGRAPH_BREAK.split(text):
        paragraph = paragraph.strip()
        if not paragraph:
            continue
        if len(paragraph) <= max_chunk_size:
            units.append((paragraph, "\n\n"))
        else:
            units.extend(_split_oversized(paragraph, max_chunk_size, "\n\n"))
    return pack(units, max_chunk_size, overlap)


def _dominant_kind(parts: list[Segment]) -> str:
    sizes: dict[str, int] = {}
    for p in parts:
        sizes[p.kind or "prose"] = sizes.get(p.kind or "prose", 0) + len(p.text)
    return max(sizes, key=lambda k: sizes[k])


def structure_aware_chunks(text: str, max_chunk_size: int, overlap: int) -> list[Segment]:
    pieces: list[Segment] = []
    for unit in split_semantic_units(text):
        if unit.kind == "prose" and len(unit.text) > max_chunk_size:
            split = pack(_split_oversized(unit.text, max_chunk_size, " "), max_chunk_size, overlap)
            pieces.extend(Segment(t, "prose") for t in split)
        else:
            pieces.append(Segment(unit.text, unit.kind))

    out: list[Segment] = []
    current: list[Segment] = []
    size = 0

    def flush() -> None:
        nonlocal current, size
        if current:
            out.append(Segment("\n\n".join(p.text for p in current), _dominant_kind(current)))
        current, size = [], 0

    for piece in pieces:
        if piece.kind != "prose" and len(piece.text) > max_chunk_size * OVERSIZE_FACTOR:
            flush()
            out.append(piece)
            continue
        if current and size + 2 + len(piece.text) > max_chunk_size:
            flush()
        size += len(piece.text) + (2 if current else 0)
        current.append(piece)
    flush()
    return out


def segment_with_kinds(
    text: str,
    max_chunk_size: int = 1200,
    overlap: int = 400,
    strategy: str = FIXED,
    min_chunk_size: int = 50,
) -> list[Segment]:
    """Like segment() but keeps the structural tag of each chunk (None for the fixed strategy)."""
    if strategy not in STRATEGIES:
        raise ValueError(f"Unknown chunking strategy: {strategy!r} (expected one of {STRATEGIES})")
    text = (text or "").strip()
    if not text:
        return []
    if len(text) <= max_chunk_size:
        if strategy == STRUCTURE:
            units = [Segment(u.text, u.kind) for u in split_semantic_units(text)]
            segments = [Segment(text, _dominant_kind(units) if units else "prose")]
        else:
            segments = [Segment(text)]
    elif strategy == STRUCTURE:
        segments = structure_aware_chunks(text, max_chunk_size, overlap)
    else:
        segments = [Segment(t) for t in fixed_size_chunks(text, max_chunk_size, overlap)]

    kept = [s for s in segments if len(s.text.strip()) >= min_chunk_size]
    if len(kept) < len(segments):
        logger.debug("Dropped %d chunks shorter than %d chars", len(segments) - len(kept), min_chunk_size)
    return [Segment(s.text.strip(), s.kind) for s in kept]


def segment(
    text: str,
    max_chunk_size: int = 1200,
    overlap: int = 400,
    strategy: str = FIXED,
    min_chunk_size: int = 50,
) -> list[str]:
    """Chunk texts for one document. Empty input gives []; input under max_chunk_size gives one chunk."""
    return [s.text for s in segment_with_kinds(text, max_chunk_size, overlap, strategy, min_chunk_size)]


__all__ = [
    "FIXED",
    "STRUCTURE",
    "STRATEGIES",
    "Segment",
    "overlap_text",
    "pack",
    "segment",
    "segment_with_kinds",
]
