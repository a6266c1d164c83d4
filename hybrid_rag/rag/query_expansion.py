"""Query expansion: paraphrase the question to widen recall before fusion."""
from __future__ import annotations

import logging
import re

from hybrid_rag.errors import RagError

logger = logging.getLogger(__name__)

QUERY_EXPANSION_COUNT = 3

QUERY_EXPANSION_PROMPT = (
    "You rewrite search questions. Given a question, produce alternative phrasings that "
    "ask for the same information using different words. Output one numbered phrasing per line "
    "and nothing else."
)

_NUMBERED = re.compile(r"^\d+[.):\-\s]+(.+)")


def parse_variations(text: str) -> list[str]:
    """Numbered lines, or lines ending in '?', longer than 10 characters."""
    out = []
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        m = _NUMBERED.match(line)
        if m:
            variation = m.group(1).strip()
            if len(variation) > 10:
                out.append(variation)
        elif line.endswith("?") and len(line) > 10:
            out.append(line)
    return out


def rule_based_variations(query: str, count: int = QUERY_EXPANSION_COUNT, domain: str | None = None) -> list[str]:
    """Rewrite interrogative openings into declarative phrases; otherwise append qualifiers."""
    stripped = query.lower().strip()
    variations: list[str] = []
    if stripped.startswith("how do i") or stripped.startswith("how to"):
        rest = re.sub(r"^how (do i|to)\s+", "", stripped)
        variations += [f"Methods for {rest}", f"Ways to {rest}"]
    elif stripped.startswith("what is") or stripped.startswith("what are"):
        rest = re.sub(r"^what (is|are)\s+", "", stripped)
        variations += [f"Definition of {rest}", f"Explanation of {rest}"]
    elif stripped.startswith("why"):
        rest = re.sub(r"^why\s+", "", stripped)
        variations += [f"Reasons for {rest}", f"Benefits of {rest}"]
    else:
        variations += [f"{query} methods", f"{query} techniques and principles"]
    if domain and domain.lower() not in stripped:
        variations.append(f"{query} in {domain}")
    return variations[:count]


def expand_query(query: str, generator=None, count: int = QUERY_EXPANSION_COUNT, domain: str | None = None) -> list[str]:
    """Original query first, then up to `count` variations.

    Uses the generator when one is given; on provider failure (or without one) falls
    back to the rule-based variations instead of failing the search.
    """
    variations = [query]
    if generator is None:
        variations += rule_based_variations(query, count, domain)
        return variations[: count + 1]
    prompt = f'Original question: "{query}"\n\nGenerate {count} alternative phrasings:'
    try:
        text = generator.complete(QUERY_EXPANSION_PROMPT, prompt, temperature=0.7)
    except RagError as e:
        logger.warning("Query expansion failed, using rule-based variations: %s", e)
        return [query] + rule_based_variations(query, count, domain)
    generated = [v for v in parse_variations(text) if v.strip().lower() != query.strip().lower()]
    if not generated:
        generated = rule_based_variations(query, count, domain)
    variations += generated
    logger.info("Expanded query into %d variations", len(variations[: count + 1]))
    return variations[: count + 1]
