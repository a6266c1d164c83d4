"""Answer quality: EM, F1, and advisory faithfulness / hallucination / confidence signals."""
from __future__ import annotations

import re
from typing import Any, Sequence

from hybrid_rag.schema import FaithfulnessReport, HallucinationReport
from hybrid_rag.text import split_sentences, tokenize

FAITHFULNESS_THRESHOLD = 0.7
CONFIDENCE_TOP_N = 3

_ABSOLUTES = (
    re.compile(r"\b(?:always|never)\s+\w+", re.I),
    re.compile(r"\ball\s+\w+\s+(?:are|must|should)\b", re.I),
    re.compile(r"\bevery\s+\w+\s+(?:is|are)\b", re.I),
)
_UNITS = r"%|percent|kg|g|mg|lbs?|km|m|cm|mm|ms|s|sec|seconds?|min|minutes?|hours?|days?|weeks?|months?|years?|reps?|sets?"
_NUMERIC = re.compile(rf"\b\d+(?:\.\d+)?(?:\s?(?:{_UNITS})\b|%)?", re.I)


def exact_match(pred: str, ref: str) -> float:
    """1.0 if normalized strings match."""
    return 1.0 if pred.strip().lower() == ref.strip().lower() else 0.0


def f1_score(pred: str, ref: str) -> float:
    """Token-level F1 between pred and ref."""
    p_tokens = set(pred.lower().split())
    r_tokens = set(ref.lower().split())
    if not p_tokens or not r_tokens:
        return 0.0
    common = p_tokens & r_tokens
    prec = len(common) / len(p_tokens)
    rec = len(common) / len(r_tokens)
    return 2 * prec * rec / (prec + rec) if (prec + rec) else 0.0


def answer_faithfulness(answer: str, context: str, threshold: float = FAITHFULNESS_THRESHOLD) -> FaithfulnessReport:
    """Fraction of answer sentences whose long words (more than 4 chars) mostly occur in the context.

    A sentence is supported when at least half of its long words appear in the lowercased
    context. Sentences without long words are not counted.
    """
    haystack = context.lower()
    judged = 0
    supported = 0
    issues = []
    for sentence in split_sentences(answer):
        words = tokenize(sentence, min_length=5)
        if not words:
            continue
        judged += 1
        found = sum(1 for w in words if w in haystack)
        if found * 2 >= len(words):
            supported += 1
        else:
            issues.append(f"Unsupported sentence: {sentence[:100]}")
    confidence = supported / judged if judged else 1.0
    return FaithfulnessReport(faithful=confidence >= threshold, confidence=confidence, issues=issues)


def _source_text(sources: Sequence[Any]) -> str:
    return " ".join(s if isinstance(s, str) else s.text for s in sources).lower()


def hallucination_check(answer: str, sources: Sequence[Any]) -> HallucinationReport:
    """Absolute claims and numbers/units in the answer that the sources never state literally."""
    haystack = _source_text(sources)
    suspicious: list[str] = []
    for pattern in (*_ABSOLUTES, _NUMERIC):
        for m in pattern.finditer(answer):
            phrase = m.group(0).strip()
            if phrase.lower() not in haystack and phrase not in suspicious:
                suspicious.append(phrase)
    return HallucinationReport(has_hallucination=bool(suspicious), suspicious_phrases=suspicious)


def answer_confidence(sources: Sequence[Any], top_n: int = CONFIDENCE_TOP_N) -> float:
    """Mean similarity of the best top_n sources, clamped to [0, 1]; 0.0 without sources."""
    if not sources:
        return 0.0
    best = sorted((s.similarity for s in sources), reverse=True)[:top_n]
    return max(0.0, min(1.0, sum(best) / len(best)))
