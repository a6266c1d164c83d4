"""Text helpers shared by segmentation, deduplication and answer checks."""
import html
import re

_NON_WORD = re.compile(r"[^\w\s]")
_SENTENCE_END = re.compile(r"(?<=[.!?])\s+")

_STOP_WORDS = {
    "this", "that", "with", "from", "have", "been", "will",
    "would", "could", "should", "there", "their", "these", "those",
}


def tokenize(text: str, min_length: int = 3) -> list[str]:
    """Lowercased, punctuation-stripped words of at least min_length characters."""
    return [t for t in _NON_WORD.sub(" ", text.lower()).split() if len(t) >= min_length]


def jaccard_similarity(text1: str, text2: str) -> float:
    """Token-set Jaccard similarity (tokens longer than 2 characters). 0.0 when both are empty."""
    tokens1 = set(tokenize(text1))
    tokens2 = set(tokenize(text2))
    union = tokens1 | tokens2
    if not union:
        return 0.0
    return len(tokens1 & tokens2) / len(union)


def split_sentences(text: str) -> list[str]:
    """Split after ., ! or ? followed by whitespace. Every character ends up in some sentence."""
    return [s for s in (part.strip() for part in _SENTENCE_END.split(text)) if s]


def extract_key_phrase(text: str, max_words: int = 3) -> str:
    words = [w for w in _NON_WORD.sub(" ", text.lower()).split() if len(w) > 3 and w not in _STOP_WORDS]
    return " ".join(words[:max_words]) or "this topic"


def normalize_for_embedding(text: str) -> str:
    """Fold spelling variants so 'circa-max' and "athlete's" embed like 'circa max' and 'athletes'."""
    normalized = re.sub(r"(\w)-(\w)", r"\1 \2", text)
    normalized = normalized.replace("'", "")
    for ligature, expanded in (("æ", "ae"), ("œ", "oe"), ("ﬁ", "fi"), ("ﬂ", "fl")):
        normalized = normalized.replace(ligature, expanded)
    normalized = re.sub(r"\s+", " ", normalized)
    return normalized.lower().strip()


def clean_text(text: str) -> str:
    """Remove page numbers, rule lines and hyphenated line breaks left over from extraction."""
    cleaned = text.replace("\r\n", "\n")
    cleaned = re.sub(r"\bPage\s+\d+\s+of\s+\d+\b", "", cleaned, flags=re.I)
    cleaned = re.sub(r"^[ \t]*\d+[ \t]*$", "", cleaned, flags=re.M)
    cleaned = re.sub(r"^[-_=]{3,}$", "", cleaned, flags=re.M)
    cleaned = re.sub(r"(\w+)-[ \t]*\n[ \t]*(\w+)", r"\1\2", cleaned)
    cleaned = re.sub(r"[ \t]+", " ", cleaned)
    cleaned = "\n".join(line.strip() for line in cleaned.split("\n"))
    cleaned = re.sub(r"\n{3,}", "\n\n", cleaned)
    return cleaned.strip()


def strip_html(markup: str) -> str:
    """Plain text from an HTML fragment (tabular rows sometimes carry HTML instead of text)."""
    text = re.sub(r"<(script|style)[^>]*>.*?</\1>", "", markup, flags=re.I | re.S)
    text = re.sub(r"<br\s*/?>|</div>|</li>", "\n", text, flags=re.I)
    text = re.sub(r"</p>", "\n\n", text, flags=re.I)
    text = html.unescape(re.sub(r"<[^>]+>", "", text))
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\n\s*\n\s*\n+", "\n\n", text)
    return "\n".join(line.strip() for line in text.split("\n")).strip()
