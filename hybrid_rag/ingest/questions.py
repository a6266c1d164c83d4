"""Hypothetical questions a chunk answers; their embeddings are the chunk's intent vectors."""
from __future__ import annotations

import logging
import re

from hybrid_rag.errors import RagError
from hybrid_rag.text import extract_key_phrase

logger = logging.getLogger(__name__)

QUESTIONS_PER_CHUNK = 5

QUESTION_GENERATION_PROMPT = (
    "You write the questions a passage answers. Given a passage, write short, specific questions "
    "that a reader could answer from the passage alone. Output one numbered question per line and nothing else."
)

_NUMBERED = re.compile(r"^\d+[.):\-\s]+(.+)")
_ECHO = re.compile(r"Text:|Questions?:|Generate \d+ questions", re.I)


def parse_questions(text: str, limit: int = QUESTIONS_PER_CHUNK) -> list[str]:
    """Numbered lines or lines ending in '?', longer than 10 characters.

    When no line qualifies, the text is split on '?' instead.
    """
    clean = _ECHO.sub("", text).strip()
    questions = []
    for line in clean.splitlines():
        line = line.strip()
        if not line:
            continue
        m = _NUMBERED.match(line)
        if m:
            question = m.group(1).strip()
            if len(question) > 10:
                questions.append(question)
        elif line.endswith("?") and len(line) > 10:
            questions.append(line)
    if not questions:
        questions = [q.strip() + "?" for q in clean.split("?") if len(q.strip()) > 10]
    return questions[:limit]


def fallback_question(chunk_text: str) -> str:
    return f"What information does this document contain about {extract_key_phrase(chunk_text)}?"


class QuestionGenerator:
    """Ask the generator for questions; degrade to one generic question when it fails or is absent."""

    def __init__(self, generator=None, count: int = QUESTIONS_PER_CHUNK) -> None:
        self.generator = generator
        self.count = count

    def generate(self, chunk_text: str) -> list[str]:
        if self.generator is None or self.count <= 0:
            return [fallback_question(chunk_text)]
        prompt = f"Text:\n{chunk_text}\n\nGenerate {self.count} questions that this text would answer:"
        try:
            text = self.generator.complete(QUESTION_GENERATION_PROMPT, prompt, temperature=0.7)
        except RagError as e:
            logger.error("Error generating questions: %s", e)
            return [fallback_question(chunk_text)]
        return parse_questions(text, self.count) or [fallback_question(chunk_text)]
