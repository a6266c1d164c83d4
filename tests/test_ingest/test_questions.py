"""Test hypothetical question generation and parsing."""
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(ROOT))

from conftest import FakeGenerator
from hybrid_rag.ingest import QuestionGenerator, fallback_question, parse_questions

PASSAGE = "Express shipping arrives the next business day when the order is placed before noon."


def test_parse_numbered_questions() -> None:
    text = "Questions:\n1. When does express shipping arrive?\n2. What is the order cutoff time?\n3. Why?"
    assert parse_questions(text) == ["When does express shipping arrive?", "What is the order cutoff time?"]


def test_parse_respects_limit() -> None:
    text = "\n".join(f"{i}. Is this question number {i}?" for i in range(1, 9))
    assert len(parse_questions(text, limit=3)) == 3


def test_parse_falls_back_to_question_marks() -> None:
    text = "When does express shipping arrive? What is the order cutoff time?"
    assert parse_questions(text) == ["When does express shipping arrive?", "What is the order cutoff time?"]


def test_fallback_question_names_key_phrase() -> None:
    q = fallback_question(PASSAGE)
    assert q.startswith("What information does this document contain about ")
    assert q.endswith("?")
    assert "express shipping" in q


def test_generator_questions() -> None:
    gen = FakeGenerator(completion="1. When does express shipping arrive?\n2. What is the cutoff for next-day delivery?")
    questions = QuestionGenerator(gen, count=5).generate(PASSAGE)
    assert questions == ["When does express shipping arrive?", "What is the cutoff for next-day delivery?"]
    assert PASSAGE in gen.calls[0]["prompt"]


def test_without_generator_or_on_failure_uses_fallback() -> None:
    assert QuestionGenerator(None).generate(PASSAGE) == [fallback_question(PASSAGE)]
    assert QuestionGenerator(FakeGenerator(fail=True)).generate(PASSAGE) == [fallback_question(PASSAGE)]
    assert QuestionGenerator(FakeGenerator(completion="")).generate(PASSAGE) == [fallback_question(PASSAGE)]
