"""Test query expansion with and without a generator."""
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(ROOT))

from conftest import FakeGenerator
from hybrid_rag.rag.query_expansion import expand_query, parse_variations, rule_based_variations


def test_parse_numbered_lines() -> None:
    text = "1. How can a password be changed?\n2) Steps to change my password\nshort\n3. tiny\nWhere do I change the password?"
    assert parse_variations(text) == [
        "How can a password be changed?",
        "Steps to change my password",
        "Where do I change the password?",
    ]


def test_rule_based_rewrites() -> None:
    assert rule_based_variations("How do I reset my password") == ["Methods for reset my password", "Ways to reset my password"]
    assert rule_based_variations("What is a refund") == ["Definition of a refund", "Explanation of a refund"]
    assert rule_based_variations("Why use express shipping") == ["Reasons for use express shipping", "Benefits of use express shipping"]
    assert rule_based_variations("shipping times") == ["shipping times methods", "shipping times techniques and principles"]


def test_rule_based_domain_qualifier() -> None:
    out = rule_based_variations("shipping times", count=3, domain="logistics")
    assert out[-1] == "shipping times in logistics"
    assert len(rule_based_variations("shipping in logistics", count=3, domain="logistics")) == 2


def test_expand_without_generator_keeps_original_first() -> None:
    out = expand_query("How to return an item", count=3)
    assert out[0] == "How to return an item"
    assert 1 < len(out) <= 4


def test_expand_with_generator() -> None:
    gen = FakeGenerator(completion="1. How can I send an item back?\n2. How to return an item\n3. What is the return process?")
    out = expand_query("How to return an item", gen, count=3)
    assert out == ["How to return an item", "How can I send an item back?", "What is the return process?"]
    assert "return an item" in gen.calls[0]["prompt"]


def test_expand_is_capped_at_count_plus_one() -> None:
    gen = FakeGenerator(completion="\n".join(f"{i}. variation number {i} of the question" for i in range(1, 8)))
    assert len(expand_query("original question", gen, count=2)) == 3


def test_expand_falls_back_when_generator_fails() -> None:
    out = expand_query("What is a refund", FakeGenerator(fail=True), count=3)
    assert out == ["What is a refund", "Definition of a refund", "Explanation of a refund"]


def test_expand_falls_back_on_unparseable_output() -> None:
    out = expand_query("What is a refund", FakeGenerator(completion="ok"), count=3)
    assert out[0] == "What is a refund"
    assert out[1] == "Definition of a refund"
