"""Test the semantic unit scanner."""
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(ROOT))

from hybrid_rag.text import split_semantic_units


def test_prose_paragraphs() -> None:
    units = split_semantic_units("First paragraph line one.\nline two.\n\nSecond paragraph.")
    assert [u.kind for u in units] == ["prose", "prose"]
    assert units[0].text == "First paragraph line one.\nline two."


def test_fenced_code_includes_fences() -> None:
    text = "Intro.\n\n```\nx = 1\n\ny = 2\n```\nAfter."
    units = split_semantic_units(text)
    assert [u.kind for u in units] == ["prose", "code", "prose"]
    assert units[1].text == "```\nx = 1\n\ny = 2\n```"


def test_unclosed_fence_runs_to_end() -> None:
    units = split_semantic_units("~~~\nprint('hi')\nmore()")
    assert units == [("code", "~~~\nprint('hi')\nmore()")]


def test_sql_ends_at_terminator() -> None:
    text = "select id\nfrom users\nwhere active;\nThe query above lists users."
    units = split_semantic_units(text)
    assert units[0] == ("sql", "select id\nfrom users\nwhere active;")
    assert units[1].kind == "prose"


def test_sql_ends_at_blank_line() -> None:
    units = split_semantic_units("UPDATE t SET a = 1\nWHERE b = 2\n\nDone.")
    assert units[0] == ("sql", "UPDATE t SET a = 1\nWHERE b = 2")
    assert units[1] == ("prose", "Done.")


def test_list_with_continuation_and_blank_between_items() -> None:
    text = "- one\n  continued\n\n- two\n1. three\n\nNot a list."
    units = split_semantic_units(text)
    assert units[0] == ("list", "- one\n  continued\n\n- two\n1. three")
    assert units[1] == ("prose", "Not a list.")


def test_list_ends_at_plain_line() -> None:
    units = split_semantic_units("* a\n* b\nplain text")
    assert units == [("list", "* a\n* b"), ("prose", "plain text")]
