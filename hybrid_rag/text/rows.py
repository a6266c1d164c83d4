"""Row-based segmentation for tabular input: one logical document per row."""
from __future__ import annotations

import csv
import io

from pydantic import BaseModel, Field

from .segmenter import FIXED, Segment, segment_with_kinds
from .text_utils import strip_html

TITLE_COLUMNS = ("title", "header", "name", "heading")
CONTENT_COLUMNS = ("content", "body", "text", "description", "details")
LINK_COLUMNS = ("link", "url", "href", "uri")
COLLECTION_COLUMNS = ("collection", "source", "category", "group", "folder")
HTML_COLUMNS = ("html", "content_html", "html_content", "raw_html")
THESIS_COLUMNS = ("thesis", "question", "query")


class CSVSchemaMapping(BaseModel):
    """Which input column plays which role. Unmapped roles are None."""
    title: str | None = None
    content: str | None = None
    link: str | None = None
    collection: str | None = None
    html: str | None = None
    thesis: str | None = None
    detected: bool = False


class RowSegments(BaseModel):
    """Chunks derived from one row, plus the row's own intent string when it supplies one."""
    row_index: int
    segments: list[tuple[str, str | None]] = Field(default_factory=list)
    intent: str | None = None
    metadata: dict = Field(default_factory=dict)


def parse_csv(content: str) -> list[dict[str, str]]:
    """Rows as dicts keyed by stripped header names; fully blank rows are skipped."""
    reader = csv.DictReader(io.StringIO(content))
    if reader.fieldnames:
        reader.fieldnames = [h.strip() for h in reader.fieldnames]
    rows = []
    for row in reader:
        values = {k: (v or "").strip() for k, v in row.items() if k is not None}
        if any(values.values()):
            rows.append(values)
    return rows


def detect_schema(columns: list[str]) -> CSVSchemaMapping:
    """Map column names to roles by name. Title and html also match on substrings."""
    mapping = CSVSchemaMapping()
    for col in columns:
        low = col.lower().strip()
        if mapping.title is None and any(p == low or p in low for p in TITLE_COLUMNS):
            mapping.title = col
        if mapping.content is None and low in CONTENT_COLUMNS:
            mapping.content = col
        if mapping.link is None and low in LINK_COLUMNS:
            mapping.link = col
        if mapping.collection is None and low in COLLECTION_COLUMNS:
            mapping.collection = col
        if mapping.html is None and any(p == low or p in low for p in HTML_COLUMNS):
            mapping.html = col
        if mapping.thesis is None and low in THESIS_COLUMNS:
            mapping.thesis = col
    mapping.detected = any(
        getattr(mapping, f) for f in ("title", "content", "link", "collection", "html", "thesis")
    )
    return mapping


def row_text(row: dict[str, str], mapping: CSVSchemaMapping) -> str:
    """Combined document text of a row: title then body. Unmapped tables use every column."""
    if not mapping.detected:
        return "\n".join(f"{k}: {v}" for k, v in row.items() if v)
    body = row.get(mapping.content, "") if mapping.content else ""
    if not body and mapping.html:
        body = strip_html(row.get(mapping.html, ""))
    title = row.get(mapping.title, "") if mapping.title else ""
    return "\n\n".join(p for p in (title, body) if p)


def segment_row(
    row: dict[str, str],
    mapping: CSVSchemaMapping,
    row_index: int = 0,
    max_chunk_size: int = 1200,
    overlap: int = 400,
    strategy: str = FIXED,
    min_chunk_size: int = 50,
) -> RowSegments:
    """A row fitting max_chunk_size is one chunk; a longer one falls back to strategy.

    A thesis/question column, when present, is reused verbatim as the intent of every chunk.
    """
    text = row_text(row, mapping)
    segments: list[Segment] = segment_with_kinds(text, max_chunk_size, overlap, strategy, min_chunk_size)
    thesis = (row.get(mapping.thesis, "") if mapping.thesis else "").strip()
    metadata = {"row_index": row_index}
    for role in ("title", "link", "collection"):
        col = getattr(mapping, role)
        if col and row.get(col):
            metadata[role] = row[col]
    return RowSegments(
        row_index=row_index,
        segments=[(s.text, s.kind) for s in segments],
        intent=thesis or None,
        metadata=metadata,
    )
