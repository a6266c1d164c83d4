from .segmenter import FIXED, STRUCTURE, Segment, overlap_text, segment, segment_with_kinds
from .structure import SemanticUnit, split_semantic_units
from .rows import CSVSchemaMapping, RowSegments, detect_schema, parse_csv, row_text, segment_row
from .text_utils import (
    clean_text,
    extract_key_phrase,
    jaccard_similarity,
    normalize_for_embedding,
    split_sentences,
    strip_html,
    tokenize,
)

__all__ = [
    "FIXED",
    "STRUCTURE",
    "Segment",
    "overlap_text",
    "segment",
    "segment_with_kinds",
    "SemanticUnit",
    "split_semantic_units",
    "CSVSchemaMapping",
    "RowSegments",
    "detect_schema",
    "parse_csv",
    "row_text",
    "segment_row",
    "clean_text",
    "extract_key_phrase",
    "jaccard_similarity",
    "normalize_for_embedding",
    "split_sentences",
    "strip_html",
    "tokenize",
]
