"""Ingestion batch: clean -> segment -> generate questions -> embed -> store."""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from hybrid_rag.config import RAGConfig
from hybrid_rag.errors import IngestionError, RagError
from hybrid_rag.schema import Chunk, IngestResult
from hybrid_rag.store import VectorStore
from hybrid_rag.text import (
    FIXED,
    clean_text,
    detect_schema,
    normalize_for_embedding,
    parse_csv,
    segment_row,
    segment_with_kinds,
    strip_html,
)
from .questions import QuestionGenerator

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = {".txt", ".md", ".markdown", ".rst"}
HTML_EXTENSIONS = {".html", ".htm"}
# Stored whole as a single code chunk
CODE_EXTENSIONS = {
    ".py", ".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs", ".java", ".c", ".cpp", ".cc", ".h", ".hpp",
    ".cs", ".go", ".rs", ".rb", ".php", ".swift", ".kt", ".scala", ".r", ".sh", ".bash", ".zsh",
    ".sql", ".graphql", ".proto", ".vue", ".svelte", ".css", ".scss", ".sass", ".less",
    ".json", ".yaml", ".yml", ".toml", ".xml", ".tex",
}
SUPPORTED_EXTENSIONS = TEXT_EXTENSIONS | HTML_EXTENSIONS | CODE_EXTENSIONS | {".csv", ".jsonl"}


def load_docs_jsonl(path: Path) -> list[tuple[str, str]]:
    """Load (doc_id, text) from JSONL. Each line: {"id": "...", "text": "..."} or {"doc_id": "...", "content": "..."}."""
    out = []
    with open(path, encoding="utf-8") as f:
        for i, line in enumerate(f):
            line = line.strip()
            if not line:
                continue
            obj = json.loads(line)
            doc_id = obj.get("id", obj.get("doc_id", f"{path.name}:{i}"))
            text = obj.get("text", obj.get("content", obj.get("body", "")))
            out.append((str(doc_id), text))
    return out


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class Ingestor:
    """Turn documents into stored chunks with content and intent vectors.

    Sources are independent: a failing source raises IngestionError from ingest_text /
    ingest_file, and ingest_directory records it and moves on.
    """

    def __init__(
        self,
        store: VectorStore,
        embedder,
        generator=None,
        config: RAGConfig | None = None,
    ) -> None:
        self.store = store
        self.embedder = embedder
        self.config = config or RAGConfig()
        self.questions = QuestionGenerator(generator, self.config.questions_per_chunk)

    def _store_segments(
        self,
        source_id: str,
        segments: list[tuple[str, str | None]],
        base_metadata: dict,
        content: str,
        intents: list[str] | None = None,
    ) -> int:
        """Embed and insert one source's chunks. intents, when given, replace generated questions."""
        texts = [t for t, _ in segments]
        content_vectors = self.embedder.embed_batch([normalize_for_embedding(t) for t in texts])
        model = getattr(self.embedder, "model_name", "unknown")
        ingested_at = _now()
        for i, ((text, kind), vector) in enumerate(zip(segments, content_vectors)):
            questions = list(intents) if intents else self.questions.generate(text)
            intent_vectors = self.embedder.embed_batch([normalize_for_embedding(q) for q in questions]) if questions else []
            start = content.find(text)
            metadata = {
                **base_metadata,
                "total_chunks": len(segments),
                "char_start": start,
                "char_end": start + len(text) if start >= 0 else -1,
                "embedding_model": model,
                "ingestion_date": ingested_at,
            }
            chunk = Chunk(source_id=source_id, index=i, text=text, kind=kind, metadata=metadata)
            self.store.insert(chunk, vector, intent_vectors, questions)
        return len(segments)

    def ingest_text(self, source_id: str, text: str, strategy: str | None = None, metadata: dict | None = None) -> IngestResult:
        """Clean, segment and store one document."""
        strategy = strategy or self.config.strategy
        content = clean_text(text or "")
        if not content:
            return IngestResult(source_id=source_id, chunks_created=0, success=False, error="No text content found")
        try:
            segments = segment_with_kinds(
                content,
                self.config.chunk_size,
                self.config.chunk_overlap,
                strategy,
                self.config.min_chunk_size,
            )
            if not segments:
                return IngestResult(source_id=source_id, chunks_created=0, success=False,
                                    error="No valid chunks created from content")
            logger.info("%s: %d chunks (%s)", source_id, len(segments), strategy)
            n = self._store_segments(
                source_id,
                [(s.text, s.kind) for s in segments],
                {**(metadata or {}), "chunking_strategy": strategy},
                content,
            )
        except (RagError, ValueError) as e:
            raise IngestionError(source_id, str(e), e) from e
        return IngestResult(source_id=source_id, chunks_created=n, success=True)

    def ingest_code(self, source_id: str, code: str, metadata: dict | None = None) -> IngestResult:
        """Store a code file whole, as one chunk tagged 'code'."""
        if not code.strip():
            return IngestResult(source_id=source_id, chunks_created=0, success=False, error="Empty file")
        try:
            n = self._store_segments(
                source_id,
                [(code, "code")],
                {**(metadata or {}), "chunking_strategy": "whole-file"},
                code,
            )
        except Exception as e:
            raise IngestionError(source_id, str(e), e) from e
        return IngestResult(source_id=source_id, chunks_created=n, success=True)

    def ingest_rows(self, rows: list[dict[str, str]], source_id: str, strategy: str | None = None) -> IngestResult:
        """Tabular input: each row is one logical document. A thesis column becomes the row's only intent."""
        if not rows:
            return IngestResult(source_id=source_id, chunks_created=0, success=False, error="No rows found")
        strategy = strategy or self.config.strategy
        mapping = detect_schema(list(rows[0].keys()))
        total = 0
        try:
            for row_index, row in enumerate(rows):
                seg = segment_row(
                    row,
                    mapping,
                    row_index,
                    self.config.chunk_size,
                    self.config.chunk_overlap,
                    strategy,
                    self.config.min_chunk_size,
                )
                if not seg.segments:
                    continue
                row_source = f"{source_id}#row{row_index}"
                total += self._store_segments(
                    row_source,
                    seg.segments,
                    {**seg.metadata, "chunking_strategy": f"row-{strategy}", "source_file": source_id},
                    "\n\n".join(t for t, _ in seg.segments),
                    intents=[seg.intent] if seg.intent else None,
                )
        except (RagError, ValueError) as e:
            raise IngestionError(source_id, str(e), e) from e
        logger.info("%s: %d rows -> %d chunks", source_id, len(rows), total)
        return IngestResult(source_id=source_id, chunks_created=total, success=total > 0,
                            error=None if total else "No valid chunks created from rows")

    def ingest_file(self, path: Path | str, strategy: str | None = None) -> IngestResult:
        """Ingest one file. Any failure is raised as IngestionError tagged with the file name."""
        path = Path(path)
        source_id = path.name
        try:
            raw = path.read_text(encoding="utf-8", errors="replace")
            logger.info("Processing %s", source_id)
            return self._ingest_raw(path, raw, strategy)
        except IngestionError:
            raise
        except Exception as e:
            raise IngestionError(source_id, str(e), e) from e

    def _ingest_raw(self, path: Path, raw: str, strategy: str | None) -> IngestResult:
        source_id = path.name
        ext = path.suffix.lower()
        if ext == ".csv":
            return self.ingest_rows(parse_csv(raw), source_id, strategy)
        if ext == ".jsonl":
            docs = load_docs_jsonl(path)
            created = sum(self.ingest_text(doc_id, text, strategy, {"source_file": source_id}).chunks_created
                          for doc_id, text in docs)
            return IngestResult(source_id=source_id, chunks_created=created, success=created > 0,
                                error=None if created else "No valid chunks created from content")
        if ext in CODE_EXTENSIONS:
            return self.ingest_code(source_id, raw, {"extension": ext})
        if ext in HTML_EXTENSIONS:
            raw = strip_html(raw)
        return self.ingest_text(source_id, raw, strategy)

    def ingest_directory(self, directory: Path | str, strategy: str | None = None) -> list[IngestResult]:
        """Ingest every supported file under directory. A failing file is recorded and skipped."""
        directory = Path(directory)
        files = sorted(p for p in directory.rglob("*") if p.is_file() and p.suffix.lower() in SUPPORTED_EXTENSIONS)
        if not files:
            logger.warning("No supported files found in %s", directory)
            return []
        logger.info("Found %d files to process", len(files))
        results = []
        for path in files:
            try:
                results.append(self.ingest_file(path, strategy))
            except IngestionError as e:
                logger.error("%s", e)
                results.append(IngestResult(source_id=e.source_id, chunks_created=0, success=False, error=str(e)))
        ok = sum(1 for r in results if r.success)
        logger.info("Ingested %d/%d files, %d chunks", ok, len(results), sum(r.chunks_created for r in results))
        return results
