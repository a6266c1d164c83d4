"""Persistent chunk store on DuckDB. Vectors live in BLOB columns written by the vector codec."""
from __future__ import annotations

import json
import logging
import threading
import time
from pathlib import Path
from typing import Sequence

import numpy as np

from hybrid_rag.errors import VectorIndexError
from hybrid_rag.schema import Chunk, StoredChunk
from hybrid_rag.vectors import decode_many, decode_one, encode_many, encode_one, normalize
from .base import KnnHit, VectorStore

logger = logging.getLogger(__name__)

_COLUMNS = "id, source_id, idx, text, kind, metadata, content, intents, questions"

_SCHEMA = """
CREATE SEQUENCE IF NOT EXISTS chunk_ids START 1;
CREATE TABLE IF NOT EXISTS chunks(
    id INTEGER PRIMARY KEY DEFAULT nextval('chunk_ids'),
    source_id VARCHAR NOT NULL,
    idx INTEGER NOT NULL,
    text VARCHAR NOT NULL,
    kind VARCHAR,
    metadata VARCHAR,
    content BLOB NOT NULL,
    intents BLOB,
    questions VARCHAR,
    created_at DOUBLE
);
CREATE INDEX IF NOT EXISTS idx_chunks_source ON chunks(source_id, idx);
"""


def default_db_path() -> Path:
    try:
        from config.settings import DB_PATH
        return DB_PATH
    except Exception:
        return Path(__file__).resolve().parent.parent.parent / "data" / "processed" / "vectors.duckdb"


def _row_to_chunk(row: tuple) -> StoredChunk:
    chunk_id, source_id, idx, text, kind, metadata, content, intents, questions = row
    return StoredChunk(
        id=chunk_id,
        source_id=source_id,
        index=idx,
        text=text,
        kind=kind,
        metadata=json.loads(metadata) if metadata else {},
        content_vector=decode_one(bytes(content)),
        intent_vectors=decode_many(bytes(intents)) if intents else [],
        questions=json.loads(questions) if questions else [],
    )


class DuckDBVectorStore(VectorStore):
    """One table of chunks. KNN is an exact scan: decode content vectors and rank by dot product."""

    def __init__(self, path: Path | str | None = None) -> None:
        import duckdb
        target = str(path) if path is not None else str(default_db_path())
        if target != ":memory:":
            Path(target).parent.mkdir(parents=True, exist_ok=True)
        self.path = target
        self._lock = threading.Lock()
        try:
            self._con = duckdb.connect(target)
            for statement in _SCHEMA.split(";"):
                if statement.strip():
                    self._con.execute(statement)
        except duckdb.Error as e:
            raise VectorIndexError(f"Failed to open vector store at {target}: {e}", e) from e

    def _run(self, sql: str, params: list | None = None) -> list[tuple]:
        import duckdb
        with self._lock:
            try:
                cur = self._con.execute(sql, params or [])
                return cur.fetchall() if cur.description else []
            except duckdb.Error as e:
                raise VectorIndexError(f"Vector store query failed: {e}", e) from e

    def insert(
        self,
        chunk: Chunk,
        content_vector: Sequence[float],
        intent_vectors: Sequence[Sequence[float]] | None = None,
        questions: list[str] | None = None,
    ) -> int:
        rows = self._run(
            "INSERT INTO chunks(source_id, idx, text, kind, metadata, content, intents, questions, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?) RETURNING id",
            [
                chunk.source_id,
                chunk.index,
                chunk.text,
                chunk.kind,
                json.dumps(chunk.metadata, ensure_ascii=False),
                encode_one(normalize(content_vector)),
                encode_many([normalize(v) for v in intent_vectors]) if intent_vectors else None,
                json.dumps(questions or [], ensure_ascii=False),
                time.time(),
            ],
        )
        return int(rows[0][0])

    def knn(self, query_vector: Sequence[float], k: int) -> list[KnnHit]:
        if k <= 0:
            return []
        ids_and_vectors = self._run("SELECT id, content FROM chunks ORDER BY id")
        if not ids_and_vectors:
            return []
        matrix = np.asarray([decode_one(bytes(r[1])) for r in ids_and_vectors], dtype=float)
        q = np.asarray(normalize(query_vector), dtype=float)
        if matrix.shape[1] != q.shape[0]:
            raise VectorIndexError(f"Collection dimension is {matrix.shape[1]}, query has {q.shape[0]}")
        distances = 1.0 - matrix @ q
        order = [int(i) for i in np.argsort(distances, kind="stable")[:k]]
        ids = [ids_and_vectors[i][0] for i in order]
        placeholders = ", ".join("?" for _ in ids)
        by_id = {r[0]: _row_to_chunk(r) for r in self._run(f"SELECT {_COLUMNS} FROM chunks WHERE id IN ({placeholders})", ids)}
        return [KnnHit(chunk=by_id[ids_and_vectors[i][0]], distance=float(distances[i])) for i in order]

    def all_chunks(self) -> list[StoredChunk]:
        return [_row_to_chunk(r) for r in self._run(f"SELECT {_COLUMNS} FROM chunks ORDER BY id")]

    def get_by_range(self, source_id: str, start: int, end: int) -> list[StoredChunk]:
        rows = self._run(
            f"SELECT {_COLUMNS} FROM chunks WHERE source_id = ? AND idx BETWEEN ? AND ? ORDER BY idx",
            [source_id, start, end],
        )
        return [_row_to_chunk(r) for r in rows]

    def count(self) -> int:
        return int(self._run("SELECT COUNT(*) FROM chunks")[0][0])

    def clear(self) -> None:
        self._run("DELETE FROM chunks")
        logger.info("Vector store cleared")

    def close(self) -> None:
        with self._lock:
            self._con.close()
