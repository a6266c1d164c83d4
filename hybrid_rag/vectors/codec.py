"""Compact binary form for embeddings, plus the similarity primitives used by scoring.

This is the only module that reads or writes raw vector bytes.

Single vector: little-endian float32 values, no header (the dimension comes from
the collection). Several vectors: an 8-byte header of two little-endian uint32
(count, dim) followed by count * dim float32 values in row-major order.
"""
from __future__ import annotations

from typing import Sequence

import numpy as np

from hybrid_rag.errors import DimensionMismatchError

FLOAT = np.dtype("<f4")
UINT = np.dtype("<u4")
HEADER_SIZE = 8

Vector = Sequence[float] | np.ndarray


def encode_one(vector: Vector) -> bytes:
    return np.asarray(vector, dtype=FLOAT).reshape(-1).tobytes()


def decode_one(data: bytes) -> list[float]:
    if len(data) % FLOAT.itemsize:
        raise ValueError(f"Vector blob length {len(data)} is not a multiple of {FLOAT.itemsize}")
    return np.frombuffer(data, dtype=FLOAT).astype(float).tolist()


def encode_many(vectors: Sequence[Vector]) -> bytes:
    """Encode a list of same-dimension vectors. An empty list encodes to a header with count 0."""
    if len(vectors) == 0:
        return np.array([0, 0], dtype=UINT).tobytes()
    dim = len(vectors[0])
    for v in vectors:
        if len(v) != dim:
            raise DimensionMismatchError(dim, len(v))
    matrix = np.asarray(vectors, dtype=FLOAT).reshape(len(vectors), dim)
    header = np.array([len(vectors), dim], dtype=UINT)
    return header.tobytes() + matrix.tobytes()


def decode_many(data: bytes) -> list[list[float]]:
    """Inverse of encode_many. Empty bytes decode to an empty list."""
    if not data:
        return []
    if len(data) < HEADER_SIZE:
        raise ValueError(f"Vector list blob too short: {len(data)} bytes")
    count, dim = (int(x) for x in np.frombuffer(data[:HEADER_SIZE], dtype=UINT))
    expected = HEADER_SIZE + count * dim * FLOAT.itemsize
    if len(data) != expected:
        raise ValueError(f"Vector list blob has {len(data)} bytes, header says {expected}")
    if count == 0:
        return []
    matrix = np.frombuffer(data, dtype=FLOAT, offset=HEADER_SIZE).reshape(count, dim)
    return matrix.astype(float).tolist()


def normalize(vector: Vector) -> list[float]:
    """Scale to unit L2 length. A zero vector is returned unchanged."""
    arr = np.asarray(vector, dtype=float)
    magnitude = float(np.linalg.norm(arr))
    if magnitude == 0:
        return arr.tolist()
    return (arr / magnitude).tolist()


def _pair(a: Vector, b: Vector) -> tuple[np.ndarray, np.ndarray]:
    va = np.asarray(a, dtype=float).reshape(-1)
    vb = np.asarray(b, dtype=float).reshape(-1)
    if va.shape[0] != vb.shape[0]:
        raise DimensionMismatchError(va.shape[0], vb.shape[0])
    return va, vb


def cosine_similarity(a: Vector, b: Vector) -> float:
    va, vb = _pair(a, b)
    na = np.linalg.norm(va)
    nb = np.linalg.norm(vb)
    if na == 0 or nb == 0:
        return 0.0
    return float(np.dot(va, vb) / (na * nb))


def dot_product(a: Vector, b: Vector) -> float:
    """Similarity for vectors already known to be unit length."""
    va, vb = _pair(a, b)
    return float(np.dot(va, vb))


def max_cosine_similarity(query: Vector, vectors: Sequence[Vector]) -> float:
    """Best cosine similarity between query and any of vectors; 0.0 when there are none."""
    if len(vectors) == 0:
        return 0.0
    q = np.asarray(query, dtype=float).reshape(-1)
    m = np.asarray(vectors, dtype=float)
    if m.ndim != 2 or m.shape[1] != q.shape[0]:
        raise DimensionMismatchError(q.shape[0], m.shape[-1] if m.ndim else 0)
    qn = np.linalg.norm(q)
    norms = np.linalg.norm(m, axis=1)
    if qn == 0:
        return 0.0
    safe = np.where(norms == 0, 1.0, norms)
    sims = np.where(norms == 0, 0.0, (m @ q) / (safe * qn))
    return float(sims.max())
