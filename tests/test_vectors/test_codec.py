"""Test vector encoding, normalization and similarity primitives."""
import math
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(ROOT))

from hybrid_rag.errors import DimensionMismatchError
from hybrid_rag.vectors import (
    cosine_similarity,
    decode_many,
    decode_one,
    dot_product,
    encode_many,
    encode_one,
    max_cosine_similarity,
    normalize,
)


def test_single_vector_is_raw_float32() -> None:
    v = [0.5, -1.25, 3.0]
    data = encode_one(v)
    assert len(data) == 4 * 3
    assert decode_one(data) == v


def test_single_vector_little_endian() -> None:
    assert encode_one([1.0]) == b"\x00\x00\x80\x3f"


def test_decode_one_rejects_ragged_blob() -> None:
    with pytest.raises(ValueError):
        decode_one(b"\x00\x00\x00")


def test_many_vectors_header_and_size() -> None:
    vectors = [[0.1, 0.2], [0.3, 0.4], [0.5, 0.6]]
    data = encode_many(vectors)
    assert len(data) == 8 + 4 * 3 * 2
    assert data[:8] == b"\x03\x00\x00\x00\x02\x00\x00\x00"
    decoded = decode_many(data)
    assert len(decoded) == 3
    for got, want in zip(decoded, vectors):
        assert got == pytest.approx(want, abs=1e-6)


def test_empty_vector_list() -> None:
    data = encode_many([])
    assert len(data) == 8
    assert decode_many(data) == []
    assert decode_many(b"") == []


def test_encode_many_rejects_mixed_dimensions() -> None:
    with pytest.raises(DimensionMismatchError):
        encode_many([[1.0, 2.0], [1.0]])


def test_decode_many_rejects_truncated_blob() -> None:
    data = encode_many([[1.0, 2.0]])
    with pytest.raises(ValueError):
        decode_many(data[:-1])
    with pytest.raises(ValueError):
        decode_many(b"\x01\x00")


def test_normalize() -> None:
    assert normalize([3.0, 4.0]) == pytest.approx([0.6, 0.8])
    assert normalize([0.0, 0.0]) == [0.0, 0.0]


def test_cosine_bounds_and_zero_vector() -> None:
    a = [1.0, 2.0, 3.0]
    assert cosine_similarity(a, a) == pytest.approx(1.0)
    assert cosine_similarity(a, [-x for x in a]) == pytest.approx(-1.0)
    zero = cosine_similarity(a, [0.0, 0.0, 0.0])
    assert zero == 0.0 and not math.isnan(zero)


def test_dot_product_of_unit_vectors_in_range() -> None:
    a = normalize([1.0, 2.0, -0.5])
    b = normalize([-3.0, 0.1, 2.0])
    assert -1.0 <= dot_product(a, b) <= 1.0
    assert dot_product(a, a) == pytest.approx(1.0)


def test_dimension_mismatch() -> None:
    with pytest.raises(DimensionMismatchError):
        cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0])
    with pytest.raises(DimensionMismatchError):
        dot_product([1.0], [1.0, 2.0])


def test_max_cosine_similarity() -> None:
    q = [1.0, 0.0]
    assert max_cosine_similarity(q, []) == 0.0
    assert max_cosine_similarity(q, [[0.0, 1.0], [1.0, 1.0], [0.0, 0.0]]) == pytest.approx(math.sqrt(0.5))
