from .codec import (
    cosine_similarity,
    decode_many,
    decode_one,
    dot_product,
    encode_many,
    encode_one,
    max_cosine_similarity,
    normalize,
)

__all__ = [
    "encode_one",
    "decode_one",
    "encode_many",
    "decode_many",
    "normalize",
    "cosine_similarity",
    "dot_product",
    "max_cosine_similarity",
]
