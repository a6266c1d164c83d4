"""Error kinds for the pipeline, input validation, and retry with exponential backoff."""
from __future__ import annotations

import functools
import logging
from typing import Callable, TypeVar

from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_exponential

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RagError(Exception):
    """Base class. `retryable` marks errors that are safe to retry (provider timeouts, rate limits)."""

    retryable = False

    def __init__(self, message: str, cause: BaseException | None = None, retryable: bool | None = None) -> None:
        super().__init__(message)
        self.cause = cause
        if retryable is not None:
            self.retryable = retryable


class ValidationError(RagError):
    """Bad topK / threshold / empty query. Raised before any provider call."""


class EmbeddingError(RagError):
    retryable = True


class GenerationError(RagError):
    retryable = True


class VectorIndexError(RagError):
    """Store or KNN failure. Surfaced immediately, never retried."""


class IngestionError(RagError):
    """Failure while ingesting one source; carries the source id so a batch can move on."""

    def __init__(self, source_id: str, message: str, cause: BaseException | None = None) -> None:
        super().__init__(f"Failed to ingest {source_id}: {message}", cause)
        self.source_id = source_id


class DimensionMismatchError(RagError, ValueError):
    def __init__(self, a: int, b: int) -> None:
        super().__init__(f"Vectors must have the same length (a: {a}, b: {b})")
        self.a = a
        self.b = b


def is_retryable(err: BaseException) -> bool:
    return bool(getattr(err, "retryable", False))


def _log_retry(retry_state) -> None:
    err = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning("Attempt %d failed: %s. Retrying...", retry_state.attempt_number, err)


def retry_call(
    fn: Callable[[], T],
    attempts: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 10.0,
) -> T:
    """Call fn, retrying retryable errors with exponential backoff. Others propagate at once."""
    policy = Retrying(
        retry=retry_if_exception(is_retryable),
        stop=stop_after_attempt(max(1, attempts)),
        wait=wait_exponential(multiplier=initial_delay, min=initial_delay, max=max_delay),
        before_sleep=_log_retry,
        reraise=True,
    )
    return policy(fn)


def retrying(attempts: int = 3, initial_delay: float = 1.0, max_delay: float = 10.0):
    """Decorator form of retry_call."""
    def wrap(fn):
        @functools.wraps(fn)
        def inner(*args, **kwargs):
            return retry_call(lambda: fn(*args, **kwargs), attempts, initial_delay, max_delay)
        return inner
    return wrap


def validate_query(query: str, max_length: int = 1000) -> None:
    if not isinstance(query, str) or not query:
        raise ValidationError("Query must be a non-empty string")
    if not query.strip():
        raise ValidationError("Query cannot be empty or whitespace only")
    if len(query) > max_length:
        raise ValidationError(f"Query too long: {len(query)} characters (max: {max_length})")


def validate_top_k(top_k: int, max_k: int = 100) -> None:
    if isinstance(top_k, bool) or not isinstance(top_k, int) or top_k < 1:
        raise ValidationError("topK must be a positive integer")
    if top_k > max_k:
        raise ValidationError(f"topK too large: {top_k} (max: {max_k})")


def validate_similarity_threshold(threshold: float) -> None:
    if isinstance(threshold, bool) or not isinstance(threshold, (int, float)) or not 0 <= threshold <= 1:
        raise ValidationError("Similarity threshold must be between 0 and 1")
