"""Server-sent-events framing for stream events."""
from __future__ import annotations

from typing import Iterable, Iterator

from hybrid_rag.schema import StreamEvent


def format_sse(event: StreamEvent) -> str:
    """`data: {json}` followed by a blank line."""
    return f"data: {event.model_dump_json()}\n\n"


def sse_stream(events: Iterable[StreamEvent]) -> Iterator[str]:
    """Frame each event; closes the event generator if the consumer stops early."""
    try:
        for event in events:
            yield format_sse(event)
    finally:
        close = getattr(events, "close", None)
        if close is not None:
            close()
