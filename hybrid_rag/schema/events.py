"""Streaming protocol: a closed set of event types, tagged by `type`."""
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

from .candidate import SourceRef


class SourcesEvent(BaseModel):
    type: Literal["sources"] = "sources"
    sources: list[SourceRef]


class ChunkEvent(BaseModel):
    type: Literal["chunk"] = "chunk"
    text: str


class DoneEvent(BaseModel):
    type: Literal["done"] = "done"
    took_ms: float


class ErrorEvent(BaseModel):
    type: Literal["error"] = "error"
    error: str


StreamEvent = Annotated[
    Union[SourcesEvent, ChunkEvent, DoneEvent, ErrorEvent],
    Field(discriminator="type"),
]

_EVENT_ADAPTER = TypeAdapter(StreamEvent)


def parse_event(data: dict | str | bytes):
    """Parse one serialized event (dict or JSON) back into its typed variant."""
    if isinstance(data, (str, bytes)):
        return _EVENT_ADAPTER.validate_json(data)
    return _EVENT_ADAPTER.validate_python(data)


def is_terminal(event) -> bool:
    return isinstance(event, (DoneEvent, ErrorEvent))
