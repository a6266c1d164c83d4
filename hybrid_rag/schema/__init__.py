from .chunk import Chunk, ChunkKind, StoredChunk
from .candidate import Candidate, SourceRef
from .events import ChunkEvent, DoneEvent, ErrorEvent, SourcesEvent, StreamEvent, is_terminal, parse_event
from .results import AskResult, FaithfulnessReport, HallucinationReport, IngestResult, SearchResponse

__all__ = [
    "Chunk",
    "ChunkKind",
    "StoredChunk",
    "Candidate",
    "SourceRef",
    "SourcesEvent",
    "ChunkEvent",
    "DoneEvent",
    "ErrorEvent",
    "StreamEvent",
    "is_terminal",
    "parse_event",
    "AskResult",
    "FaithfulnessReport",
    "HallucinationReport",
    "IngestResult",
    "SearchResponse",
]
