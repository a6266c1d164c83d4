"""Results returned by search, ask, ingestion and the answer checks."""
from pydantic import BaseModel, Field

from .candidate import Candidate, SourceRef


class FaithfulnessReport(BaseModel):
    faithful: bool
    confidence: float  # fraction of answer sentences supported by the context
    issues: list[str] = Field(default_factory=list)


class HallucinationReport(BaseModel):
    has_hallucination: bool
    suspicious_phrases: list[str] = Field(default_factory=list)


class SearchResponse(BaseModel):
    query: str
    results: list[Candidate]
    took_ms: float


class AskResult(BaseModel):
    question: str
    answer: str
    sources: list[SourceRef]
    took_ms: float
    confidence: float | None = None
    faithfulness: FaithfulnessReport | None = None
    hallucination: HallucinationReport | None = None


class IngestResult(BaseModel):
    source_id: str
    chunks_created: int
    success: bool
    error: str | None = None
