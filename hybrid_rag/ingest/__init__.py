from .ingest import CODE_EXTENSIONS, SUPPORTED_EXTENSIONS, Ingestor, load_docs_jsonl
from .questions import QuestionGenerator, fallback_question, parse_questions

__all__ = [
    "CODE_EXTENSIONS",
    "SUPPORTED_EXTENSIONS",
    "Ingestor",
    "load_docs_jsonl",
    "QuestionGenerator",
    "fallback_question",
    "parse_questions",
]
