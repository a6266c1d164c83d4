"""Append search and answer metrics as JSONL for offline analysis and weight tuning."""
import json
import time
from pathlib import Path
from datetime import datetime, timezone

SEARCH_LOG = "search_log.jsonl"
QUERY_LOG = "query_log.jsonl"


def _append(log_dir: Path | str | None, filename: str, record: dict) -> None:
    if not log_dir:
        return
    dir_path = Path(log_dir)
    dir_path.mkdir(parents=True, exist_ok=True)
    record["ts_utc"] = datetime.now(timezone.utc).isoformat()
    with open(dir_path / filename, "a", encoding="utf-8") as f:
        f.write(json.dumps(record, ensure_ascii=False) + "\n")


def log_search_metrics(
    query: str,
    total_chunks: int,
    initial_results: int,
    after_deduplication: int,
    final_results: int,
    avg_similarity: float,
    took_ms: float,
    log_dir: Path | str | None = None,
) -> None:
    """One row per search: how many candidates each stage kept."""
    _append(log_dir, SEARCH_LOG, {
        "query": query,
        "total_chunks": total_chunks,
        "initial_results": initial_results,
        "after_deduplication": after_deduplication,
        "final_results": final_results,
        "avg_similarity": round(avg_similarity, 4),
        "took_ms": round(took_ms, 2),
    })


def log_query_metrics(
    question: str,
    answer_length: int,
    sources: int,
    confidence: float,
    faithfulness: float,
    has_hallucination: bool,
    took_ms: float,
    log_dir: Path | str | None = None,
) -> None:
    """One row per answered question with the advisory quality signals."""
    _append(log_dir, QUERY_LOG, {
        "question": question,
        "answer_length": answer_length,
        "sources": sources,
        "confidence": round(confidence, 4),
        "faithfulness": round(faithfulness, 4),
        "has_hallucination": has_hallucination,
        "took_ms": round(took_ms, 2),
    })


def now_ms() -> float:
    return time.perf_counter() * 1000.0


def elapsed_ms(start_ms: float) -> float:
    return round(now_ms() - start_ms, 2)
