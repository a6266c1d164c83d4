"""Evaluate hybrid-weight variants on an eval set.
Usage:
  Create eval set data/labels/eval_set.jsonl with one JSON per line:
    {"query": "...", "query_id": "1", "reference_answer": "...", "gold_doc_ids": ["guide.md"]}
  reference_answer and gold_doc_ids are optional; gold_doc_ids are source ids (file names).
  Run: python scripts/run_eval.py
  Options: --eval-set, --variants, --top-k, --answer, --output, --format (table|csv|json)
"""
import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from config.settings import DATA_LABELS, DB_PATH
from hybrid_rag.config import load_config
from hybrid_rag.evaluation import WEIGHT_VARIANTS, format_table, load_eval_set, run_eval
from hybrid_rag.logging import configure_logging
from hybrid_rag.providers import build_providers
from hybrid_rag.rag.pipeline import RAGPipeline
from hybrid_rag.store import DuckDBVectorStore


def to_csv(rows: list[dict]) -> str:
    keys = []
    for r in rows:
        for k in r.get("metrics", {}):
            if k not in keys:
                keys.append(k)
    lines = [",".join(["name"] + keys)]
    for r in rows:
        lines.append(",".join([r["name"]] + [str(r["metrics"].get(k, "")) for k in keys]))
    return "\n".join(lines) + "\n"


def main() -> None:
    ap = argparse.ArgumentParser(description="Compare hybrid weight variants")
    ap.add_argument("--eval-set", type=Path, default=DATA_LABELS / "eval_set.jsonl", help="Path to eval set JSONL")
    ap.add_argument("--db", type=Path, default=DB_PATH, help="DuckDB file built by scripts/ingest.py")
    ap.add_argument("--variants", nargs="+", default=list(WEIGHT_VARIANTS), help=f"Any of: {' '.join(WEIGHT_VARIANTS)}")
    ap.add_argument("--top-k", type=int, default=5)
    ap.add_argument("--min-similarity", type=float, default=None, help="Override the similarity threshold")
    ap.add_argument("--answer", action="store_true", help="Also generate answers for items with reference_answer")
    ap.add_argument("--output", type=Path, default=None, help="Write result to file")
    ap.add_argument("--format", choices=["table", "csv", "json"], default="table")
    args = ap.parse_args()

    configure_logging("WARNING")
    eval_set = load_eval_set(args.eval_set)
    if not eval_set:
        args.eval_set.parent.mkdir(parents=True, exist_ok=True)
        sample = [
            {"query": "What is the refund policy?", "query_id": "1", "reference_answer": "", "gold_doc_ids": []},
            {"query": "How do I reset my password?", "query_id": "2", "reference_answer": "", "gold_doc_ids": []},
        ]
        with open(args.eval_set, "w", encoding="utf-8") as f:
            for s in sample:
                f.write(json.dumps(s) + "\n")
        print(f"Created sample {args.eval_set}. Add gold_doc_ids and re-run to see metrics.")
        sys.exit(1)

    overrides = {"log_search_metrics": False}
    if args.min_similarity is not None:
        overrides["similarity_threshold"] = args.min_similarity
    base = load_config(**overrides)
    embedder, generator = build_providers(base)
    store = DuckDBVectorStore(args.db)
    try:
        pipelines = {}
        for name in args.variants:
            if name not in WEIGHT_VARIANTS:
                ap.error(f"unknown variant {name}")
            q, c = WEIGHT_VARIANTS[name]
            config = base.model_copy(update={"question_weight": q, "content_weight": c})
            pipelines[name] = RAGPipeline(store, embedder, generator, config)
        rows = run_eval(eval_set, pipelines, k=args.top_k, answer=args.answer and generator is not None)
    finally:
        store.close()

    if args.format == "table":
        out = format_table(rows)
    elif args.format == "csv":
        out = to_csv(rows)
    else:
        out = json.dumps(rows, indent=2)
    print(out)
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(out)
        print(f"Wrote {args.output}")


if __name__ == "__main__":
    main()
