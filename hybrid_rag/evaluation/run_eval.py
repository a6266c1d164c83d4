"""Compare pipeline configurations on an eval set: retrieval and answer metrics per configuration."""
from __future__ import annotations

from typing import Any

from hybrid_rag.evaluation.answer_metrics import exact_match, f1_score
from hybrid_rag.evaluation.retrieval_metrics import evaluate_results, hit_at_k

# Hybrid weight variants (question, content) seen across earlier tuning rounds
WEIGHT_VARIANTS = {
    "q0.6_c0.4": (0.6, 0.4),
    "q0.7_c0.3": (0.7, 0.3),
    "q0.5_c0.5": (0.5, 0.5),
}


def run_pipeline(pipeline, eval_set: list[dict], k: int = 5, answer: bool = False) -> list[dict]:
    """Run one pipeline over the eval set. Returns one row per query with results and optional answer."""
    rows = []
    for item in eval_set:
        if answer and item.get("reference_answer"):
            res = pipeline.ask(item["query"], top_k=k)
            rows.append({"item": item, "results": res.sources, "answer": res.answer, "took_ms": res.took_ms})
        else:
            res = pipeline.search(item["query"], top_k=k)
            rows.append({"item": item, "results": res.results, "answer": None, "took_ms": res.took_ms})
    return rows


def compute_metrics(rows: list[dict], k: int = 5) -> dict[str, float]:
    """Average per-query metrics. Gold ids are judged at document (source_id) level."""
    sums: dict[str, list[float]] = {}

    def add(name: str, value: float) -> None:
        sums.setdefault(name, []).append(value)

    for row in rows:
        item = row["item"]
        gold = item.get("gold_doc_ids") or set()
        if gold:
            add("hit_at_k", hit_at_k(row["results"], gold, k, key="source_id"))
            for name, value in evaluate_results(row["results"], gold, k, key="source_id").items():
                add(name, value)
        ref = item.get("reference_answer", "")
        if ref and row["answer"] is not None:
            add("exact_match", exact_match(row["answer"], ref))
            add("f1", f1_score(row["answer"], ref))
        add("avg_latency_ms", row["took_ms"])
    metrics = {"n_queries": float(len(rows))} if rows else {}
    metrics.update({name: sum(vals) / len(vals) for name, vals in sums.items()})
    return metrics


def run_eval(eval_set: list[dict], pipelines: dict[str, Any], k: int = 5, answer: bool = False) -> list[dict[str, Any]]:
    """Run every named pipeline. Returns list of {name, metrics}."""
    if not eval_set:
        return []
    out = []
    for name, pipeline in pipelines.items():
        rows = run_pipeline(pipeline, eval_set, k=k, answer=answer)
        out.append({"name": name, "metrics": compute_metrics(rows, k)})
    return out


def format_table(rows: list[dict[str, Any]]) -> str:
    """Format comparison rows as a text table."""
    if not rows:
        return "No results."
    metric_keys: list[str] = []
    for r in rows:
        for key in r.get("metrics", {}):
            if key not in metric_keys:
                metric_keys.append(key)
    keys = ["name"] + metric_keys
    col = 14
    lines = [
        " | ".join(k[:col].ljust(col) for k in keys),
        "-+-".join("-" * col for _ in keys),
    ]
    for r in rows:
        cells = [r["name"][:col].ljust(col)]
        for key in metric_keys:
            v = r["metrics"].get(key)
            cells.append("".ljust(col) if v is None else f"{v:.4f}".rjust(col))
        lines.append(" | ".join(cells))
    return "\n".join(lines)
