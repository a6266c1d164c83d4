"""Load an evaluation set from JSONL."""
from __future__ import annotations

import json
from pathlib import Path


def load_eval_set(path: Path | str) -> list[dict]:
    """One query per line: {"query", "query_id"?, "reference_answer"?, "gold_doc_ids"?}.

    gold_doc_ids are source ids (file names / document ids) and come back as a set.
    A missing file gives an empty list.
    """
    path = Path(path)
    if not path.exists():
        return []
    out = []
    with open(path, encoding="utf-8") as f:
        for i, line in enumerate(f):
            line = line.strip()
            if not line:
                continue
            row = json.loads(line)
            gold = row.get("gold_doc_ids", row.get("gold_sources", [])) or []
            if isinstance(gold, str):
                gold = [gold]
            out.append({
                "query": row.get("query", row.get("question", "")),
                "query_id": str(row.get("query_id", row.get("id", i))),
                "reference_answer": row.get("reference_answer", row.get("answer", "")),
                "gold_doc_ids": {str(g) for g in gold},
            })
    return out
