"""Ingest documents into the vector store.
Usage:
  Put documents in data/raw/ (txt, md, html, csv, jsonl, or code files).
  Run: python scripts/ingest.py [--path data/raw] [--strategy fixed|structure] [--clear]
  Output: chunks with content and question embeddings in data/processed/vectors.duckdb
"""
import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from config.settings import DATA_RAW, DB_PATH
from hybrid_rag.config import load_config
from hybrid_rag.errors import IngestionError
from hybrid_rag.ingest import Ingestor
from hybrid_rag.logging import configure_logging
from hybrid_rag.providers import build_providers
from hybrid_rag.store import DuckDBVectorStore


def main() -> int:
    ap = argparse.ArgumentParser(description="Ingest documents: segment, generate questions, embed, store")
    ap.add_argument("--path", type=Path, default=DATA_RAW, help="File or directory to ingest")
    ap.add_argument("--db", type=Path, default=DB_PATH, help="DuckDB file")
    ap.add_argument("--strategy", choices=["fixed", "structure"], default=None, help="Chunking strategy (default from config)")
    ap.add_argument("--clear", action="store_true", help="Delete all stored chunks first")
    ap.add_argument("--log-level", default="INFO")
    args = ap.parse_args()

    configure_logging(args.log_level)
    config = load_config()
    embedder, generator = build_providers(config)
    store = DuckDBVectorStore(args.db)
    try:
        if args.clear:
            store.clear()
        ingestor = Ingestor(store, embedder, generator, config)
        if args.path.is_dir():
            results = ingestor.ingest_directory(args.path, args.strategy)
        elif args.path.exists():
            try:
                results = [ingestor.ingest_file(args.path, args.strategy)]
            except IngestionError as e:
                print(e)
                return 1
        else:
            print("Not found:", args.path)
            return 1
        for r in results:
            status = "ok" if r.success else f"failed: {r.error}"
            print(f"{r.source_id}: {r.chunks_created} chunks ({status})")
        print("Total chunks in store:", store.count())
    finally:
        store.close()
    return 0 if any(r.success for r in results) else 1


if __name__ == "__main__":
    sys.exit(main())
