"""Ask a question against the ingested collection. Run scripts/ingest.py first.
Usage:
  python run.py "How do I rotate the API key?"
  python run.py --stream --sse "..."   (print server-sent-event frames)
  python run.py --search "..."         (retrieval only, no generation)
"""
import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parent
# Load .env first so OPENAI_API_KEY is set before any other code runs
load_dotenv(dotenv_path=str(ROOT / ".env"), encoding="utf-8")
sys.path.insert(0, str(ROOT))


def main() -> int:
    ap = argparse.ArgumentParser(description="Hybrid RAG question answering")
    ap.add_argument("question", nargs="*")
    ap.add_argument("--top-k", type=int, default=None)
    ap.add_argument("--min-similarity", type=float, default=None)
    ap.add_argument("--max-answer-length", type=int, default=None)
    ap.add_argument("--system-prompt", default=None)
    mode = ap.add_mutually_exclusive_group()
    mode.add_argument("--stream", action="store_true", help="Print the answer as it is generated")
    mode.add_argument("--search", action="store_true", help="Only show retrieved chunks")
    ap.add_argument("--sse", action="store_true", help="With --stream, print raw SSE frames")
    ap.add_argument("--log-level", default="WARNING")
    args = ap.parse_args()

    query = " ".join(args.question).strip() or input("Enter your question: ").strip()
    if not query:
        print("No question given.")
        return 1

    from config.settings import DB_PATH
    from hybrid_rag.config import load_config
    from hybrid_rag.errors import RagError
    from hybrid_rag.logging import configure_logging
    from hybrid_rag.providers import build_providers
    from hybrid_rag.rag import format_sse
    from hybrid_rag.rag.pipeline import RAGPipeline
    from hybrid_rag.schema import ChunkEvent, DoneEvent, ErrorEvent, SourcesEvent
    from hybrid_rag.store import DuckDBVectorStore

    configure_logging(args.log_level)
    config = load_config()
    embedder, generator = build_providers(config)
    if generator is None and not args.search:
        print("OPENAI_API_KEY / OPENAI_BASE_URL not found. Check that .env exists in", ROOT)
        return 1
    store = DuckDBVectorStore(DB_PATH)
    pipeline = RAGPipeline(store, embedder, generator, config)
    try:
        if args.search:
            resp = pipeline.search(query, args.top_k, args.min_similarity)
            for i, c in enumerate(resp.results, start=1):
                print(f"{i}. {c.source_id} #{(c.index or 0) + 1} ({c.similarity:.4f}) {c.text[:120]!r}")
            print(f"({len(resp.results)} results in {resp.took_ms:.1f}ms)")
            return 0

        if args.stream:
            status = 0
            for event in pipeline.stream(query, args.top_k, args.min_similarity, args.max_answer_length, args.system_prompt):
                if args.sse:
                    sys.stdout.write(format_sse(event))
                elif isinstance(event, SourcesEvent):
                    print("Sources:", ", ".join(f"{s.source_id} ({s.similarity:.2f})" for s in event.sources))
                elif isinstance(event, ChunkEvent):
                    sys.stdout.write(event.text)
                    sys.stdout.flush()
                elif isinstance(event, DoneEvent):
                    print(f"\n({event.took_ms:.0f}ms)")
                elif isinstance(event, ErrorEvent):
                    print("\nError:", event.error)
                    status = 1
            return status

        try:
            result = pipeline.ask(query, args.top_k, args.min_similarity, args.max_answer_length, args.system_prompt)
        except RagError as e:
            print("Error:", e)
            return 1
        print("Question:", result.question)
        print("Answer:", result.answer)
        for i, s in enumerate(result.sources, start=1):
            print(f"  [{i}] {s.source_id} #{(s.index or 0) + 1} ({s.similarity:.2f})")
        if result.confidence is not None:
            print(f"Confidence: {result.confidence:.2f}")
        return 0
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
