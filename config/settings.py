"""Load settings from env and config files."""
import os
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent
# Always load .env from project root so provider keys are found no matter where you run from
load_dotenv(dotenv_path=str(PROJECT_ROOT / ".env"), encoding="utf-8")
DATA_RAW = Path(os.getenv("DATA_RAW", str(PROJECT_ROOT / "data" / "raw")))
DATA_PROCESSED = Path(os.getenv("DATA_PROCESSED", str(PROJECT_ROOT / "data" / "processed")))
DATA_LABELS = Path(os.getenv("DATA_LABELS", str(PROJECT_ROOT / "data" / "labels")))
LOG_DIR = Path(os.getenv("LOG_DIR", str(PROJECT_ROOT / "data" / "processed" / "logs")))
DB_PATH = Path(os.getenv("DB_PATH", str(DATA_PROCESSED / "vectors.duckdb")))
RAG_CONFIG_PATH = Path(os.getenv("RAG_CONFIG_PATH", str(PROJECT_ROOT / "config" / "rag.yaml")))

# Providers: "sentence-transformers" (local) or "openai" (OpenAI / LM Studio / any compatible server)
PROVIDER_TYPE = os.getenv("PROVIDER_TYPE", "sentence-transformers")
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "all-MiniLM-L6-v2")
LLM_MODEL = os.getenv("LLM_MODEL", "gpt-4o-mini")
OPENAI_API_KEY = (os.getenv("OPENAI_API_KEY") or "").strip()
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL") or None
