from .base import KnnHit, VectorStore
from .memory import InMemoryVectorStore
from .duckdb_store import DuckDBVectorStore, default_db_path

__all__ = ["KnnHit", "VectorStore", "InMemoryVectorStore", "DuckDBVectorStore", "default_db_path"]
