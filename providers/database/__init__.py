"""Database providers package for RagSearch - concrete vector store implementations."""

from .duckdb_provider import DuckDBVectorStore

__all__ = [
    "DuckDBVectorStore",
]
