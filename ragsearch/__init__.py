"""RagSearch - Tenant-scoped chunking and vector retrieval for RAG pipelines."""

__version__ = "0.1.0"
__description__ = "Tenant-scoped chunking and vector retrieval for RAG pipelines"

# Import modules only when needed so that config-only users skip duckdb/openai
__all__ = [
    "Chunker",
    "DuckDBVectorStore",
    "RagSearchConfig",
]


def __getattr__(name: str):
    """Lazy import of the public entry points."""
    if name == "Chunker":
        from .chunker import Chunker
        return Chunker
    elif name == "DuckDBVectorStore":
        from providers.database.duckdb_provider import DuckDBVectorStore
        return DuckDBVectorStore
    elif name == "RagSearchConfig":
        from .core.config.unified_config import RagSearchConfig
        return RagSearchConfig
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
