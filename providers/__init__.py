"""Providers package for RagSearch - concrete implementations of abstract interfaces."""

from .database import DuckDBVectorStore
from .embeddings import OpenAIEmbeddingProvider

__all__ = [
    # Vector stores
    "DuckDBVectorStore",

    # Embedding providers
    "OpenAIEmbeddingProvider",
]
