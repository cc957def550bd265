"""RagSearch Core Types Package - Common type definitions and aliases."""

from .common import (
    CHARS_PER_TOKEN,
    DEFAULT_DIMENSION,
    MAX_TOP_K,
    ChunkId,
    ChunkIndex,
    DocumentId,
    EmbeddingVector,
    Score,
    TenantId,
    TokenCount,
)

__all__ = [
    # Identifiers
    "ChunkId",
    "DocumentId",
    "TenantId",

    # Numeric types
    "ChunkIndex",
    "TokenCount",
    "Score",

    # Complex types
    "EmbeddingVector",

    # Constants
    "CHARS_PER_TOKEN",
    "DEFAULT_DIMENSION",
    "MAX_TOP_K",
]
