"""RagSearch Core Package - Domain models, types, and exceptions.

This package contains the pieces shared by every layer: the Document, Chunk
and SimilarityResult models, type aliases, the exception hierarchy, the
vector and metadata codec and the metrics hooks.
"""

from .exceptions import (
    ConfigurationError,
    DatabaseError,
    EmbeddingError,
    ModelError,
    RagSearchError,
    ValidationError,
)
from .models import Chunk, Document, SimilarityResult
from .types import ChunkId, DocumentId, EmbeddingVector, TenantId

__all__ = [
    # Domain Models
    "Document",
    "Chunk",
    "SimilarityResult",

    # Types
    "ChunkId",
    "DocumentId",
    "TenantId",
    "EmbeddingVector",

    # Exceptions
    "RagSearchError",
    "ValidationError",
    "ModelError",
    "EmbeddingError",
    "DatabaseError",
    "ConfigurationError",
]

__version__ = "0.1.0"
