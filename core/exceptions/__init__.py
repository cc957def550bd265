"""RagSearch Core Exceptions Package - Core exception classes for error handling.

The hierarchy separates input validation failures, which are raised before any
side effect, from provider and storage failures.
"""

from .core import (
    ConfigurationError,
    DatabaseError,
    EmbeddingError,
    ModelError,
    ProviderError,
    RagSearchError,
    ValidationError,
)

__all__ = [
    # Base exception
    "RagSearchError",

    # Domain-specific exceptions
    "ValidationError",
    "ModelError",
    "EmbeddingError",
    "DatabaseError",
    "ConfigurationError",
    "ProviderError",
]
