"""
Configuration management package for RagSearch.

Settings are validated with Pydantic and can be supplied through JSON files,
runtime overrides or ``RAGSEARCH_*`` environment variables.
"""

from .embedding_config import EmbeddingConfig
from .unified_config import (
    ChunkingConfig,
    RagSearchConfig,
    VectorStoreConfig,
    get_config,
    reset_config,
    set_config,
)

__all__ = [
    "ChunkingConfig",
    "EmbeddingConfig",
    "RagSearchConfig",
    "VectorStoreConfig",
    "get_config",
    "reset_config",
    "set_config",
]
