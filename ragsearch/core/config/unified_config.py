"""
Unified configuration system for RagSearch.

This module provides a single, type-safe configuration model for chunking,
the vector store and the embedding provider, with hierarchical loading from
JSON files, runtime overrides and environment variables.
"""

import json
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .embedding_config import EmbeddingConfig


class ChunkingConfig(BaseModel):
    """Chunking configuration."""

    chunk_size: int = Field(
        default=400,
        ge=1,
        description="Maximum estimated tokens per chunk"
    )

    chunk_overlap: int = Field(
        default=100,
        ge=0,
        description="Tokens repeated between consecutive chunks"
    )

    @model_validator(mode='after')
    def validate_overlap(self) -> 'ChunkingConfig':
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError(
                f"chunk_overlap ({self.chunk_overlap}) must be less than chunk_size ({self.chunk_size})"
            )
        return self


class VectorStoreConfig(BaseModel):
    """Vector store configuration."""

    path: str = Field(
        default='.ragsearch.duckdb',
        description="Path to DuckDB database file or ':memory:'"
    )

    dimension: int = Field(
        default=768,
        ge=1,
        le=8192,
        description="Expected embedding dimension"
    )

    hnsw_index: bool = Field(
        default=True,
        description="Build an HNSW index with the DuckDB vss extension"
    )

    hnsw_m: int = Field(
        default=16,
        ge=2,
        le=128,
        description="HNSW graph degree"
    )

    hnsw_ef_construction: int = Field(
        default=64,
        ge=8,
        le=1024,
        description="HNSW candidate list size during construction"
    )


class RagSearchConfig(BaseSettings):
    """
    Unified configuration for RagSearch.

    Configuration Sources (in order of precedence):
    1. Runtime parameters (highest priority)
    2. Project config file (.ragsearch.json)
    3. User config file (~/.ragsearch/config.json)
    4. Environment variables (RAGSEARCH_*)
    5. Default values (lowest priority)

    Environment Variable Examples:
        RAGSEARCH_CHUNKING__CHUNK_SIZE=512
        RAGSEARCH_CHUNKING__CHUNK_OVERLAP=64
        RAGSEARCH_VECTOR_STORE__PATH=vectors.duckdb
        RAGSEARCH_VECTOR_STORE__DIMENSION=768
        RAGSEARCH_EMBEDDING__BASE_URL=http://localhost:11434/v1
        RAGSEARCH_DEBUG=true
    """

    model_config = SettingsConfigDict(
        env_prefix='RAGSEARCH_',
        env_nested_delimiter='__',
        case_sensitive=False,
        validate_default=True,
        extra='ignore',
        env_file=None,
    )

    chunking: ChunkingConfig = Field(
        default_factory=ChunkingConfig,
        description="Chunking configuration"
    )

    vector_store: VectorStoreConfig = Field(
        default_factory=VectorStoreConfig,
        description="Vector store configuration"
    )

    embedding: EmbeddingConfig = Field(
        default_factory=EmbeddingConfig,
        description="Embedding provider configuration"
    )

    debug: bool = Field(
        default=False,
        description="Enable debug logging"
    )

    @model_validator(mode='after')
    def validate_dimensions_match(self) -> 'RagSearchConfig':
        if self.embedding.dimensions != self.vector_store.dimension:
            raise ValueError(
                f"embedding.dimensions ({self.embedding.dimensions}) must equal "
                f"vector_store.dimension ({self.vector_store.dimension})"
            )
        return self

    @classmethod
    def load_hierarchical(cls,
                          project_dir: Path | None = None,
                          **override_values: Any) -> 'RagSearchConfig':
        """
        Load configuration from hierarchical sources.

        Args:
            project_dir: Project directory to search for .ragsearch.json
            **override_values: Runtime parameter overrides

        Returns:
            Loaded and validated configuration
        """
        config_data: dict[str, Any] = {}

        user_config_path = Path.home() / '.ragsearch' / 'config.json'
        _merge(config_data, _read_json(user_config_path))

        if project_dir is None:
            project_dir = Path.cwd()
        _merge(config_data, _read_json(project_dir / '.ragsearch.json'))

        _merge(config_data, override_values)

        if 'embedding' in config_data and isinstance(config_data['embedding'], dict):
            config_data['embedding'] = EmbeddingConfig(**config_data['embedding'])

        return cls(**config_data)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary format."""
        return self.model_dump(mode='json', exclude_none=True)

    def save_to_file(self, file_path: Path) -> None:
        """Save configuration to a JSON file without the API key."""
        file_path.parent.mkdir(parents=True, exist_ok=True)
        config_dict = self.to_dict()

        if 'embedding' in config_dict and 'api_key' in config_dict['embedding']:
            del config_dict['embedding']['api_key']

        with open(file_path, 'w') as f:
            json.dump(config_dict, f, indent=2)

    def __repr__(self) -> str:
        """String representation hiding sensitive information."""
        return (
            f"RagSearchConfig("
            f"chunking={self.chunking.chunk_size}/{self.chunking.chunk_overlap}, "
            f"vector_store.path={self.vector_store.path}, "
            f"vector_store.dimension={self.vector_store.dimension}, "
            f"embedding={self.embedding!r})"
        )


def _read_json(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with open(path) as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Failed to load config {path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring config {path}: top level must be an object")
        return {}
    return data


def _merge(target: dict[str, Any], source: dict[str, Any]) -> None:
    # Section dictionaries merge key by key so a project file can override one field.
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _merge(target[key], value)
        else:
            target[key] = value


# Global configuration instance
_config_instance: RagSearchConfig | None = None


def get_config() -> RagSearchConfig:
    """Get the global configuration instance, loading it on first use."""
    global _config_instance
    if _config_instance is None:
        _config_instance = RagSearchConfig.load_hierarchical()
    return _config_instance


def set_config(config: RagSearchConfig) -> None:
    """Set the global configuration instance."""
    global _config_instance
    _config_instance = config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config_instance
    _config_instance = None
