"""
Embedding configuration for RagSearch.

The only supported backend is an OpenAI-compatible embeddings endpoint, which
covers both the hosted OpenAI API and local servers that expose the same
interface (for example a server hosting nomic-embed-text).
"""

from typing import Any, Dict, Literal, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EmbeddingConfig(BaseSettings):
    """
    Configuration for the embedding provider.

    Environment Variable Examples:
        RAGSEARCH_EMBEDDING_PROVIDER=openai-compatible
        RAGSEARCH_EMBEDDING_BASE_URL=http://localhost:11434/v1
        RAGSEARCH_EMBEDDING_MODEL=nomic-embed-text
        RAGSEARCH_EMBEDDING_DIMENSIONS=768
        RAGSEARCH_EMBEDDING_BATCH_SIZE=64
    """

    model_config = SettingsConfigDict(
        env_prefix='RAGSEARCH_EMBEDDING_',
        env_nested_delimiter='__',
        case_sensitive=False,
        validate_default=True,
        extra='ignore',
    )

    provider: Literal['openai', 'openai-compatible'] = Field(
        default='openai-compatible',
        description="Embedding provider to use"
    )

    model: Optional[str] = Field(
        default=None,
        description="Embedding model name (uses provider default if not specified)"
    )

    api_key: Optional[SecretStr] = Field(
        default=None,
        description="API key for authentication"
    )

    base_url: Optional[str] = Field(
        default=None,
        description="Base URL for the embedding API"
    )

    dimensions: int = Field(
        default=768,
        ge=1,
        le=8192,
        description="Length of the vectors the model returns"
    )

    batch_size: int = Field(
        default=64,
        ge=1,
        le=2048,
        description="Texts per embedding request"
    )

    timeout: int = Field(
        default=30,
        ge=1,
        le=300,
        description="Request timeout in seconds"
    )

    max_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts per request for rate-limit and connection errors"
    )

    retry_delay: float = Field(
        default=1.0,
        ge=0.0,
        le=60.0,
        description="Base delay between attempts in seconds"
    )

    @field_validator('base_url')
    def validate_base_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate and normalize base URL."""
        if v is None:
            return v

        v = v.rstrip('/')

        if not (v.startswith('http://') or v.startswith('https://')):
            raise ValueError('base_url must start with http:// or https://')

        return v

    def get_default_model(self) -> str:
        """Model name with provider defaults applied."""
        defaults = {
            'openai': 'text-embedding-3-small',
            'openai-compatible': 'nomic-embed-text',
        }
        return self.model or defaults[self.provider]

    def get_provider_config(self) -> Dict[str, Any]:
        """Keyword arguments for the provider constructor."""
        config: Dict[str, Any] = {
            'model': self.get_default_model(),
            'dims': self.dimensions,
            'batch_size': self.batch_size,
            'timeout': self.timeout,
            'retry_attempts': self.max_retries,
            'retry_delay': self.retry_delay,
        }
        if self.api_key:
            config['api_key'] = self.api_key.get_secret_value()
        if self.base_url:
            config['base_url'] = self.base_url
        return config

    def is_provider_configured(self) -> bool:
        """Whether the selected provider has its required settings."""
        if self.provider == 'openai':
            return self.api_key is not None
        return self.base_url is not None

    def get_missing_config(self) -> list[str]:
        """Names of required settings that are missing."""
        missing = []
        if self.provider == 'openai' and not self.api_key:
            missing.append('api_key (RAGSEARCH_EMBEDDING_API_KEY)')
        elif self.provider == 'openai-compatible' and not self.base_url:
            missing.append('base_url (RAGSEARCH_EMBEDDING_BASE_URL)')
        return missing

    def __repr__(self) -> str:
        """String representation hiding sensitive information."""
        api_key_display = "***" if self.api_key else None
        return (
            f"EmbeddingConfig("
            f"provider={self.provider}, "
            f"model={self.get_default_model()}, "
            f"api_key={api_key_display}, "
            f"base_url={self.base_url}, "
            f"dimensions={self.dimensions})"
        )
