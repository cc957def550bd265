"""EmbeddingProvider protocol for RagSearch - abstract interface for embedding implementations."""

from typing import Any, Protocol


class EmbeddingProvider(Protocol):
    """Abstract protocol for embedding providers.

    The core treats the model as an opaque ``text -> vector`` function. Any
    retry policy belongs to the implementation.
    """

    @property
    def name(self) -> str:
        """Provider name (e.g., 'openai')."""
        ...

    @property
    def model(self) -> str:
        """Model name (e.g., 'nomic-embed-text')."""
        ...

    @property
    def dims(self) -> int:
        """Embedding dimensions."""
        ...

    @property
    def batch_size(self) -> int:
        """Maximum batch size for embedding requests."""
        ...

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings for a list of texts.

        Raises:
            EmbeddingError: If embedding generation fails
        """
        ...

    async def embed_single(self, text: str) -> list[float]:
        """Generate embedding for a single text."""
        ...

    async def embed_batch(self, texts: list[str], batch_size: int | None = None) -> list[list[float]]:
        """Generate embeddings in batches, preserving input order."""
        ...

    async def health_check(self) -> dict[str, Any]:
        """Perform health check and return status information."""
        ...
