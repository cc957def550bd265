"""VectorStore protocol for RagSearch - abstract interface for chunk persistence and similarity search."""

from typing import Any, Protocol, Sequence

from core.models import Chunk, SimilarityResult
from core.types import DocumentId, TenantId


class VectorStore(Protocol):
    """Abstract protocol for tenant-scoped vector stores.

    Writes are upserts keyed by ``(document_id, chunk_index)``. Every read is
    filtered by tenant. Validation failures are raised before anything is
    written.
    """

    @property
    def dimension(self) -> int:
        """Length every stored and queried embedding must have."""
        ...

    @property
    def is_connected(self) -> bool:
        """Check if the backing connection is active."""
        ...

    # Connection Management
    def connect(self) -> None:
        """Open the backing store and create the schema."""
        ...

    def disconnect(self) -> None:
        """Close the backing store."""
        ...

    # Writes
    def store(self, chunk: Chunk) -> None:
        """Upsert a single chunk with its embedding.

        Raises:
            ValidationError: If the chunk is incomplete or has the wrong dimension
        """
        ...

    def store_batch(self, chunks: Sequence[Chunk]) -> None:
        """Upsert chunks in one all-or-nothing transaction.

        Raises:
            ValidationError: If the batch is empty or any chunk is invalid; the
                error context carries the failing ``index``
        """
        ...

    def delete_by_document_id(self, document_id: DocumentId) -> int:
        """Remove every chunk of a document and return how many were removed."""
        ...

    # Reads
    def search(self, tenant_id: TenantId, query_embedding: Sequence[float], top_k: int) -> list[SimilarityResult]:
        """Return the tenant's nearest chunks, most similar first.

        Raises:
            ValidationError: If tenant is missing, top_k is outside [1, 100] or
                the query has the wrong dimension
        """
        ...

    def get_chunks_by_document_id(self, document_id: DocumentId, tenant_id: TenantId | None = None) -> list[Chunk]:
        """Return a document's chunks ordered by chunk index."""
        ...

    # Diagnostics
    def get_stats(self) -> dict[str, int]:
        """Return row counts for chunks, embedded chunks, documents and tenants."""
        ...

    def health_check(self) -> dict[str, Any]:
        """Perform health check and return status information."""
        ...
