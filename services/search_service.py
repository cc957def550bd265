"""Search service for RagSearch - embeds queries and runs tenant-scoped similarity search."""

from typing import List, Optional, Sequence

from loguru import logger

from core.exceptions import ProviderError, ValidationError
from core.models import SimilarityResult
from core.types import MAX_TOP_K, TenantId
from interfaces.embedding_provider import EmbeddingProvider
from interfaces.vector_store import VectorStore
from .base_service import BaseService


class SearchService(BaseService):
    """Service for semantic search over one tenant's chunks."""

    def __init__(
        self,
        vector_store: VectorStore,
        embedding_provider: Optional[EmbeddingProvider] = None
    ):
        """Initialize search service.

        Args:
            vector_store: Vector store to query
            embedding_provider: Provider for query embeddings; required for text queries
        """
        super().__init__(vector_store)
        self._embedding_provider = embedding_provider

    async def search(self, tenant_id: TenantId, query: str, top_k: int = 5) -> List[SimilarityResult]:
        """Embed ``query`` and return the tenant's most similar chunks.

        Arguments are validated before the embedding call is made.
        """
        if tenant_id is None:
            raise ValidationError("tenant_id", None, "Tenant ID cannot be null")
        if query is None or not query.strip():
            raise ValidationError("query", query, "Query cannot be null or blank")
        if isinstance(top_k, bool) or not isinstance(top_k, int) or not 1 <= top_k <= MAX_TOP_K:
            raise ValidationError("top_k", top_k, f"topK must be between 1 and {MAX_TOP_K}")
        if self._embedding_provider is None:
            raise ProviderError("embedding", "search", reason="Embedding provider not configured for semantic search")

        try:
            logger.debug(f"Performing semantic search for tenant {tenant_id} using {self._embedding_provider.model}")
            query_vector = await self._embedding_provider.embed_single(query)
            results = self._store.search(tenant_id, query_vector, top_k)
        except Exception as e:
            logger.error(f"Semantic search failed: {e}")
            raise

        logger.info(f"Semantic search completed: {len(results)} results found")
        return results

    def search_by_vector(
        self,
        tenant_id: TenantId,
        query_embedding: Sequence[float],
        top_k: int = 5,
    ) -> List[SimilarityResult]:
        """Search with a precomputed query embedding."""
        return self._store.search(tenant_id, query_embedding, top_k)
