"""Ingestion service for RagSearch - chunks, embeds and stores documents."""

import time
from dataclasses import dataclass
from typing import Optional

from loguru import logger

from core.exceptions import EmbeddingError
from core.models import Document
from core.types import DocumentId
from interfaces.embedding_provider import EmbeddingProvider
from interfaces.vector_store import VectorStore
from ragsearch.chunker import Chunker
from .base_service import BaseService


@dataclass(frozen=True)
class IngestionResult:
    """Outcome of ingesting one document."""

    document_id: DocumentId
    chunks_stored: int
    tokens: int
    elapsed_ms: float


class IngestionService(BaseService):
    """Runs the chunk, embed and store pipeline for single documents.

    All of a document's embeddings are generated before anything is written,
    and the write itself is one ``store_batch`` transaction, so a failure
    never leaves a document half-embedded.
    """

    def __init__(
        self,
        vector_store: VectorStore,
        embedding_provider: EmbeddingProvider,
        chunker: Chunker,
        embedding_batch_size: Optional[int] = None,
    ):
        """Initialize ingestion service.

        Args:
            vector_store: Destination for embedded chunks
            embedding_provider: Provider used to embed chunk content
            chunker: Configured chunker
            embedding_batch_size: Texts per embedding request (provider default if None)
        """
        super().__init__(vector_store)
        self._embedding_provider = embedding_provider
        self._chunker = chunker
        self._embedding_batch_size = embedding_batch_size

    @property
    def chunker(self) -> Chunker:
        return self._chunker

    async def ingest_document(self, document: Document) -> IngestionResult:
        """Chunk a persisted document, embed its chunks and upsert them.

        Re-ingesting a document overwrites chunks by index. Chunks beyond the
        new chunk count are left in place; call ``delete_document`` first when
        a document shrinks.

        Raises:
            ValidationError: If the document or resulting chunks are invalid
            EmbeddingError: If the provider returns the wrong number of vectors
        """
        start_time = time.perf_counter()

        chunks = self._chunker.chunk(document)
        texts = [chunk.content for chunk in chunks]

        try:
            vectors = await self._embedding_provider.embed_batch(texts, batch_size=self._embedding_batch_size)
        except Exception as e:
            logger.error(f"Failed to embed {len(texts)} chunks for document {document.id}: {e}")
            raise

        if len(vectors) != len(chunks):
            raise EmbeddingError(
                self._embedding_provider.name,
                self._embedding_provider.model,
                "attach",
                f"Expected {len(chunks)} embeddings, got {len(vectors)}",
                context={"document_id": document.id},
            )

        embedded = [chunk.with_embedding(vector) for chunk, vector in zip(chunks, vectors)]
        self._store.store_batch(embedded)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        tokens = sum(chunk.token_count for chunk in embedded)
        logger.info(f"Ingested document {document.id}: {len(embedded)} chunks, {tokens} tokens in {elapsed_ms:.1f}ms")

        return IngestionResult(
            document_id=document.id,
            chunks_stored=len(embedded),
            tokens=tokens,
            elapsed_ms=elapsed_ms,
        )

    def delete_document(self, document_id: DocumentId) -> int:
        """Remove every chunk of a document; returns the number removed."""
        return self._store.delete_by_document_id(document_id)
