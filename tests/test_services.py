"""Tests for the ingestion and search services."""

import uuid

import pytest

from core.exceptions import EmbeddingError, ProviderError, ValidationError
from providers.database.duckdb_provider import DuckDBVectorStore
from ragsearch.chunker import Chunker
from services import IngestionService, SearchService
from tests import TEST_DIMENSION, FakeEmbeddingProvider, make_document

ANIMAL_TEXT = "\n\n".join([
    "All about cats and more cats.",
    "All about dogs and more dogs.",
    "All about birds and more birds.",
])


class TestIngestionService:

    def setup_method(self):
        self.store = DuckDBVectorStore(":memory:", dimension=TEST_DIMENSION, hnsw_index=False)
        self.store.connect()
        self.embedder = FakeEmbeddingProvider()
        self.chunker = Chunker(chunk_size=10, chunk_overlap=0)
        self.service = IngestionService(self.store, self.embedder, self.chunker, embedding_batch_size=2)

    def teardown_method(self):
        self.store.disconnect()

    @pytest.mark.asyncio
    async def test_ingest_document_stores_embedded_chunks(self):
        document = make_document(ANIMAL_TEXT)

        result = await self.service.ingest_document(document)

        assert result.document_id == document.id
        assert result.chunks_stored == 3
        assert result.tokens == 24
        assert result.elapsed_ms >= 0
        assert [len(call) for call in self.embedder.calls] == [2, 1]

        stored = self.store.get_chunks_by_document_id(document.id)
        assert [c.chunk_index for c in stored] == [0, 1, 2]
        assert stored[0].embedding == (1.0, 0.0, 0.0, 0.125)
        assert stored[2].embedding == (0.0, 0.0, 1.0, 0.125)
        assert all(c.tenant_id == document.tenant_id for c in stored)

    @pytest.mark.asyncio
    async def test_reingest_overwrites_by_index(self):
        document = make_document(ANIMAL_TEXT)

        await self.service.ingest_document(document)
        first_ids = [c.id for c in self.store.get_chunks_by_document_id(document.id)]
        await self.service.ingest_document(document)

        stored = self.store.get_chunks_by_document_id(document.id)
        assert len(stored) == 3
        assert [c.id for c in stored] == first_ids

    @pytest.mark.asyncio
    async def test_vector_count_mismatch_stores_nothing(self):
        service = IngestionService(self.store, FakeEmbeddingProvider(drop_last=True), self.chunker)

        with pytest.raises(EmbeddingError):
            await service.ingest_document(make_document(ANIMAL_TEXT))

        assert self.store.get_stats()["chunks"] == 0

    @pytest.mark.asyncio
    async def test_invalid_document_rejected_before_embedding(self):
        with pytest.raises(ValidationError):
            await self.service.ingest_document(make_document("   "))

        assert self.embedder.calls == []

    @pytest.mark.asyncio
    async def test_delete_document(self):
        document = make_document(ANIMAL_TEXT)
        await self.service.ingest_document(document)

        assert self.service.delete_document(document.id) == 3
        assert self.service.delete_document(document.id) == 0


class TestSearchService:

    def setup_method(self):
        self.store = DuckDBVectorStore(":memory:", dimension=TEST_DIMENSION, hnsw_index=False)
        self.store.connect()
        self.embedder = FakeEmbeddingProvider()
        self.search_service = SearchService(self.store, self.embedder)
        self.ingestion = IngestionService(self.store, self.embedder, Chunker(chunk_size=10, chunk_overlap=0))

    def teardown_method(self):
        self.store.disconnect()

    @pytest.mark.asyncio
    async def test_search_finds_best_match_for_tenant(self):
        document = make_document(ANIMAL_TEXT)
        await self.ingestion.ingest_document(document)

        results = await self.search_service.search(document.tenant_id, "tell me about cats", top_k=2)

        assert len(results) == 2
        assert "cats" in results[0].chunk.content
        assert results[0].score == pytest.approx(1.0, abs=1e-5)
        assert results[0].score >= results[1].score

    @pytest.mark.asyncio
    async def test_search_is_scoped_to_tenant(self):
        await self.ingestion.ingest_document(make_document(ANIMAL_TEXT))

        assert await self.search_service.search(uuid.uuid4(), "cats", top_k=5) == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "tenant, query, top_k",
        [(None, "cats", 5), ("tenant", "   ", 5), ("tenant", None, 5), ("tenant", "cats", 0), ("tenant", "cats", 101)],
    )
    async def test_arguments_validated_before_embedding(self, tenant, query, top_k):
        tenant_id = uuid.uuid4() if tenant else None

        with pytest.raises(ValidationError):
            await self.search_service.search(tenant_id, query, top_k=top_k)

        assert self.embedder.calls == []

    @pytest.mark.asyncio
    async def test_search_without_embedding_provider(self):
        service = SearchService(self.store)

        with pytest.raises(ProviderError):
            await service.search(uuid.uuid4(), "cats")

    def test_search_by_vector(self):
        service = SearchService(self.store)
        document = make_document("Dogs bark.")
        vector = self.embedder.vector_for(document.content)
        chunk = Chunker(chunk_size=10, chunk_overlap=0).chunk(document)[0]
        self.store.store(chunk.with_embedding(vector))

        results = service.search_by_vector(document.tenant_id, vector, top_k=1)

        assert [r.chunk.content for r in results] == ["Dogs bark."]
