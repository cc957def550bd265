"""Tests for the OpenAI embedding provider using a stub client."""

from types import SimpleNamespace

import httpx
import openai
import pytest

from core.exceptions import EmbeddingError, ValidationError
from providers.embeddings.openai_provider import OpenAIEmbeddingProvider

REQUEST = httpx.Request("POST", "http://localhost:11434/v1/embeddings")


class StubEmbeddings:
    """Stands in for ``client.embeddings``; vectors encode the text length."""

    def __init__(self, dims=3, reverse=False, failures=None):
        self.dims = dims
        self.reverse = reverse
        self.failures = list(failures or [])
        self.requests = []

    async def create(self, model, input):
        self.requests.append(list(input))
        if self.failures:
            raise self.failures.pop(0)

        data = [
            SimpleNamespace(index=i, embedding=[float(len(text))] + [0.0] * (self.dims - 1))
            for i, text in enumerate(input)
        ]
        if self.reverse:
            data.reverse()
        return SimpleNamespace(data=data, usage=SimpleNamespace(total_tokens=len(input) * 2))


class StubClient:

    def __init__(self, embeddings):
        self.embeddings = embeddings
        self.closed = False

    async def close(self):
        self.closed = True


def make_provider(embeddings, **kwargs):
    params = {"dims": 3, "batch_size": 2, "retry_delay": 0.0}
    params.update(kwargs)
    return OpenAIEmbeddingProvider(client=StubClient(embeddings), **params)


class TestOpenAIEmbeddingProvider:

    @pytest.mark.asyncio
    async def test_embed_batches_in_order(self):
        embeddings = StubEmbeddings()
        provider = make_provider(embeddings)

        vectors = await provider.embed_batch(["a", "bb", "ccc", "dddd", "eeeee"])

        assert [v[0] for v in vectors] == [1.0, 2.0, 3.0, 4.0, 5.0]
        assert [len(r) for r in embeddings.requests] == [2, 2, 1]
        stats = provider.get_usage_stats()
        assert stats["requests_made"] == 3
        assert stats["embeddings_generated"] == 5
        assert stats["tokens_used"] == 10

    @pytest.mark.asyncio
    async def test_explicit_batch_size(self):
        embeddings = StubEmbeddings()
        provider = make_provider(embeddings)

        await provider.embed_batch(["a", "b", "c"], batch_size=3)

        assert [len(r) for r in embeddings.requests] == [3]

    @pytest.mark.asyncio
    async def test_response_items_sorted_by_index(self):
        provider = make_provider(StubEmbeddings(reverse=True))

        vectors = await provider.embed(["a", "bb"])

        assert [v[0] for v in vectors] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_embed_single_strips_text(self):
        embeddings = StubEmbeddings()
        provider = make_provider(embeddings)

        vector = await provider.embed_single("  abc  ")

        assert vector == [3.0, 0.0, 0.0]
        assert embeddings.requests == [["abc"]]

    @pytest.mark.asyncio
    async def test_dimension_mismatch(self):
        provider = make_provider(StubEmbeddings(dims=5))

        with pytest.raises(EmbeddingError) as exc_info:
            await provider.embed(["text"])
        assert "expected 3, got 5" in str(exc_info.value)
        assert provider.get_usage_stats()["errors"] == 1

    @pytest.mark.asyncio
    async def test_blank_text_rejected(self):
        embeddings = StubEmbeddings()
        provider = make_provider(embeddings)

        with pytest.raises(ValidationError):
            await provider.embed(["fine", "   "])
        assert embeddings.requests == []

    @pytest.mark.asyncio
    async def test_empty_input(self):
        provider = make_provider(StubEmbeddings())

        assert await provider.embed([]) == []
        assert await provider.embed_batch([]) == []

    @pytest.mark.asyncio
    async def test_retries_rate_limit(self):
        rate_limited = openai.RateLimitError(
            "slow down", response=httpx.Response(429, request=REQUEST), body=None
        )
        embeddings = StubEmbeddings(failures=[rate_limited])
        provider = make_provider(embeddings, retry_attempts=2)

        vectors = await provider.embed(["ab"])

        assert vectors == [[2.0, 0.0, 0.0]]
        assert len(embeddings.requests) == 2

    @pytest.mark.asyncio
    async def test_connection_errors_exhaust_retries(self):
        failures = [openai.APIConnectionError(request=REQUEST) for _ in range(3)]
        embeddings = StubEmbeddings(failures=failures)
        provider = make_provider(embeddings, retry_attempts=3)

        with pytest.raises(openai.APIConnectionError):
            await provider.embed(["ab"])
        assert len(embeddings.requests) == 3

    @pytest.mark.asyncio
    async def test_health_check_and_shutdown(self):
        provider = make_provider(StubEmbeddings())

        status = await provider.health_check()
        assert status["connectivity"] == "ok"
        assert status["errors"] == []

        await provider.shutdown()
        assert not provider.is_available()
        assert (await provider.health_check())["errors"] == ["Client not initialized"]

    def test_requires_key_or_base_url(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        monkeypatch.delenv("OPENAI_BASE_URL", raising=False)

        with pytest.raises(ValueError):
            OpenAIEmbeddingProvider()

    def test_builds_client_for_local_server(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)

        provider = OpenAIEmbeddingProvider(base_url="http://localhost:11434/v1", dims=4)

        assert provider.is_available()
        assert provider.get_model_info() == {
            "provider": "openai",
            "model": "nomic-embed-text",
            "dimensions": 4,
            "batch_size": 64,
            "base_url": "http://localhost:11434/v1",
        }
