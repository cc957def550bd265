"""OpenAI embedding provider implementation for RagSearch - works with any OpenAI-compatible endpoint."""

import asyncio
import os
from typing import Any, Dict, List, Optional

import openai
from loguru import logger

from core.exceptions import EmbeddingError, ValidationError
from core.types import DEFAULT_DIMENSION


class OpenAIEmbeddingProvider:
    """Embedding provider backed by the OpenAI embeddings API.

    Defaults target a local OpenAI-compatible server hosting nomic-embed-text.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: str = "nomic-embed-text",
        dims: int = DEFAULT_DIMENSION,
        batch_size: int = 64,
        timeout: int = 30,
        retry_attempts: int = 3,
        retry_delay: float = 1.0,
        client: Optional[Any] = None,
    ):
        """Initialize OpenAI embedding provider.

        Args:
            api_key: API key (defaults to OPENAI_API_KEY env var)
            base_url: Base URL for the API (defaults to OPENAI_BASE_URL env var)
            model: Model name to use for embeddings
            dims: Expected embedding dimensions
            batch_size: Maximum texts per request
            timeout: Request timeout in seconds
            retry_attempts: Attempts per request for rate-limit and connection errors
            retry_delay: Base delay between attempts
            client: Preconfigured ``openai.AsyncOpenAI`` client
        """
        self._api_key = api_key or os.getenv("OPENAI_API_KEY")
        self._base_url = base_url or os.getenv("OPENAI_BASE_URL")
        self._model = model
        self._dims = dims
        self._batch_size = batch_size
        self._timeout = timeout
        self._retry_attempts = max(1, retry_attempts)
        self._retry_delay = retry_delay

        self._usage_stats = self._empty_stats()

        self._client = client
        if self._client is None:
            self._initialize_client()

    @staticmethod
    def _empty_stats() -> Dict[str, int]:
        return {
            "requests_made": 0,
            "tokens_used": 0,
            "embeddings_generated": 0,
            "errors": 0
        }

    def _initialize_client(self) -> None:
        """Initialize the OpenAI client."""
        if not self._api_key and not self._base_url:
            raise ValueError("An API key or a base URL is required for the embedding provider")

        client_kwargs: Dict[str, Any] = {
            # Local OpenAI-compatible servers accept any key
            "api_key": self._api_key or "not-needed",
            "timeout": self._timeout,
            "max_retries": 0,
        }
        if self._base_url:
            client_kwargs["base_url"] = self._base_url

        self._client = openai.AsyncOpenAI(**client_kwargs)
        logger.debug(f"OpenAI client initialized with base_url={self._base_url}, timeout={self._timeout}")

    @property
    def name(self) -> str:
        """Provider name."""
        return "openai"

    @property
    def model(self) -> str:
        """Model name."""
        return self._model

    @property
    def dims(self) -> int:
        """Embedding dimensions."""
        return self._dims

    @property
    def batch_size(self) -> int:
        """Maximum batch size for embedding requests."""
        return self._batch_size

    @property
    def base_url(self) -> str:
        """Base URL for API requests."""
        return self._base_url or "https://api.openai.com/v1"

    async def shutdown(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.close()
            self._client = None
        logger.info("OpenAI embedding provider shutdown")

    def is_available(self) -> bool:
        """Check if the provider has a client."""
        return self._client is not None

    async def health_check(self) -> Dict[str, Any]:
        """Perform health check and return status information."""
        status: Dict[str, Any] = {
            "provider": self.name,
            "model": self.model,
            "base_url": self.base_url,
            "available": self.is_available(),
            "errors": []
        }

        if not self.is_available():
            status["errors"].append("Client not initialized")
            return status

        try:
            test_embedding = await self.embed_single("test")
            if len(test_embedding) == self.dims:
                status["connectivity"] = "ok"
            else:
                status["errors"].append(f"Unexpected embedding dimensions: {len(test_embedding)} != {self.dims}")
        except Exception as e:
            status["errors"].append(f"API connectivity test failed: {str(e)}")

        return status

    async def embed(self, texts: List[str]) -> List[List[float]]:
        """Generate embeddings for a list of texts."""
        if not texts:
            return []

        validated_texts = self.validate_texts(texts)

        try:
            if len(validated_texts) <= self.batch_size:
                return await self._embed_batch_internal(validated_texts)
            return await self.embed_batch(validated_texts)

        except Exception as e:
            self._usage_stats["errors"] += 1
            logger.error(f"Failed to generate embeddings: {e}")
            raise

    async def embed_single(self, text: str) -> List[float]:
        """Generate embedding for a single text."""
        embeddings = await self.embed([text])
        return embeddings[0]

    async def embed_batch(self, texts: List[str], batch_size: Optional[int] = None) -> List[List[float]]:
        """Generate embeddings in sequential batches, preserving input order."""
        if not texts:
            return []

        validated_texts = self.validate_texts(texts)
        effective_batch_size = batch_size or self.batch_size
        all_embeddings: List[List[float]] = []

        for i in range(0, len(validated_texts), effective_batch_size):
            batch = validated_texts[i:i + effective_batch_size]
            all_embeddings.extend(await self._embed_batch_internal(batch))

        return all_embeddings

    async def _embed_batch_internal(self, texts: List[str]) -> List[List[float]]:
        """Embed one request's worth of texts, retrying transient failures."""
        if self._client is None:
            raise EmbeddingError(self.name, self.model, "embed", "OpenAI client not initialized")

        for attempt in range(self._retry_attempts):
            try:
                logger.debug(f"Generating embeddings for {len(texts)} texts (attempt {attempt + 1})")

                response = await self._client.embeddings.create(
                    model=self.model,
                    input=texts,
                )

                # The API may return items out of order
                ordered = sorted(response.data, key=lambda item: item.index)
                embeddings = [list(item.embedding) for item in ordered]
                self._check_response(texts, embeddings)

                self._usage_stats["requests_made"] += 1
                self._usage_stats["embeddings_generated"] += len(embeddings)
                usage = getattr(response, "usage", None)
                if usage is not None:
                    self._usage_stats["tokens_used"] += usage.total_tokens

                logger.debug(f"Successfully generated {len(embeddings)} embeddings")
                return embeddings

            except openai.RateLimitError:
                delay = self._retry_delay * (attempt + 1)
                if attempt < self._retry_attempts - 1:
                    logger.warning(f"Rate limit exceeded, retrying in {delay} seconds")
                    await asyncio.sleep(delay)
                    continue
                raise
            except (openai.APITimeoutError, openai.APIConnectionError) as e:
                error_details = {
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                    "base_url": self.base_url,
                    "model": self._model,
                    "attempt": attempt + 1,
                    "max_attempts": self._retry_attempts
                }
                if attempt < self._retry_attempts - 1:
                    logger.warning(f"API connection error, retrying in {self._retry_delay} seconds: {error_details}")
                    await asyncio.sleep(self._retry_delay)
                    continue
                raise

    def _check_response(self, texts: List[str], embeddings: List[List[float]]) -> None:
        if len(embeddings) != len(texts):
            raise EmbeddingError(
                self.name, self.model, "embed",
                f"Expected {len(texts)} embeddings, got {len(embeddings)}"
            )
        for i, vector in enumerate(embeddings):
            if len(vector) != self._dims:
                raise EmbeddingError(
                    self.name, self.model, "embed",
                    f"Embedding dimension mismatch: expected {self._dims}, got {len(vector)}",
                    context={"index": i},
                )

    def validate_texts(self, texts: List[str]) -> List[str]:
        """Validate texts before embedding; blank texts are rejected."""
        if not texts:
            raise ValidationError("texts", texts, "No texts provided for embedding")

        validated = []
        for i, text in enumerate(texts):
            if not isinstance(text, str):
                raise ValidationError(f"texts[{i}]", text, f"Text at index {i} is not a string: {type(text)}")
            if not text.strip():
                raise ValidationError(f"texts[{i}]", text, f"Text at index {i} is blank")
            validated.append(text.strip())

        return validated

    def get_model_info(self) -> Dict[str, Any]:
        """Get information about the embedding model."""
        return {
            "provider": self.name,
            "model": self.model,
            "dimensions": self.dims,
            "batch_size": self.batch_size,
            "base_url": self.base_url,
        }

    def get_usage_stats(self) -> Dict[str, int]:
        """Get usage statistics."""
        return self._usage_stats.copy()
