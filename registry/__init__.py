"""Provider registry and dependency injection container for RagSearch."""

from typing import Any, Callable, Dict, Optional

from loguru import logger

from core.exceptions import ConfigurationError
from core.observability import MetricsHook
from providers.database.duckdb_provider import DuckDBVectorStore
from providers.embeddings.openai_provider import OpenAIEmbeddingProvider
from ragsearch.chunker import Chunker
from ragsearch.core.config.unified_config import RagSearchConfig
from services.ingestion_service import IngestionService
from services.search_service import SearchService


class ProviderRegistry:
    """Registry for managing provider implementations and dependency injection."""

    def __init__(self, config: Optional[RagSearchConfig] = None, metrics: Optional[MetricsHook] = None):
        """Initialize the provider registry.

        Args:
            config: Configuration to build providers from (defaults apply if None)
            metrics: Optional metrics hook shared by the chunker and vector store
        """
        self._providers: Dict[str, tuple[Callable[[], Any], bool]] = {}
        self._singletons: Dict[str, Any] = {}
        self._config = config or RagSearchConfig()
        self._metrics = metrics

        self._register_default_providers()

    @property
    def config(self) -> RagSearchConfig:
        return self._config

    def configure(self, config: RagSearchConfig) -> None:
        """Replace the configuration and drop providers built from the old one.

        Args:
            config: New configuration
        """
        self.shutdown()
        self._config = config
        self._register_default_providers()

        logger.info("Provider registry configured")

    def register_provider(self, name: str, factory: Callable[[], Any], singleton: bool = True) -> None:
        """Register a provider factory.

        Args:
            name: Provider name/identifier
            factory: Zero-argument callable returning the provider
            singleton: Whether to use singleton pattern for this provider
        """
        self._providers[name] = (factory, singleton)

        if singleton and name in self._singletons:
            del self._singletons[name]

        logger.debug(f"Registered provider {name}")

    def get_provider(self, name: str) -> Any:
        """Get a provider instance for the specified name.

        Raises:
            ValueError: If no provider is registered for the name
        """
        if name not in self._providers:
            raise ValueError(f"No provider registered for {name}")

        factory, is_singleton = self._providers[name]

        if is_singleton:
            if name not in self._singletons:
                self._singletons[name] = self._create_instance(name, factory)
            return self._singletons[name]
        return self._create_instance(name, factory)

    def create_ingestion_service(self) -> IngestionService:
        """Create an IngestionService with all dependencies."""
        return IngestionService(
            vector_store=self.get_provider("vector_store"),
            embedding_provider=self.get_provider("embedding"),
            chunker=self.get_provider("chunker"),
            embedding_batch_size=self._config.embedding.batch_size,
        )

    def create_search_service(self) -> SearchService:
        """Create a SearchService with all dependencies."""
        embedding_provider = None

        try:
            embedding_provider = self.get_provider("embedding")
        except (ValueError, ConfigurationError) as e:
            logger.warning(f"No embedding provider configured for search service: {e}")

        return SearchService(
            vector_store=self.get_provider("vector_store"),
            embedding_provider=embedding_provider,
        )

    def shutdown(self) -> None:
        """Disconnect the vector store singleton and forget all instances."""
        store = self._singletons.get("vector_store")
        if store is not None:
            store.disconnect()
        self._singletons.clear()

    def _register_default_providers(self) -> None:
        """Register factories for the default providers."""
        self.register_provider("vector_store", self._build_vector_store, singleton=True)
        self.register_provider("chunker", self._build_chunker, singleton=True)
        self.register_provider("embedding", self._build_embedding_provider, singleton=True)

    def _build_vector_store(self) -> DuckDBVectorStore:
        settings = self._config.vector_store
        store = DuckDBVectorStore(
            db_path=settings.path,
            dimension=settings.dimension,
            hnsw_index=settings.hnsw_index,
            hnsw_m=settings.hnsw_m,
            hnsw_ef_construction=settings.hnsw_ef_construction,
            metrics=self._metrics,
        )
        store.connect()
        return store

    def _build_chunker(self) -> Chunker:
        settings = self._config.chunking
        return Chunker(
            chunk_size=settings.chunk_size,
            chunk_overlap=settings.chunk_overlap,
            metrics=self._metrics,
        )

    def _build_embedding_provider(self) -> OpenAIEmbeddingProvider:
        embedding_config = self._config.embedding
        if not embedding_config.is_provider_configured():
            missing = ", ".join(embedding_config.get_missing_config())
            raise ConfigurationError(
                "embedding",
                embedding_config.provider,
                f"Incomplete configuration for {embedding_config.provider} provider. Missing: {missing}",
            )

        config_params = embedding_config.get_provider_config()
        logger.debug(f"Creating embedding provider with model={config_params['model']}, dims={config_params['dims']}")
        return OpenAIEmbeddingProvider(**config_params)

    def _create_instance(self, name: str, factory: Callable[[], Any]) -> Any:
        try:
            return factory()
        except Exception as e:
            logger.error(f"Failed to create {name} provider: {e}")
            raise


# Global registry instance (lazy initialization)
_registry: Optional[ProviderRegistry] = None


def get_registry() -> ProviderRegistry:
    """Get the global registry instance, building it from the global config."""
    global _registry
    if _registry is None:
        from ragsearch.core.config.unified_config import get_config

        _registry = ProviderRegistry(get_config())
    return _registry


def configure_registry(config: RagSearchConfig) -> None:
    """Configure the global provider registry."""
    get_registry().configure(config)


def reset_registry() -> None:
    """Shut down and discard the global registry."""
    global _registry
    if _registry is not None:
        _registry.shutdown()
    _registry = None


def get_provider(name: str) -> Any:
    """Get a provider from the global registry."""
    return get_registry().get_provider(name)


def create_ingestion_service() -> IngestionService:
    """Create an IngestionService from the global registry."""
    return get_registry().create_ingestion_service()


def create_search_service() -> SearchService:
    """Create a SearchService from the global registry."""
    return get_registry().create_search_service()


__all__ = [
    'ProviderRegistry',
    'get_registry',
    'configure_registry',
    'reset_registry',
    'get_provider',
    'create_ingestion_service',
    'create_search_service',
]
