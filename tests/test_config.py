"""Tests for RagSearch configuration loading and validation."""

import json

import pydantic
import pytest

from ragsearch.core.config import (
    ChunkingConfig,
    EmbeddingConfig,
    RagSearchConfig,
    VectorStoreConfig,
    get_config,
    reset_config,
    set_config,
)


@pytest.fixture
def isolated_home(tmp_path, monkeypatch):
    """Point the user config lookup at an empty home directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


class TestChunkingConfig:

    def test_defaults(self):
        config = ChunkingConfig()
        assert config.chunk_size == 400
        assert config.chunk_overlap == 100

    @pytest.mark.parametrize("size, overlap", [(0, 0), (100, -1), (100, 100), (50, 80)])
    def test_invalid_combinations(self, size, overlap):
        with pytest.raises(pydantic.ValidationError):
            ChunkingConfig(chunk_size=size, chunk_overlap=overlap)


class TestEmbeddingConfig:

    def test_base_url_normalized(self):
        config = EmbeddingConfig(base_url="http://localhost:11434/v1/")
        assert config.base_url == "http://localhost:11434/v1"

    def test_base_url_requires_http_scheme(self):
        with pytest.raises(pydantic.ValidationError):
            EmbeddingConfig(base_url="localhost:11434")

    def test_default_models(self):
        assert EmbeddingConfig(provider="openai").get_default_model() == "text-embedding-3-small"
        assert EmbeddingConfig().get_default_model() == "nomic-embed-text"
        assert EmbeddingConfig(model="custom").get_default_model() == "custom"

    def test_provider_config(self):
        config = EmbeddingConfig(provider="openai", api_key="sk-test", dimensions=1536, max_retries=5)

        params = config.get_provider_config()

        assert params["api_key"] == "sk-test"
        assert params["dims"] == 1536
        assert params["retry_attempts"] == 5
        assert "base_url" not in params
        assert "sk-test" not in repr(config)

    def test_configuration_requirements(self):
        assert not EmbeddingConfig(provider="openai").is_provider_configured()
        assert EmbeddingConfig(provider="openai", api_key="sk-test").is_provider_configured()
        compatible = EmbeddingConfig(provider="openai-compatible")
        assert not compatible.is_provider_configured()
        assert compatible.get_missing_config() == ["base_url (RAGSEARCH_EMBEDDING_BASE_URL)"]

    def test_environment_variables(self, monkeypatch):
        monkeypatch.setenv("RAGSEARCH_EMBEDDING_BASE_URL", "http://embedder:8080/v1")
        monkeypatch.setenv("RAGSEARCH_EMBEDDING_BATCH_SIZE", "16")

        config = EmbeddingConfig()

        assert config.base_url == "http://embedder:8080/v1"
        assert config.batch_size == 16


class TestRagSearchConfig:

    def teardown_method(self):
        reset_config()

    def test_defaults(self):
        config = RagSearchConfig()

        assert config.chunking.chunk_size == 400
        assert config.vector_store.dimension == 768
        assert config.vector_store.hnsw_index is True
        assert config.embedding.dimensions == 768
        assert config.debug is False

    def test_nested_environment_variables(self, monkeypatch):
        monkeypatch.setenv("RAGSEARCH_CHUNKING__CHUNK_SIZE", "512")
        monkeypatch.setenv("RAGSEARCH_VECTOR_STORE__PATH", ":memory:")

        config = RagSearchConfig()

        assert config.chunking.chunk_size == 512
        assert config.vector_store.path == ":memory:"

    def test_dimension_mismatch_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            RagSearchConfig(
                vector_store=VectorStoreConfig(dimension=384),
                embedding=EmbeddingConfig(dimensions=768),
            )

    def test_load_hierarchical_layers_sources(self, tmp_path, isolated_home):
        user_dir = isolated_home / ".ragsearch"
        user_dir.mkdir()
        (user_dir / "config.json").write_text(json.dumps({
            "chunking": {"chunk_size": 300, "chunk_overlap": 50},
            "debug": True,
        }))
        project = tmp_path / "project"
        project.mkdir()
        (project / ".ragsearch.json").write_text(json.dumps({
            "chunking": {"chunk_size": 256},
            "embedding": {"base_url": "http://localhost:11434/v1"},
        }))

        config = RagSearchConfig.load_hierarchical(
            project_dir=project,
            chunking={"chunk_overlap": 16},
        )

        assert config.chunking.chunk_size == 256
        assert config.chunking.chunk_overlap == 16
        assert config.debug is True
        assert config.embedding.base_url == "http://localhost:11434/v1"

    def test_load_hierarchical_ignores_invalid_file(self, tmp_path, isolated_home):
        (tmp_path / ".ragsearch.json").write_text("{not json")

        config = RagSearchConfig.load_hierarchical(project_dir=tmp_path)

        assert config.chunking.chunk_size == 400

    def test_save_to_file_omits_api_key(self, tmp_path):
        config = RagSearchConfig(embedding=EmbeddingConfig(provider="openai", api_key="sk-secret"))
        path = tmp_path / "out" / "config.json"

        config.save_to_file(path)

        saved = json.loads(path.read_text())
        assert "api_key" not in saved["embedding"]
        assert saved["chunking"] == {"chunk_size": 400, "chunk_overlap": 100}
        assert "sk-secret" not in repr(config)

    def test_global_config(self):
        config = RagSearchConfig(debug=True)

        set_config(config)
        assert get_config() is config

        reset_config()
        assert get_config() is not config
