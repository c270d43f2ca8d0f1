"""Tests for config models: pure Pydantic validation, no API calls."""

import pytest

from pdf_rag.config import (
    AppConfig,
    ChunkingConfig,
    ComposerConfig,
    EmbeddingConfig,
    LLMConfig,
    LLMProvider,
    RetrieverConfig,
    VectorStoreConfig,
    VectorStoreType,
)


class TestLLMConfig:

    def test_defaults(self):
        config = LLMConfig()
        assert config.provider == LLMProvider.OPENAI
        assert config.model_name == "gpt-4o-mini"
        assert config.temperature == 0.0
        assert config.max_tokens == 1024

    def test_anthropic_provider(self):
        config = LLMConfig(provider="anthropic", model_name="claude-sonnet-4-5-20250929")
        assert config.provider == LLMProvider.ANTHROPIC

    def test_temperature_bounds(self):
        LLMConfig(temperature=0.0)
        LLMConfig(temperature=2.0)
        with pytest.raises(Exception):
            LLMConfig(temperature=-0.1)
        with pytest.raises(Exception):
            LLMConfig(temperature=2.1)

    def test_max_tokens_positive(self):
        with pytest.raises(Exception):
            LLMConfig(max_tokens=0)


class TestEmbeddingConfig:

    def test_defaults(self):
        config = EmbeddingConfig()
        assert config.provider == "openai"
        assert config.model_name == "text-embedding-3-small"
        assert config.dimensions == 1536

    def test_concurrency_positive(self):
        with pytest.raises(Exception):
            EmbeddingConfig(max_concurrency=0)


class TestChunkingConfig:

    def test_defaults(self):
        config = ChunkingConfig()
        assert (config.max_tokens, config.overlap_tokens, config.min_words) == (150, 50, 5)

    def test_overlap_must_be_smaller_than_window(self):
        with pytest.raises(ValueError, match="must be less than"):
            ChunkingConfig(max_tokens=50, overlap_tokens=50)


class TestVectorStoreConfig:

    def test_memory_default(self):
        assert VectorStoreConfig().store_type == VectorStoreType.MEMORY

    def test_pgvector_requires_url(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        with pytest.raises(ValueError, match="database_url"):
            VectorStoreConfig(store_type="pgvector")

    def test_pgvector_reads_database_url(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://localhost/pdf_rag")
        config = VectorStoreConfig(store_type="pgvector")
        assert config.database_url == "postgresql://localhost/pdf_rag"

    def test_table_name_must_be_identifier(self):
        with pytest.raises(Exception):
            VectorStoreConfig(table_name="chunks; DROP TABLE users")


class TestAppConfig:

    def test_defaults(self):
        config = AppConfig()
        assert config.retriever.k == 5
        assert config.composer.max_context_hits == 5
        assert config.composer.language == "English"

    def test_context_hits_clamped_to_k(self):
        config = AppConfig(retriever=RetrieverConfig(k=3), composer=ComposerConfig(max_context_hits=8))
        assert config.composer.max_context_hits == 3

    def test_clamping_leaves_caller_composer_untouched(self):
        shared = ComposerConfig(max_context_hits=5)
        config = AppConfig(retriever=RetrieverConfig(k=2), composer=shared)

        assert config.composer.max_context_hits == 2
        assert shared.max_context_hits == 5

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("PDF_RAG_LLM_PROVIDER", "anthropic")
        monkeypatch.setenv("PDF_RAG_LLM_MODEL", "claude-sonnet-4-5-20250929")
        monkeypatch.setenv("PDF_RAG_ANSWER_LANGUAGE", "French")
        monkeypatch.setenv("PDF_RAG_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("PDF_RAG_JSON_LOGS", "true")
        monkeypatch.delenv("PDF_RAG_STORE", raising=False)

        config = AppConfig.from_env()

        assert config.llm.provider == LLMProvider.ANTHROPIC
        assert config.llm.model_name == "claude-sonnet-4-5-20250929"
        assert config.composer.language == "French"
        assert config.vector_store.store_type == VectorStoreType.MEMORY
        assert config.logging.level == "DEBUG"
        assert config.logging.json_logs is True
