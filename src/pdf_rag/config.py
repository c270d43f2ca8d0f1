"""
Configuration for the PDF RAG service.

Split into one config per concern so each stage module only receives
what it needs. AppConfig bundles them all for convenience.

Usage:
    # Full config: pass to the service
    config = AppConfig()

    # Override specific parts
    config = AppConfig(
        llm=LLMConfig(provider="anthropic", model_name="claude-sonnet-4-5-20250929"),
        chunking=ChunkingConfig(max_tokens=200, overlap_tokens=40),
    )

    # Standalone: use just one piece
    chunking = ChunkingConfig(max_tokens=150, overlap_tokens=50)

    # From environment (PDF_RAG_* variables, .env is loaded at import)
    config = AppConfig.from_env()
"""

import os
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

# Load .env from the project root (walks up from this file to find it).
# This runs once at import time, so any module that does
#   from pdf_rag.config import AppConfig
# gets the env vars (OPENAI_API_KEY, DATABASE_URL, ...) before anything else.
_env_path = Path(__file__).resolve().parent.parent.parent / ".env"
load_dotenv(_env_path)


# ---------------------------------------------------------------------------
# Enums: for things with a genuinely fixed set of choices
# ---------------------------------------------------------------------------

class LLMProvider(str, Enum):
    """
    Supported LLM providers.

    Each provider needs a different LangChain chat model class
    (ChatOpenAI vs ChatAnthropic), so the set is closed.
    """

    OPENAI = "openai"
    ANTHROPIC = "anthropic"


class VectorStoreType(str, Enum):
    """Supported vector store backends."""

    MEMORY = "memory"
    PGVECTOR = "pgvector"


# ---------------------------------------------------------------------------
# Per-concern configs
# ---------------------------------------------------------------------------

class LLMConfig(BaseModel):
    """
    LLM configuration for answer generation.

    Used by: generation/generate.py (through utils.helpers.get_llm)

    Temperature defaults to 0 so answers are as deterministic as the
    provider allows.
    """

    provider: LLMProvider = Field(
        default=LLMProvider.OPENAI,
        description="Which LLM provider to use",
    )
    model_name: str = Field(
        default="gpt-4o-mini",
        description="Model identifier (e.g. 'gpt-4o-mini', 'claude-sonnet-4-5-20250929')",
    )
    temperature: float = Field(
        default=0.0,
        ge=0.0,
        le=2.0,
        description="Sampling temperature. 0 = deterministic, higher = more creative",
    )
    max_tokens: int = Field(
        default=1024,
        gt=0,
        description="Maximum tokens in the LLM response",
    )
    request_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Seconds before a generation request is abandoned",
    )


class EmbeddingConfig(BaseModel):
    """
    Embedding model configuration.

    Used by: indexing/embeddings.py

    Provider is an open string (not an enum) so new LangChain embedding
    integrations can be added in the factory without touching the config.
    `dimensions` is the vector size every stored chunk must share; the
    adapter rejects anything else.
    """

    provider: str = Field(
        default="openai",
        description="Embedding provider: 'openai', 'huggingface', ...",
    )
    model_name: str = Field(
        default="text-embedding-3-small",
        description="Embedding model identifier",
    )
    dimensions: int = Field(
        default=1536,
        gt=0,
        description="Dimensionality of every produced vector",
    )
    batch_size: int = Field(
        default=100,
        gt=0,
        description="Texts sent per embedding request",
    )
    max_concurrency: int = Field(
        default=4,
        gt=0,
        description="Embedding requests allowed in flight at once",
    )
    request_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Seconds before an embedding request is abandoned",
    )
    model_kwargs: dict[str, Any] = Field(
        default_factory=dict,
        description="Extra kwargs passed to the embedding model constructor",
    )


class ChunkingConfig(BaseModel):
    """
    Segmentation configuration.

    Used by: indexing/chunking.py

    Paragraphs whose estimated token count (characters / 4, rounded up)
    fits in max_tokens are kept whole. Longer paragraphs are cut into
    windows of max_tokens words, each starting overlap_tokens words
    before the previous window ended. Chunks shorter than min_words
    words are dropped.
    """

    max_tokens: int = Field(
        default=150,
        gt=0,
        description="Token ceiling for a whole paragraph / word count of a window",
    )
    overlap_tokens: int = Field(
        default=50,
        ge=0,
        description="Words shared by consecutive windows of one paragraph",
    )
    min_words: int = Field(
        default=5,
        ge=1,
        description="Chunks with fewer words are discarded",
    )

    @model_validator(mode="after")
    def validate_overlap(self) -> "ChunkingConfig":
        """Overlap must be smaller than the window, otherwise windows would never advance."""
        if self.overlap_tokens >= self.max_tokens:
            raise ValueError(
                f"overlap_tokens ({self.overlap_tokens}) must be less than "
                f"max_tokens ({self.max_tokens})"
            )
        return self


class RetrieverConfig(BaseModel):
    """
    Retrieval configuration.

    Used by: retrieval/search.py
    """

    k: int = Field(
        default=5,
        gt=0,
        description="Number of hits to return",
    )


class ComposerConfig(BaseModel):
    """
    Answer composition configuration.

    Used by: generation/generate.py

    language is the single language the model is told to answer in,
    whatever language the question or the context uses.
    """

    max_context_hits: int = Field(
        default=5,
        gt=0,
        description="How many of the top hits go into the prompt context",
    )
    language: str = Field(
        default="English",
        description="Language every answer is written in",
    )


class VectorStoreConfig(BaseModel):
    """
    Vector store configuration.

    Used by: indexing/vectorstore.py

    database_url is only relevant for pgvector; the in-memory store
    lives and dies with the process.
    """

    store_type: VectorStoreType = Field(
        default=VectorStoreType.MEMORY,
        description="Vector store backend",
    )
    database_url: Optional[str] = Field(
        default_factory=lambda: os.getenv("DATABASE_URL"),
        description="PostgreSQL connection string (pgvector only)",
    )
    table_name: str = Field(
        default="document_embeddings",
        pattern=r"^[A-Za-z_][A-Za-z0-9_]*$",
        description="Table holding chunk rows (pgvector only)",
    )

    @model_validator(mode="after")
    def validate_database_url(self) -> "VectorStoreConfig":
        """pgvector cannot work without somewhere to connect to."""
        if self.store_type == VectorStoreType.PGVECTOR and not self.database_url:
            raise ValueError("database_url (or DATABASE_URL) is required for the pgvector store")
        return self


class LoggingConfig(BaseModel):
    """Logging configuration. Used by: logging_config.py."""

    level: str = Field(default="INFO", description="Minimum log level")
    json_logs: bool = Field(default=False, description="Render JSON lines instead of console output")


# ---------------------------------------------------------------------------
# Top-level config: bundles everything
# ---------------------------------------------------------------------------

class AppConfig(BaseModel):
    """
    Complete service configuration.

    PdfRagService.from_config() receives this and passes slices to each stage:
        chunker = SlidingWindowChunker(config.chunking)
        retriever = SimilarityRetriever(store, config.retriever)
        composer = AnswerComposer(config.llm, config.composer)

    All sub-configs have sensible defaults, so AppConfig() with no
    arguments gives a working in-memory setup.
    """

    llm: LLMConfig = Field(default_factory=LLMConfig)
    embedding: EmbeddingConfig = Field(default_factory=EmbeddingConfig)
    chunking: ChunkingConfig = Field(default_factory=ChunkingConfig)
    retriever: RetrieverConfig = Field(default_factory=RetrieverConfig)
    composer: ComposerConfig = Field(default_factory=ComposerConfig)
    vector_store: VectorStoreConfig = Field(default_factory=VectorStoreConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def validate_context_hits(self) -> "AppConfig":
        """The composer can never use more hits than the retriever returns."""
        if self.composer.max_context_hits > self.retriever.k:
            # copy, so a ComposerConfig shared with other configs is left alone
            self.composer = self.composer.model_copy(update={"max_context_hits": self.retriever.k})
        return self

    @classmethod
    def from_env(cls) -> "AppConfig":
        """
        Build a config from PDF_RAG_* environment variables.

        Only the knobs worth changing per deployment are read here;
        anything else keeps its default.
        """
        llm_kwargs: dict[str, Any] = {}
        if os.getenv("PDF_RAG_LLM_PROVIDER"):
            llm_kwargs["provider"] = os.getenv("PDF_RAG_LLM_PROVIDER")
        if os.getenv("PDF_RAG_LLM_MODEL"):
            llm_kwargs["model_name"] = os.getenv("PDF_RAG_LLM_MODEL")

        composer_kwargs: dict[str, Any] = {}
        if os.getenv("PDF_RAG_ANSWER_LANGUAGE"):
            composer_kwargs["language"] = os.getenv("PDF_RAG_ANSWER_LANGUAGE")

        store_kwargs: dict[str, Any] = {}
        if os.getenv("PDF_RAG_STORE"):
            store_kwargs["store_type"] = os.getenv("PDF_RAG_STORE")

        return cls(
            llm=LLMConfig(**llm_kwargs),
            composer=ComposerConfig(**composer_kwargs),
            vector_store=VectorStoreConfig(**store_kwargs),
            logging=LoggingConfig(
                level=os.getenv("PDF_RAG_LOG_LEVEL", "INFO"),
                json_logs=os.getenv("PDF_RAG_JSON_LOGS", "").lower() in ("1", "true", "yes"),
            ),
        )
