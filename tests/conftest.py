"""
Shared test fixtures for the pdf-rag test suite.

Provides reusable fixtures: configs, deterministic fake embeddings,
sample chunks and hits, a scripted chat model and a fully wired
in-memory service. Nothing here touches the network.
"""

import re
import zlib
from unittest.mock import MagicMock

import pytest
from langchain_core.embeddings import Embeddings
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from pdf_rag.base.indexer import BaseLoader
from pdf_rag.config import ChunkingConfig, ComposerConfig, EmbeddingConfig, LLMConfig, RetrieverConfig
from pdf_rag.generation.generate import AnswerComposer
from pdf_rag.indexing.chunking import SlidingWindowChunker
from pdf_rag.indexing.embeddings import EmbeddingAdapter
from pdf_rag.indexing.vectorstore import InMemoryVectorStore
from pdf_rag.models.document import Chunk, ScoredHit
from pdf_rag.retrieval.search import SimilarityRetriever
from pdf_rag.service import PdfRagService

DIMENSIONS = 16

_WORD = re.compile(r"[a-z0-9]+")


# ---------------------------------------------------------------------------
# Fake embeddings
# ---------------------------------------------------------------------------

class FakeEmbeddings(Embeddings):
    """
    Bag-of-words hashed into a small vector.

    Texts sharing words get nearby vectors, identical texts get
    identical vectors, and the output is stable across runs (crc32,
    not hash()). calls records each embed_documents batch.
    """

    def __init__(self, dimensions: int = DIMENSIONS):
        self.dimensions = dimensions
        self.calls: list[list[str]] = []

    def _vector(self, text: str) -> list[float]:
        vector = [0.0] * self.dimensions
        for word in _WORD.findall(text.lower()):
            vector[zlib.crc32(word.encode()) % self.dimensions] += 1.0
        return vector

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        return [self._vector(t) for t in texts]

    def embed_query(self, text: str) -> list[float]:
        return self._vector(text)


class StaticLoader(BaseLoader):
    """Loader that ignores the bytes and returns fixed page texts."""

    def __init__(self, pages: list[str]):
        self.pages = pages

    def extract_pages(self, data: bytes) -> list[str]:
        return list(self.pages)


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def llm_config():
    """LLM config using OpenAI (default for tests)."""
    return LLMConfig(provider="openai", model_name="gpt-4o-mini", temperature=0.0)


@pytest.fixture
def embedding_config():
    return EmbeddingConfig(dimensions=DIMENSIONS, batch_size=2, max_concurrency=2)


@pytest.fixture
def chunking_config():
    return ChunkingConfig(max_tokens=150, overlap_tokens=50, min_words=5)


@pytest.fixture
def retriever_config():
    return RetrieverConfig(k=5)


@pytest.fixture
def composer_config():
    return ComposerConfig(max_context_hits=3, language="English")


# ---------------------------------------------------------------------------
# Sample data fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_pages():
    """Page texts as a loader would return them; page 2 has no text layer."""
    return [
        "The annual budget for the harbour project is five million euros.\n\n"
        "Construction starts in spring and lasts about eighteen months.",
        "",
        "Safety inspections are carried out every quarter by an external firm.\n\n"
        "Short line.",
    ]


@pytest.fixture
def sample_chunks():
    return [
        Chunk(document_id="doc-1", filename="report.pdf", page=1,
              content="The annual budget for the harbour project is five million euros.", position=0),
        Chunk(document_id="doc-1", filename="report.pdf", page=3,
              content="Safety inspections are carried out every quarter.", position=1),
        Chunk(document_id="doc-2", filename="other.pdf", page=2,
              content="Unrelated notes about the office coffee machine schedule.", position=0),
    ]


@pytest.fixture
def sample_hits(sample_chunks):
    return [
        ScoredHit(chunk=sample_chunks[0], distance=0.10, rank=0),
        ScoredHit(chunk=sample_chunks[1], distance=0.35, rank=1),
    ]


# ---------------------------------------------------------------------------
# Component fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def fake_embeddings():
    return FakeEmbeddings()


@pytest.fixture
def embedder(fake_embeddings, embedding_config):
    return EmbeddingAdapter(fake_embeddings, embedding_config)


@pytest.fixture
def memory_store():
    return InMemoryVectorStore(dimensions=DIMENSIONS)


@pytest.fixture
def fake_llm():
    """Chat model that always replies with the same grounded answer."""
    return FakeListChatModel(responses=["  The budget is five million euros [1].  "])


@pytest.fixture
def mock_llm():
    """A MagicMock standing in for a chat model, for asserting it is never called."""
    return MagicMock()


@pytest.fixture
def service(sample_pages, chunking_config, embedder, memory_store, retriever_config,
            llm_config, composer_config, fake_llm):
    """A fully wired service: static pages, fake embeddings, in-memory store, fake LLM."""
    return PdfRagService(
        loader=StaticLoader(sample_pages),
        chunker=SlidingWindowChunker(chunking_config),
        embedder=embedder,
        store=memory_store,
        retriever=SimilarityRetriever(memory_store, retriever_config),
        composer=AnswerComposer(llm_config, composer_config, llm=fake_llm),
    )
