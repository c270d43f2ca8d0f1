"""Tests for retrieval: in-memory store and mocked stores, no API calls."""

from unittest.mock import MagicMock

import pytest

from pdf_rag.base.vectorstore import BaseVectorStore
from pdf_rag.config import RetrieverConfig
from pdf_rag.exceptions import DataInvariantViolation
from pdf_rag.indexing.vectorstore import InMemoryVectorStore
from pdf_rag.models.document import ScoredHit
from pdf_rag.models.result import RetrievalResult
from pdf_rag.retrieval.search import SimilarityRetriever


@pytest.fixture
def populated_store(sample_chunks):
    store = InMemoryVectorStore(dimensions=3)
    vectors = [[1.0, 0.0, 0.0], [0.7, 0.7, 0.0], [0.0, 0.0, 1.0]]
    for chunk, vector in zip(sample_chunks, vectors):
        store.insert(chunk, vector)
    return store


class TestSimilarityRetriever:

    def test_returns_retrieval_result(self, populated_store):
        retriever = SimilarityRetriever(populated_store, RetrieverConfig(k=2))
        result = retriever.retrieve([1.0, 0.0, 0.0], query="budget")

        assert isinstance(result, RetrievalResult)
        assert result.k == 2
        assert result.query == "budget"
        assert len(result.hits) == 2
        assert result.hits[0].chunk.content.startswith("The annual budget")
        assert result.hits[0].distance == pytest.approx(0.0, abs=1e-9)

    def test_k_override(self, populated_store):
        retriever = SimilarityRetriever(populated_store, RetrieverConfig(k=1))
        assert len(retriever.retrieve([1.0, 0.0, 0.0], k=3).hits) == 3

    @pytest.mark.parametrize("k", [0, -1])
    def test_non_positive_k_rejected(self, populated_store, k):
        retriever = SimilarityRetriever(populated_store, RetrieverConfig(k=5))
        with pytest.raises(ValueError, match="positive"):
            retriever.retrieve([1.0, 0.0, 0.0], k=k)

    def test_scope(self, populated_store):
        retriever = SimilarityRetriever(populated_store)
        result = retriever.retrieve([1.0, 0.0, 0.0], document_id="doc-2")

        assert result.document_id == "doc-2"
        assert [h.chunk.document_id for h in result.hits] == ["doc-2"]

    def test_unknown_document_gives_no_hits(self, populated_store):
        result = SimilarityRetriever(populated_store).retrieve([1.0, 0.0, 0.0], document_id="missing")
        assert result.hits == []


class TestStoreContractChecks:

    def _store_returning(self, hits):
        store = MagicMock(spec=BaseVectorStore)
        store.query.return_value = hits
        return store

    def test_out_of_order_hits_rejected(self, sample_chunks):
        hits = [
            ScoredHit(chunk=sample_chunks[0], distance=0.5, rank=0),
            ScoredHit(chunk=sample_chunks[1], distance=0.1, rank=1),
        ]
        retriever = SimilarityRetriever(self._store_returning(hits))

        with pytest.raises(DataInvariantViolation, match="distance order"):
            retriever.retrieve([1.0, 0.0, 0.0])

    def test_out_of_scope_hits_rejected(self, sample_chunks):
        hits = [ScoredHit(chunk=sample_chunks[2], distance=0.1, rank=0)]
        retriever = SimilarityRetriever(self._store_returning(hits))

        with pytest.raises(DataInvariantViolation, match="outside the requested document"):
            retriever.retrieve([1.0, 0.0, 0.0], document_id="doc-1")

    def test_too_many_hits_rejected(self, sample_hits):
        retriever = SimilarityRetriever(self._store_returning(sample_hits), RetrieverConfig(k=1))

        with pytest.raises(DataInvariantViolation, match="more hits"):
            retriever.retrieve([1.0, 0.0, 0.0])
