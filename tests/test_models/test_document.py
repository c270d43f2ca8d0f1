"""Tests for document and result models: pure Pydantic, no API calls."""

import pytest
from pydantic import ValidationError

from pdf_rag.models.document import Chunk, Document, EmbeddedChunk, ScoredHit
from pdf_rag.models.result import AnswerResult, RetrievalResult


def test_document_defaults():
    doc = Document(document_id="abc", filename="report.pdf")
    assert doc.page_count == 0
    assert doc.uploaded_at.tzinfo is not None


def test_chunk_is_immutable():
    chunk = Chunk(document_id="abc", page=1, content="Some chunk text")
    with pytest.raises(ValidationError):
        chunk.content = "changed"


def test_chunk_page_is_one_based():
    with pytest.raises(ValidationError):
        Chunk(document_id="abc", page=0, content="text")


def test_chunk_content_not_blank():
    with pytest.raises(ValidationError, match="blank"):
        Chunk(document_id="abc", page=1, content="   ")


def test_embedded_chunk_dimensions():
    chunk = Chunk(document_id="abc", page=1, content="text")
    assert EmbeddedChunk(chunk=chunk, vector=[0.1, 0.2, 0.3]).dimensions == 3


def test_scored_hit_score_is_similarity():
    chunk = Chunk(document_id="abc", page=1, content="text")
    hit = ScoredHit(chunk=chunk, distance=0.25, rank=0)
    assert hit.score == pytest.approx(0.75)


def test_result_defaults():
    assert RetrievalResult().hits == []
    answer = AnswerResult(answer="text")
    assert answer.sources == []
    assert answer.insufficient_context is False
