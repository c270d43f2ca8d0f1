"""Tests for the HTTP API: TestClient against an in-memory service."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from pdf_rag.api.app import create_app
from pdf_rag.indexing.embeddings import EmbeddingAdapter
from pdf_rag.indexing.loaders import PdfLoader

PDF_FILE = ("report.pdf", b"%PDF-1.4 fake content", "application/pdf")


@pytest.fixture
def client(service):
    return TestClient(create_app(service))


def _upload(client) -> str:
    response = client.post("/upload", files={"file": PDF_FILE})
    assert response.status_code == 200
    return response.json()["document_id"]


def test_health(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


class TestUpload:

    def test_upload_returns_document_id(self, client):
        response = client.post("/upload", files={"file": PDF_FILE})

        assert response.status_code == 200
        body = response.json()
        assert body["document_id"]
        assert body["filename"] == "report.pdf"
        assert body["chunk_count"] == 3
        assert body["status"] == "saved"

    def test_non_pdf_rejected(self, client):
        response = client.post("/upload", files={"file": ("notes.txt", b"hello", "text/plain")})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_input"
        assert response.json()["field"] == "file"

    def test_empty_file_rejected(self, client):
        response = client.post("/upload", files={"file": ("empty.pdf", b"", "application/pdf")})
        assert response.status_code == 400

    def test_missing_file_rejected(self, client):
        response = client.post("/upload")
        assert response.status_code == 400
        assert response.json()["field"] == "file"

    def test_unreadable_pdf_is_400(self, service):
        service._loader = PdfLoader()
        client = TestClient(create_app(service))

        with patch("pdf_rag.indexing.loaders.PdfReader", side_effect=KeyError("/Root")):
            response = client.post("/upload", files={"file": PDF_FILE})

        assert response.status_code == 400
        assert response.json()["field"] == "file"


class TestSearch:

    def test_search_returns_ranked_results(self, client):
        document_id = _upload(client)
        response = client.post("/search", json={"query": "harbour budget", "document_id": document_id})

        assert response.status_code == 200
        body = response.json()
        assert body["query"] == "harbour budget"
        results = body["results"]
        assert [r["rank"] for r in results] == list(range(len(results)))
        assert all(r["filename"] == "report.pdf" for r in results)
        assert {"chunk", "page", "score", "distance"} <= set(results[0])

    def test_empty_query_is_400(self, client):
        response = client.post("/search", json={"query": "  "})

        assert response.status_code == 400
        assert response.json() == {
            "error": "invalid_input",
            "field": "query",
            "detail": "Query must not be empty",
        }

    def test_invalid_k_is_400(self, client):
        response = client.post("/search", json={"query": "budget", "k": 0})
        assert response.status_code == 400
        assert response.json()["field"] == "k"


class TestAnswer:

    def test_answer_with_sources(self, client):
        document_id = _upload(client)
        response = client.post("/answer", json={"query": "What is the budget?", "document_id": document_id})

        assert response.status_code == 200
        body = response.json()
        assert body["answer"] == "The budget is five million euros [1]."
        assert body["insufficient_context"] is False
        assert body["sources"][0]["filename"] == "report.pdf"

    def test_missing_document_id_is_400(self, client):
        response = client.post("/answer", json={"query": "What is the budget?"})

        assert response.status_code == 400
        assert response.json()["field"] == "document_id"

    def test_unknown_document_is_insufficient_context(self, client):
        response = client.post("/answer", json={"query": "What is the budget?", "document_id": "nope"})

        assert response.status_code == 200
        assert response.json()["insufficient_context"] is True
        assert response.json()["sources"] == []


class TestErrorMapping:

    def test_provider_failure_is_502_without_details(self, client, fake_embeddings):
        with patch.object(fake_embeddings, "embed_documents", side_effect=RuntimeError("secret provider detail")):
            response = client.post("/upload", files={"file": PDF_FILE})

        assert response.status_code == 502
        assert response.json()["error"] == "upstream_error"
        assert "secret" not in response.text

    def test_invariant_violation_is_500(self, service, fake_embeddings, embedding_config):
        service._embedder = EmbeddingAdapter(type(fake_embeddings)(dimensions=3), embedding_config)
        client = TestClient(create_app(service))

        response = client.post("/upload", files={"file": PDF_FILE})

        assert response.status_code == 500
        assert response.json()["error"] == "internal_error"


def test_delete_document(client):
    document_id = _upload(client)

    response = client.delete(f"/documents/{document_id}")

    assert response.status_code == 200
    assert response.json() == {"document_id": document_id, "deleted": 3}
