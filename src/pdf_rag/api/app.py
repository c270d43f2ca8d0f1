"""
HTTP API for the PDF RAG service.

    GET    /                         health check
    POST   /upload                   multipart PDF → document_id
    POST   /search                   query (+ optional document_id, k) → ranked chunks
    POST   /answer                   query + document_id → grounded answer with citations
    DELETE /documents/{document_id}  remove a document's chunks

Errors are reported as JSON:
    InputError              → 400 {"error": "invalid_input", "field", "detail"}
    UpstreamError           → 502 {"error": "upstream_error", "detail"}
    DataInvariantViolation  → 500 {"error": "internal_error", "detail"}

The core lets provider exceptions propagate. This module is the one
place they are turned into UpstreamError, and the 502 body never
carries provider details.

Usage:
    uvicorn pdf_rag.api.app:create_app --factory
    # or
    pdf-rag-serve
"""

import os
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Optional, TypeVar

import structlog
import uvicorn
from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from pdf_rag import __version__
from pdf_rag.config import AppConfig
from pdf_rag.exceptions import DataInvariantViolation, InputError, PdfRagError, UpstreamError
from pdf_rag.logging_config import configure_logging
from pdf_rag.service import PdfRagService

logger = structlog.get_logger(__name__)

T = TypeVar("T")

_PDF_CONTENT_TYPES = {"application/pdf", "application/x-pdf"}


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------

class SearchRequest(BaseModel):
    query: str = ""
    document_id: Optional[str] = None
    k: Optional[int] = Field(default=None, ge=1, le=100)


class AnswerRequest(BaseModel):
    query: str = ""
    document_id: Optional[str] = None


class UploadResponse(BaseModel):
    document_id: str
    filename: str
    chunk_count: int
    status: str = "saved"


class SearchHitResponse(BaseModel):
    chunk: str
    filename: str
    page: int
    score: float
    distance: float
    rank: int


class SearchResponse(BaseModel):
    query: str
    document_id: Optional[str] = None
    results: list[SearchHitResponse]


class SourceResponse(BaseModel):
    filename: str
    page: int


class AnswerResponse(BaseModel):
    answer: str
    sources: list[SourceResponse]
    insufficient_context: bool


class DeleteResponse(BaseModel):
    document_id: str
    deleted: int


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def get_service(request: Request) -> PdfRagService:
    """FastAPI dependency: the service bound to this app."""
    return request.app.state.service


async def _call_upstream(awaitable: Awaitable[T]) -> T:
    """Await a service call, turning non-service failures into UpstreamError."""
    try:
        return await awaitable
    except PdfRagError:
        raise
    except Exception as e:
        logger.error("upstream_call_failed", error_type=type(e).__name__, exc_info=True)
        raise UpstreamError(
            "Upstream model call failed",
            {"error_type": type(e).__name__},
        ) from e


def _register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(InputError)
    async def input_error_handler(request: Request, exc: InputError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": "invalid_input", "field": exc.field, "detail": exc.message},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        first: dict[str, Any] = errors[0] if errors else {}
        location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
        return JSONResponse(
            status_code=400,
            content={
                "error": "invalid_input",
                "field": ".".join(location) or None,
                "detail": first.get("msg", "Invalid request"),
            },
        )

    @app.exception_handler(UpstreamError)
    async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
        return JSONResponse(
            status_code=502,
            content={
                "error": "upstream_error",
                "detail": "An upstream model service failed. Please try again later.",
            },
        )

    @app.exception_handler(DataInvariantViolation)
    async def invariant_error_handler(request: Request, exc: DataInvariantViolation) -> JSONResponse:
        logger.error("data_invariant_violation", message=exc.message, details=exc.details)
        return JSONResponse(
            status_code=500,
            content={"error": "internal_error", "detail": "Internal data error"},
        )


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_app(service: Optional[PdfRagService] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: A pre-built service. If None, one is built from
            AppConfig.from_env() when the app starts up.

    Returns:
        Configured FastAPI instance.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.service is None:
            config = AppConfig.from_env()
            configure_logging(config.logging.level, config.logging.json_logs)
            app.state.service = PdfRagService.from_config(config)
            logger.info(
                "service_started",
                store=config.vector_store.store_type.value,
                llm=f"{config.llm.provider.value}/{config.llm.model_name}",
            )
        yield

    app = FastAPI(
        title="PDF RAG API",
        description="Upload PDFs, search their chunks and get grounded answers with page citations",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.service = service

    _register_error_handlers(app)

    @app.get("/")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/upload", response_model=UploadResponse)
    async def upload(
        file: UploadFile = File(..., description="PDF file"),
        service: PdfRagService = Depends(get_service),
    ) -> UploadResponse:
        filename = file.filename or ""
        if file.content_type not in _PDF_CONTENT_TYPES and not filename.lower().endswith(".pdf"):
            raise InputError("Only PDF files are accepted", field="file")

        data = await file.read()
        result = await _call_upstream(service.ingest(data, filename))

        return UploadResponse(
            document_id=result.document.document_id,
            filename=result.document.filename,
            chunk_count=result.chunk_count,
        )

    @app.post("/search", response_model=SearchResponse)
    async def search(
        body: SearchRequest,
        service: PdfRagService = Depends(get_service),
    ) -> SearchResponse:
        result = await _call_upstream(
            service.search(body.query, document_id=body.document_id, k=body.k)
        )
        return SearchResponse(
            query=result.query,
            document_id=result.document_id,
            results=[
                SearchHitResponse(
                    chunk=hit.chunk.content,
                    filename=hit.chunk.filename,
                    page=hit.chunk.page,
                    score=hit.score,
                    distance=hit.distance,
                    rank=hit.rank,
                )
                for hit in result.hits
            ],
        )

    @app.post("/answer", response_model=AnswerResponse)
    async def answer(
        body: AnswerRequest,
        service: PdfRagService = Depends(get_service),
    ) -> AnswerResponse:
        result = await _call_upstream(service.answer(body.query, body.document_id))
        return AnswerResponse(
            answer=result.answer,
            sources=[SourceResponse(filename=s.filename, page=s.page) for s in result.sources],
            insufficient_context=result.insufficient_context,
        )

    # sync route: FastAPI runs it in its threadpool, off the event loop
    @app.delete("/documents/{document_id}", response_model=DeleteResponse)
    def delete_document(
        document_id: str,
        service: PdfRagService = Depends(get_service),
    ) -> DeleteResponse:
        return DeleteResponse(document_id=document_id, deleted=service.delete_document(document_id))

    return app


def serve() -> None:
    """Run the API with uvicorn (PDF_RAG_HOST / PDF_RAG_PORT, default 0.0.0.0:8000)."""
    uvicorn.run(
        "pdf_rag.api.app:create_app",
        factory=True,
        host=os.getenv("PDF_RAG_HOST", "0.0.0.0"),
        port=int(os.getenv("PDF_RAG_PORT", "8000")),
    )


if __name__ == "__main__":
    serve()
