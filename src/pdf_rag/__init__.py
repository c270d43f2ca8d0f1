"""
pdf-rag: question answering over uploaded PDFs.

Quick start:
    from pdf_rag import PdfRagService, AppConfig

    service = PdfRagService.from_config(AppConfig.from_env())
    result = await service.ingest(pdf_bytes, "report.pdf")
    answer = await service.answer("What is the budget?", result.document.document_id)
    print(answer.answer, answer.sources)

Or run the HTTP API:
    pdf-rag-serve
"""

__version__ = "0.1.0"

from .config import (
    AppConfig,
    ChunkingConfig,
    ComposerConfig,
    EmbeddingConfig,
    LLMConfig,
    LoggingConfig,
    RetrieverConfig,
    VectorStoreConfig,
)
from .exceptions import DataInvariantViolation, InputError, PdfRagError, UpstreamError
from .service import PdfRagService

__all__ = [
    # Service (public API)
    "PdfRagService",
    # Config
    "AppConfig",
    "LLMConfig",
    "EmbeddingConfig",
    "ChunkingConfig",
    "RetrieverConfig",
    "ComposerConfig",
    "VectorStoreConfig",
    "LoggingConfig",
    # Errors
    "PdfRagError",
    "InputError",
    "UpstreamError",
    "DataInvariantViolation",
]
