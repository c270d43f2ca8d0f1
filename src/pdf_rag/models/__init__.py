"""
Pydantic models shared across the service.

Import from here rather than reaching into submodules:
    from pdf_rag.models import Chunk, ScoredHit, AnswerResult
"""

from .document import Chunk, Document, EmbeddedChunk, ScoredHit
from .result import AnswerResult, IngestResult, RetrievalResult, SourceCitation

__all__ = [
    # Document
    "Document",
    "Chunk",
    "EmbeddedChunk",
    "ScoredHit",
    # Result
    "IngestResult",
    "RetrievalResult",
    "SourceCitation",
    "AnswerResult",
]
