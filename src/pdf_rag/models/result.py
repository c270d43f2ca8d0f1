"""
Result models for ingestion, retrieval and answer generation.

These are the outputs of the pipeline: what callers get back.
"""

from typing import Optional

from pydantic import BaseModel, Field

from .document import Document, ScoredHit


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------

class IngestResult(BaseModel):
    """Outcome of one upload: the new document and how many chunks it produced."""

    document: Document
    chunk_count: int = Field(default=0, ge=0)


# ---------------------------------------------------------------------------
# Retrieval results
# ---------------------------------------------------------------------------

class RetrievalResult(BaseModel):
    """
    Output of the retrieval stage.

    Hits are nearest first. document_id records the scope the search
    ran under (None = every stored chunk was eligible).
    """

    hits: list[ScoredHit] = Field(default_factory=list)
    query: str = Field(default="", description="The query text that was embedded")
    document_id: Optional[str] = Field(default=None, description="Scope of the search")
    k: int = Field(default=0, description="Requested number of hits")


# ---------------------------------------------------------------------------
# Generation results
# ---------------------------------------------------------------------------

class SourceCitation(BaseModel):
    """Where a piece of context came from: file and page."""

    filename: str
    page: int


class AnswerResult(BaseModel):
    """
    Output of the answer composer.

    When nothing relevant was retrieved the model is never called:
    insufficient_context is True, answer holds a fixed message and
    sources is empty.
    """

    answer: str = Field(description="The generated (or fixed fallback) answer")
    sources: list[SourceCitation] = Field(
        default_factory=list,
        description="Citations in the rank order of the hits used",
    )
    insufficient_context: bool = Field(default=False)
    model: str = Field(default="", description="Model that produced this answer")
