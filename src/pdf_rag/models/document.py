"""
Document models for the RAG pipeline.

These represent data at each stage:
  Document (uploaded) → Chunk (segmented) → EmbeddedChunk (embedded + stored)
  → ScoredHit (retrieved + scored, query time only)
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Document(BaseModel):
    """
    An ingested PDF.

    The document_id is the only handle callers get back from an upload,
    and the scope key for answering questions about that file.
    """

    model_config = ConfigDict(frozen=True)

    document_id: str = Field(description="Opaque unique token assigned at ingestion")
    filename: str = Field(description="Original file name, used in citations")
    uploaded_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Ingestion timestamp (UTC)",
    )
    page_count: int = Field(default=0, ge=0, description="Physical pages in the PDF")


class Chunk(BaseModel):
    """
    A single unit of retrievable text.

    Created once by the chunker and never mutated. The filename travels
    with the chunk so a hit can be cited without a second lookup.
    """

    model_config = ConfigDict(frozen=True)

    document_id: str = Field(description="Owning document")
    filename: str = Field(default="", description="Owning document's file name")
    page: int = Field(ge=1, description="1-based page the text came from")
    content: str = Field(description="Chunk text, control characters stripped")
    position: int = Field(default=0, ge=0, description="Index in the document's chunk sequence")

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("chunk content must not be blank")
        return value


class EmbeddedChunk(BaseModel):
    """A Chunk plus its vector. This is one row in the vector store."""

    chunk: Chunk
    vector: list[float] = Field(description="Dense embedding of chunk.content")

    @property
    def dimensions(self) -> int:
        return len(self.vector)


class ScoredHit(BaseModel):
    """
    A chunk returned by similarity search.

    distance is cosine distance (0 = same direction, 2 = opposite);
    score is the matching similarity, 1 - distance, so both "lower is
    nearer" and "higher is better" readings are available downstream.
    """

    chunk: Chunk
    distance: float = Field(description="Cosine distance to the query vector")
    rank: int = Field(default=0, ge=0, description="Position in the result list")

    @property
    def score(self) -> float:
        return 1.0 - self.distance
