"""
Abstract base class for vector stores.

The store is the only shared mutable state in the service. Whatever
backend sits behind it must make each inserted row visible atomically:
a concurrent query sees a chunk with its vector, or does not see it at
all. Atomicity ACROSS rows is not promised; an interrupted ingestion
can leave part of a document behind, and delete_document() is how
that gets cleaned up.
"""

from abc import ABC, abstractmethod
from typing import Optional

from pdf_rag.models.document import Chunk, EmbeddedChunk, ScoredHit


class BaseVectorStore(ABC):
    """
    Contract for vector-capable record stores.

    query() returns hits ordered by ascending cosine distance, ties
    broken by insertion order (earlier first), and never ranks a row
    whose vector length differs from the query's.
    """

    @abstractmethod
    def insert(self, chunk: Chunk, vector: list[float]) -> None:
        """Store one chunk with its vector."""
        ...

    def insert_many(self, embedded: list[EmbeddedChunk]) -> int:
        """
        Store several chunks, one row at a time.

        Returns:
            Number of rows inserted.
        """
        for item in embedded:
            self.insert(item.chunk, item.vector)
        return len(embedded)

    @abstractmethod
    def query(
        self,
        vector: list[float],
        document_id: Optional[str] = None,
        k: int = 5,
    ) -> list[ScoredHit]:
        """
        Similarity search.

        Args:
            vector: Query embedding.
            document_id: If given, only this document's chunks are eligible.
            k: Maximum number of hits.

        Returns:
            Up to k ScoredHits, nearest first, ranks 0..n-1.
        """
        ...

    @abstractmethod
    def delete_document(self, document_id: str) -> int:
        """Remove every chunk of a document. Returns the number removed."""
        ...

    @abstractmethod
    def count(self, document_id: Optional[str] = None) -> int:
        """Number of stored chunks, optionally for one document."""
        ...
