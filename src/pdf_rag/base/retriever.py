"""
Abstract base class for retrievers.

A retriever takes an already-embedded query and returns the closest
chunks. It works on vectors, not text, so the embedding step stays in
the embedding adapter and a test can drive retrieval with hand-made
vectors.
"""

from abc import ABC, abstractmethod
from typing import Optional

from pdf_rag.models.result import RetrievalResult


class BaseRetriever(ABC):
    """
    Contract for retrievers.

    Every retriever returns a RetrievalResult wrapping ScoredHits plus
    the scope and k it ran with, so results are self-describing.
    """

    @abstractmethod
    def retrieve(
        self,
        query_vector: list[float],
        document_id: Optional[str] = None,
        k: Optional[int] = None,
        query: str = "",
    ) -> RetrievalResult:
        """
        Retrieve the chunks nearest to a query vector.

        Args:
            query_vector: Embedding of the user's query.
            document_id: Restrict the search to one document.
            k: Number of hits (defaults to the configured k).
            query: Original query text, recorded on the result.

        Returns:
            RetrievalResult with hits ordered nearest first.
        """
        ...
