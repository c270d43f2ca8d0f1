"""
Vector store retrieval.

The retriever sits between the embedding adapter and the composer. It
takes a query vector (never raw text, the service embeds first) and
asks the store for the nearest chunks:

    query text → EmbeddingAdapter.embed_query → SimilarityRetriever → hits

The store does the ranking. The retriever does not trust it blindly:
it re-checks that what came back is ordered nearest first and stays
inside the requested document, and raises DataInvariantViolation if
not. A silent mis-ranking would hand the wrong context to the LLM.

Usage:
    from pdf_rag.retrieval.search import SimilarityRetriever
    from pdf_rag.config import RetrieverConfig

    retriever = SimilarityRetriever(store, RetrieverConfig(k=5))
    result = retriever.retrieve(query_vector, document_id=doc_id)
    # → RetrievalResult with up to 5 ScoredHits
"""

from typing import Optional

import structlog

from pdf_rag.base.retriever import BaseRetriever
from pdf_rag.base.vectorstore import BaseVectorStore
from pdf_rag.config import RetrieverConfig
from pdf_rag.exceptions import DataInvariantViolation
from pdf_rag.logging_config import log_retrieval_event
from pdf_rag.models.document import ScoredHit
from pdf_rag.models.result import RetrievalResult

logger = structlog.get_logger(__name__)


class SimilarityRetriever(BaseRetriever):
    """
    Cosine similarity search, optionally scoped to one document.

    Hits come back nearest first with ties in insertion order. Rows
    whose vector length differs from the query's are never ranked.
    """

    def __init__(self, store: BaseVectorStore, config: RetrieverConfig = None):
        self._store = store
        self._config = config or RetrieverConfig()

    def retrieve(
        self,
        query_vector: list[float],
        document_id: Optional[str] = None,
        k: Optional[int] = None,
        query: str = "",
    ) -> RetrievalResult:
        k = self._config.k if k is None else k
        if k <= 0:
            raise ValueError(f"k must be a positive integer, got {k}")

        hits = self._store.query(query_vector, document_id=document_id, k=k)

        self._check(hits, document_id, k)

        log_retrieval_event(
            logger,
            document_id=document_id,
            k=k,
            hit_count=len(hits),
            best_distance=hits[0].distance if hits else None,
        )

        return RetrievalResult(
            hits=hits,
            query=query,
            document_id=document_id,
            k=k,
        )

    @staticmethod
    def _check(hits: list[ScoredHit], document_id: Optional[str], k: int) -> None:
        if len(hits) > k:
            raise DataInvariantViolation(
                "Vector store returned more hits than requested",
                {"k": k, "returned": len(hits)},
            )

        for previous, current in zip(hits, hits[1:]):
            if current.distance < previous.distance:
                raise DataInvariantViolation(
                    "Vector store returned hits out of distance order",
                    {"rank": current.rank, "distance": current.distance},
                )

        if document_id is not None:
            for hit in hits:
                if hit.chunk.document_id != document_id:
                    raise DataInvariantViolation(
                        "Vector store returned a hit outside the requested document",
                        {"expected": document_id, "actual": hit.chunk.document_id},
                    )
