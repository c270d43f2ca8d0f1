"""
Retrieval components.

Usage:
    from pdf_rag.retrieval import SimilarityRetriever
"""

from .search import SimilarityRetriever

__all__ = ["SimilarityRetriever"]
