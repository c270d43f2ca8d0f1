"""
Indexing pipeline: extract → segment → embed → store.

Usage:
    from pdf_rag.indexing import PdfLoader, SlidingWindowChunker, EmbeddingAdapter, create_vector_store
"""

from .chunking import SlidingWindowChunker, segment
from .embeddings import EmbeddingAdapter, get_embedding_model
from .loaders import PdfLoader
from .vectorstore import InMemoryVectorStore, PgVectorStore, create_vector_store

__all__ = [
    # Extraction
    "PdfLoader",
    # Segmentation
    "segment",
    "SlidingWindowChunker",
    # Embeddings
    "get_embedding_model",
    "EmbeddingAdapter",
    # Vector store
    "create_vector_store",
    "InMemoryVectorStore",
    "PgVectorStore",
]
