"""
Abstract base classes defining the contract for each pipeline stage.

Import from here:
    from pdf_rag.base import BaseChunker, BaseVectorStore, BaseRetriever
"""

from .indexer import BaseLoader, BaseChunker
from .vectorstore import BaseVectorStore
from .retriever import BaseRetriever
from .generator import BaseComposer

__all__ = [
    "BaseLoader",
    "BaseChunker",
    "BaseVectorStore",
    "BaseRetriever",
    "BaseComposer",
]
