"""
Abstract base classes for page extraction and chunking.

Why separate BaseLoader and BaseChunker?
    Extraction turns file bytes into per-page text and knows nothing
    about retrieval. Chunking turns that text into retrieval units and
    knows nothing about file formats. Either side can be swapped (a
    different PDF library, a different segmentation strategy) without
    touching the other:
        pages = loader.extract_pages(data)
        chunks = chunker.chunk(document, pages)
"""

from abc import ABC, abstractmethod

from pdf_rag.config import ChunkingConfig
from pdf_rag.models.document import Chunk, Document


class BaseLoader(ABC):
    """
    Contract for page extractors.

    A loader takes raw file bytes and returns one text string per
    physical page, in page order. Pages without a text layer must still
    produce an entry ("") so that list index + 1 is the page number.
    """

    @abstractmethod
    def extract_pages(self, data: bytes) -> list[str]:
        """
        Extract per-page plain text.

        Args:
            data: The uploaded file's bytes.

        Returns:
            Page texts in physical page order.
        """
        ...


class BaseChunker(ABC):
    """
    Contract for document chunkers.

    A chunker receives a Document and its page texts and returns the
    Chunks to embed, each tagged with its page and a document-wide
    position. Every chunker receives a ChunkingConfig so the caller
    controls window size, overlap and the minimum chunk length.
    """

    def __init__(self, config: ChunkingConfig):
        self.config = config

    @abstractmethod
    def chunk(self, document: Document, pages: list[str]) -> list[Chunk]:
        """
        Split a document's pages into chunks.

        Args:
            document: The document the chunks will belong to.
            pages: Page texts, index 0 = page 1.

        Returns:
            Chunks in document order with position 0..n-1.
        """
        ...
