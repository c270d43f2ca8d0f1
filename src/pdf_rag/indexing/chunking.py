"""
Document segmentation.

Turns per-page text into bounded, overlapping, deduplicated chunks:

    page text
      → paragraphs (split on blank lines, trimmed, empties dropped)
      → short paragraphs kept whole, long ones cut into word windows
      → chunks under min_words dropped, exact repeats dropped

Token counts are estimated as ceil(characters / 4), which is close
enough for OpenAI tokenizers on English text and costs nothing.
Windows are measured in words; with the defaults (150 words, 50 of
overlap) a window stays well inside the embedding model's input limit.

Usage:
    from pdf_rag.indexing.chunking import segment, SlidingWindowChunker

    texts = segment(page_text, max_tokens=150, overlap_tokens=50, min_words=5)

    chunker = SlidingWindowChunker(ChunkingConfig())
    chunks = chunker.chunk(document, pages)
"""

import math
import re

import structlog

from pdf_rag.base.indexer import BaseChunker
from pdf_rag.config import ChunkingConfig
from pdf_rag.models.document import Chunk, Document
from pdf_rag.utils.helpers import clean_text

logger = structlog.get_logger(__name__)

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


def estimate_tokens(text: str) -> int:
    """Cheap token estimate: one token per four characters, rounded up."""
    return math.ceil(len(text) / 4)


def split_paragraphs(text: str) -> list[str]:
    """Split on blank lines; return trimmed, non-empty paragraphs."""
    paragraphs = (p.strip() for p in _PARAGRAPH_BREAK.split(text))
    return [p for p in paragraphs if p]


def sliding_windows(words: list[str], max_tokens: int, overlap_tokens: int) -> list[str]:
    """
    Cut a word sequence into windows of up to max_tokens words.

    After a window ending at word index `end`, the next one starts at
    max(0, end - overlap_tokens), so consecutive windows share exactly
    overlap_tokens words. The last window is the first to reach the end
    of the sequence.
    """
    if overlap_tokens >= max_tokens:
        raise ValueError(
            f"overlap_tokens ({overlap_tokens}) must be less than max_tokens ({max_tokens})"
        )

    windows: list[str] = []
    start = 0
    while start < len(words):
        end = min(start + max_tokens, len(words))
        windows.append(" ".join(words[start:end]))
        if end == len(words):
            break
        start = max(0, end - overlap_tokens)
    return windows


def segment(
    page_text: str,
    max_tokens: int = 150,
    overlap_tokens: int = 50,
    min_words: int = 5,
) -> list[str]:
    """
    Split one page of text into chunk texts.

    Args:
        page_text: Raw text of a single page.
        max_tokens: Estimated-token ceiling for keeping a paragraph whole,
            and the word length of each window for longer paragraphs.
        overlap_tokens: Words shared by consecutive windows. Must be
            smaller than max_tokens.
        min_words: Chunks with fewer words are dropped.

    Returns:
        Chunk texts in page order. No two are identical, none has fewer
        than min_words words. Empty or whitespace-only input gives [].

    Raises:
        ValueError: If overlap_tokens >= max_tokens.
    """
    if overlap_tokens >= max_tokens:
        raise ValueError(
            f"overlap_tokens ({overlap_tokens}) must be less than max_tokens ({max_tokens})"
        )

    pieces: list[str] = []
    for paragraph in split_paragraphs(page_text):
        if estimate_tokens(paragraph) <= max_tokens:
            pieces.append(paragraph)
        else:
            pieces.extend(sliding_windows(paragraph.split(), max_tokens, overlap_tokens))

    kept: list[str] = []
    seen: set[str] = set()
    for piece in pieces:
        text = piece.strip()
        if len(text.split()) < min_words:
            continue
        if text in seen:
            continue
        seen.add(text)
        kept.append(text)

    return kept


class SlidingWindowChunker(BaseChunker):
    """
    Segments each page independently and numbers the results.

    Deduplication happens inside one segment() call, i.e. per page: the
    same sentence printed on two pages becomes two chunks, each citing
    its own page. position runs 0..n-1 across the whole document.
    """

    def __init__(self, config: ChunkingConfig = None):
        super().__init__(config or ChunkingConfig())

    def chunk(self, document: Document, pages: list[str]) -> list[Chunk]:
        chunks: list[Chunk] = []

        for page_number, page_text in enumerate(pages, start=1):
            texts = segment(
                clean_text(page_text),
                max_tokens=self.config.max_tokens,
                overlap_tokens=self.config.overlap_tokens,
                min_words=self.config.min_words,
            )
            for text in texts:
                chunks.append(Chunk(
                    document_id=document.document_id,
                    filename=document.filename,
                    page=page_number,
                    content=text,
                    position=len(chunks),
                ))

        logger.debug(
            "document_segmented",
            document_id=document.document_id,
            pages=len(pages),
            chunks=len(chunks),
        )
        return chunks
