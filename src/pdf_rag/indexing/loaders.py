"""
PDF page extraction.

Turns uploaded PDF bytes into one text string per physical page using
pypdf. Layout analysis and OCR are out of scope: a scanned page with
no text layer comes back as "" and produces no chunks, but it still
occupies its slot so later pages keep their real page numbers.
"""

from io import BytesIO

import structlog
from pypdf import PdfReader

from pdf_rag.base.indexer import BaseLoader
from pdf_rag.exceptions import InputError

logger = structlog.get_logger(__name__)


class PdfLoader(BaseLoader):
    """Extracts per-page text from PDF bytes with pypdf."""

    def extract_pages(self, data: bytes) -> list[str]:
        if not data:
            raise InputError("Uploaded file is empty", field="file")

        try:
            reader = PdfReader(BytesIO(data))
            pages = [(page.extract_text() or "").strip() for page in reader.pages]
        except Exception as e:
            # pypdf raises KeyError, TypeError and friends on malformed files too
            raise InputError(f"File is not a readable PDF: {e}", field="file") from e

        logger.debug(
            "pdf_pages_extracted",
            pages=len(pages),
            empty_pages=sum(1 for p in pages if not p),
        )
        return pages
