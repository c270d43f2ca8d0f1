"""
Utility functions.

Usage:
    from pdf_rag.utils.helpers import get_llm, clean_text
"""

from .helpers import clean_text, get_llm

__all__ = ["get_llm", "clean_text"]
