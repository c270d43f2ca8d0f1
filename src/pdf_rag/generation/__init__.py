"""
Answer generation.

Usage:
    from pdf_rag.generation import AnswerComposer
"""

from .generate import INSUFFICIENT_CONTEXT_ANSWER, AnswerComposer, format_context

__all__ = [
    "AnswerComposer",
    "format_context",
    "INSUFFICIENT_CONTEXT_ANSWER",
]
