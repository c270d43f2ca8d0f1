"""
Exception hierarchy for the PDF RAG service.

    PdfRagError
    ├── InputError              bad caller input (empty query, missing id, empty file)
    ├── UpstreamError           an embedding / generation call failed
    └── DataInvariantViolation  stored or returned data breaks a model invariant

An empty retrieval is NOT an error: the composer returns an
AnswerResult with insufficient_context=True instead.

UpstreamError is only raised at the HTTP boundary. The core lets
provider exceptions propagate untouched so callers can see (and retry)
the real failure.
"""

from typing import Any, Optional


class PdfRagError(Exception):
    """Base exception for all service errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class InputError(PdfRagError):
    """Raised when caller input is missing or unusable."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.field = field
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class UpstreamError(PdfRagError):
    """Raised when an external model call fails (HTTP boundary only)."""


class DataInvariantViolation(PdfRagError):
    """Raised when data breaks an invariant; always a defect, never coerced."""
