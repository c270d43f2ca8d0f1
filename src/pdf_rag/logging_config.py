"""Structured logging configuration for the PDF RAG service."""

import logging
from typing import Optional

import structlog
from structlog.stdlib import LoggerFactory


def configure_logging(log_level: str = "INFO", json_logs: bool = False) -> None:
    """Configure structlog on top of the standard library logger."""

    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(level=numeric_level, format="%(message)s")

    # Quiet the HTTP client chatter from the model SDKs
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
    ]

    if json_logs:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def log_ingestion_event(
    logger: structlog.BoundLogger,
    document_id: str,
    filename: str,
    pages: int,
    chunks_created: int,
    processing_time_ms: float,
    empty_pages: Optional[int] = None,
) -> None:
    """Log document ingestion for the audit trail."""
    logger.info(
        "document_ingested",
        document_id=document_id,
        filename=filename,
        pages=pages,
        empty_pages=empty_pages or 0,
        chunks_created=chunks_created,
        processing_time_ms=processing_time_ms,
        event_type="document_ingestion",
    )


def log_retrieval_event(
    logger: structlog.BoundLogger,
    document_id: Optional[str],
    k: int,
    hit_count: int,
    best_distance: Optional[float],
) -> None:
    """Log one retrieval call."""
    logger.info(
        "retrieval_completed",
        document_id=document_id,
        k=k,
        hit_count=hit_count,
        best_distance=best_distance,
        event_type="retrieval",
    )
