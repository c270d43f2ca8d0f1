"""
PDF RAG service: the end-to-end pipeline behind the HTTP API.

    ingest:  bytes → pages → chunks → vectors → store      → document_id
    search:  query → vector → nearest chunks               → RetrievalResult
    answer:  query + document_id → scoped hits → LLM       → AnswerResult

Every stage is injected, so tests can swap any of them for a fake.
from_config() wires the defaults:

    service = PdfRagService.from_config(AppConfig.from_env())
    result = await service.ingest(pdf_bytes, "report.pdf")
    answer = await service.answer("What is the budget?", result.document.document_id)

PDF extraction and every store call run in a worker thread
(asyncio.to_thread), so a slow database never stalls the event loop.

Ingestion is not transactional across chunks. Each row lands on its
own; if embedding or a store write fails halfway, the rows already
written stay behind and delete_document() removes them.
"""

import asyncio
import time
import uuid
from typing import Optional

import structlog

from pdf_rag.base.generator import BaseComposer
from pdf_rag.base.indexer import BaseChunker, BaseLoader
from pdf_rag.base.retriever import BaseRetriever
from pdf_rag.base.vectorstore import BaseVectorStore
from pdf_rag.config import AppConfig
from pdf_rag.exceptions import InputError
from pdf_rag.generation.generate import AnswerComposer
from pdf_rag.indexing.chunking import SlidingWindowChunker
from pdf_rag.indexing.embeddings import EmbeddingAdapter, get_embedding_model
from pdf_rag.indexing.loaders import PdfLoader
from pdf_rag.indexing.vectorstore import create_vector_store
from pdf_rag.logging_config import log_ingestion_event
from pdf_rag.models.document import Document
from pdf_rag.models.result import AnswerResult, IngestResult, RetrievalResult
from pdf_rag.retrieval.search import SimilarityRetriever

logger = structlog.get_logger(__name__)


class PdfRagService:
    """
    Upload, search and answer over stored PDF chunks.

    The only shared mutable state is the vector store. Everything else
    is stateless, so one instance can serve concurrent requests.
    """

    def __init__(
        self,
        loader: BaseLoader,
        chunker: BaseChunker,
        embedder: EmbeddingAdapter,
        store: BaseVectorStore,
        retriever: BaseRetriever,
        composer: BaseComposer,
    ):
        self._loader = loader
        self._chunker = chunker
        self._embedder = embedder
        self._store = store
        self._retriever = retriever
        self._composer = composer

    @classmethod
    def from_config(cls, config: Optional[AppConfig] = None) -> "PdfRagService":
        """
        Build a service with the default component for every stage.

        Args:
            config: Full service config. Defaults to AppConfig().

        Returns:
            A ready PdfRagService.
        """
        config = config or AppConfig()

        embedder = EmbeddingAdapter(get_embedding_model(config.embedding), config.embedding)
        store = create_vector_store(config.vector_store, dimensions=config.embedding.dimensions)

        return cls(
            loader=PdfLoader(),
            chunker=SlidingWindowChunker(config.chunking),
            embedder=embedder,
            store=store,
            retriever=SimilarityRetriever(store, config.retriever),
            composer=AnswerComposer(config.llm, config.composer),
        )

    @property
    def store(self) -> BaseVectorStore:
        return self._store

    async def ingest(self, file_bytes: bytes, filename: str) -> IngestResult:
        """
        Extract, segment, embed and store one PDF.

        Args:
            file_bytes: Raw PDF content.
            filename: Original file name, kept for citations.

        Returns:
            IngestResult with the new Document and the number of chunks stored.

        Raises:
            InputError: Empty file, missing filename or unreadable PDF.
        """
        if not file_bytes:
            raise InputError("Uploaded file is empty", field="file")
        if not filename or not filename.strip():
            raise InputError("Filename is required", field="filename")

        start = time.perf_counter()

        pages = await asyncio.to_thread(self._loader.extract_pages, file_bytes)
        document = Document(
            document_id=uuid.uuid4().hex,
            filename=filename.strip(),
            page_count=len(pages),
        )

        chunks = self._chunker.chunk(document, pages)
        embedded = await self._embedder.embed_chunks(chunks)
        stored = await asyncio.to_thread(self._store.insert_many, embedded)

        log_ingestion_event(
            logger,
            document_id=document.document_id,
            filename=document.filename,
            pages=len(pages),
            chunks_created=stored,
            processing_time_ms=round((time.perf_counter() - start) * 1000, 2),
            empty_pages=sum(1 for p in pages if not p.strip()),
        )

        return IngestResult(document=document, chunk_count=stored)

    async def search(
        self,
        query: str,
        document_id: Optional[str] = None,
        k: Optional[int] = None,
    ) -> RetrievalResult:
        """
        Nearest chunks for a query, optionally within one document.

        Raises:
            InputError: If the query is empty or k is not positive.
        """
        query = (query or "").strip()
        if not query:
            raise InputError("Query must not be empty", field="query")
        if k is not None and k <= 0:
            raise InputError("k must be a positive integer", field="k")

        vector = await self._embedder.embed_query(query)
        return await asyncio.to_thread(
            self._retriever.retrieve, vector, document_id=document_id, k=k, query=query
        )

    async def answer(self, query: str, document_id: str) -> AnswerResult:
        """
        Answer a question from one document's chunks.

        Raises:
            InputError: If the query or the document id is missing.
        """
        if not (query or "").strip():
            raise InputError("Query must not be empty", field="query")
        if not document_id or not document_id.strip():
            raise InputError("document_id is required", field="document_id")

        retrieval = await self.search(query, document_id=document_id.strip())
        return await self._composer.compose(retrieval.query, retrieval.hits)

    def delete_document(self, document_id: str) -> int:
        """Remove a document's chunks. Returns how many were removed."""
        if not document_id or not document_id.strip():
            raise InputError("document_id is required", field="document_id")

        removed = self._store.delete_document(document_id.strip())
        logger.info("document_deleted", document_id=document_id, chunks_removed=removed)
        return removed
