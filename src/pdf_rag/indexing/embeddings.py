"""
Embedding model factory and adapter.

get_embedding_model() maps EmbeddingConfig to a LangChain Embeddings
instance. EmbeddingAdapter wraps that instance with the behaviour the
pipeline relies on:

    - order and length are preserved, each vector paired with its text
    - embed([]) returns [] without touching the model
    - every vector has the configured dimensionality
    - texts go out in batches, several batches in flight at once
    - provider errors propagate unmodified (no retry here)

Usage:
    from pdf_rag.indexing.embeddings import EmbeddingAdapter, get_embedding_model

    adapter = EmbeddingAdapter(get_embedding_model(config), config)
    pairs = await adapter.embed(["first chunk", "second chunk"])
    vector = await adapter.embed_query("what is in the report?")
"""

import asyncio
from typing import Optional, Sequence

import structlog
from langchain_core.embeddings import Embeddings

from pdf_rag.config import EmbeddingConfig
from pdf_rag.exceptions import DataInvariantViolation
from pdf_rag.models.document import Chunk, EmbeddedChunk

logger = structlog.get_logger(__name__)


def get_embedding_model(config: EmbeddingConfig) -> Embeddings:
    """
    Factory that returns a LangChain embedding model based on config.

    Each provider has its own LangChain integration package. We import
    them lazily (inside the if-branch) so you only need the package
    for the provider you actually use.

    Args:
        config: EmbeddingConfig with provider, model_name, dimensions.

    Returns:
        A LangChain Embeddings instance.

    Raises:
        ValueError: If the provider is not recognized.
        ImportError: If the required package for the provider is not installed.
    """
    provider = config.provider.lower()

    if provider == "openai":
        from langchain_openai import OpenAIEmbeddings

        return OpenAIEmbeddings(
            model=config.model_name,
            dimensions=config.dimensions,
            timeout=config.request_timeout,
            max_retries=0,
            **config.model_kwargs,
        )

    elif provider == "huggingface":
        try:
            from langchain_huggingface import HuggingFaceEmbeddings
        except ImportError:
            raise ImportError(
                "HuggingFace embeddings require langchain-huggingface. "
                "Install with: pip install pdf-rag[huggingface]"
            )

        return HuggingFaceEmbeddings(
            model_name=config.model_name,
            model_kwargs=config.model_kwargs,
        )

    else:
        raise ValueError(
            f"Unknown embedding provider: '{config.provider}'. "
            f"Supported: 'openai', 'huggingface'. "
            f"For other providers, pass a LangChain Embeddings instance directly."
        )


class EmbeddingAdapter:
    """
    Batches texts to an Embeddings model and checks what comes back.

    Batches are dispatched concurrently (bounded by max_concurrency)
    and re-assembled in input order, so concurrency never changes which
    vector belongs to which text.
    """

    def __init__(self, embeddings: Embeddings, config: Optional[EmbeddingConfig] = None):
        self._embeddings = embeddings
        self._config = config or EmbeddingConfig()

    @property
    def dimensions(self) -> int:
        return self._config.dimensions

    async def embed(self, texts: Sequence[str]) -> list[tuple[str, list[float]]]:
        """
        Embed texts, preserving order and length.

        Args:
            texts: Texts to embed.

        Returns:
            (text, vector) pairs in input order.

        Raises:
            DataInvariantViolation: If the model returns the wrong number
                of vectors or a vector of the wrong size.
        """
        texts = list(texts)
        if not texts:
            return []

        size = self._config.batch_size
        batches = [texts[i:i + size] for i in range(0, len(texts), size)]
        semaphore = asyncio.Semaphore(self._config.max_concurrency)

        async def run(index: int, batch: list[str]) -> list[list[float]]:
            async with semaphore:
                vectors = await self._embeddings.aembed_documents(batch)
            self._check(batch, vectors)
            logger.debug(
                "embedding_batch_completed",
                batch=index + 1,
                batches=len(batches),
                size=len(batch),
            )
            return vectors

        tasks = [asyncio.ensure_future(run(i, b)) for i, b in enumerate(batches)]
        try:
            results = await asyncio.gather(*tasks)
        except Exception:
            # one failed batch fails the call; stop the rest from spending quota
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        pairs: list[tuple[str, list[float]]] = []
        for batch, vectors in zip(batches, results):
            for text, vector in zip(batch, vectors):
                pairs.append((text, [float(x) for x in vector]))
        return pairs

    async def embed_query(self, text: str) -> list[float]:
        """Embed a single query text."""
        [(_, vector)] = await self.embed([text])
        return vector

    async def embed_chunks(self, chunks: list[Chunk]) -> list[EmbeddedChunk]:
        """Embed chunk contents and pair each vector with its chunk."""
        pairs = await self.embed([c.content for c in chunks])
        return [
            EmbeddedChunk(chunk=chunk, vector=vector)
            for chunk, (_, vector) in zip(chunks, pairs)
        ]

    def _check(self, batch: list[str], vectors: list[list[float]]) -> None:
        if len(vectors) != len(batch):
            raise DataInvariantViolation(
                "Embedding model returned a different number of vectors than texts",
                {"texts": len(batch), "vectors": len(vectors)},
            )
        for vector in vectors:
            if len(vector) != self._config.dimensions:
                raise DataInvariantViolation(
                    "Embedding has unexpected dimensionality",
                    {"expected": self._config.dimensions, "actual": len(vector)},
                )
