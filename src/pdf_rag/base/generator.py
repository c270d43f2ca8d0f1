"""
Abstract base class for answer composers.

The composer is the final stage: it turns retrieved hits into a prompt,
asks the LLM, and packages the answer with its citations. Keeping it
separate from retrieval means generation can be tested with hand-built
hits and a mocked model.
"""

from abc import ABC, abstractmethod

from pdf_rag.models.document import ScoredHit
from pdf_rag.models.result import AnswerResult


class BaseComposer(ABC):
    """
    Contract for answer composers.

    Implementations must not fall back to free generation: with no hits
    they return an insufficient-context AnswerResult without calling
    the model.
    """

    @abstractmethod
    async def compose(self, query: str, hits: list[ScoredHit]) -> AnswerResult:
        """
        Generate an answer grounded in retrieved hits.

        Args:
            query: The user's question.
            hits: Retrieved hits, nearest first.

        Returns:
            AnswerResult with the answer and (filename, page) citations.
        """
        ...
