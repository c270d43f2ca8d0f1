"""
Answer generation from retrieved context.

This is the final stage of the pipeline: take the query and the
retrieved hits and produce an answer grounded in them.

Two outcomes:
    - WITH hits: the top hits become numbered context blocks labelled
      with their page, and the LLM is told to answer only from them.
    - WITHOUT hits: a fixed "not enough information" answer is
      returned and the LLM is never called. There is no fallback to
      the model's own knowledge.

The composer returns an AnswerResult with the answer, the
(filename, page) citations of the hits it used, and the model name.

Usage:
    from pdf_rag.generation.generate import AnswerComposer

    composer = AnswerComposer(llm_config=LLMConfig(), composer_config=ComposerConfig())
    result = await composer.compose("What does section 2 cover?", retrieval.hits)
    print(result.answer)
"""

from typing import Optional

import structlog
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.prompts import ChatPromptTemplate

from pdf_rag.base.generator import BaseComposer
from pdf_rag.config import ComposerConfig, LLMConfig
from pdf_rag.models.document import ScoredHit
from pdf_rag.models.result import AnswerResult, SourceCitation
from pdf_rag.utils.helpers import get_llm

logger = structlog.get_logger(__name__)

INSUFFICIENT_CONTEXT_ANSWER = (
    "I could not find enough information in the document to answer this question."
)

_SYSTEM_PROMPT = (
    "You are an assistant that answers questions about a PDF document.\n"
    "Rules:\n"
    "- Use ONLY the numbered context passages supplied by the user.\n"
    "- If the passages do not contain the answer, say that the document "
    "does not provide enough information.\n"
    "- Never invent facts, figures, names or page numbers.\n"
    "- Always answer in {language}, whatever language the question or the "
    "passages are written in."
)

_USER_PROMPT = (
    "Question: {query}\n\n"
    "Context:\n{context}\n\n"
    "Write a structured answer. Explain step by step where the question "
    "calls for it, give examples from the context where they help, and "
    "refer to passages by their number, e.g. [2]."
)


def format_context(hits: list[ScoredHit]) -> str:
    """
    Render hits as numbered, page-labelled blocks in rank order.

        [1] (page 3)
        chunk text...

        [2] (page 7)
        chunk text...
    """
    blocks = [
        f"[{n}] (page {hit.chunk.page})\n{hit.chunk.content}"
        for n, hit in enumerate(hits, 1)
    ]
    return "\n\n".join(blocks)


class AnswerComposer(BaseComposer):
    """
    Context-restricted RAG answerer: hits + query → answer.

    How it works:
        1. Keeps the top max_context_hits hits
        2. Formats them as numbered, page-labelled context
        3. Sends a system message (stay in context, fixed language, no
           fabrication) and a user message (question, context, format)
        4. Trims the reply and attaches one citation per hit used

    The model is built with the LLMConfig's provider, model and
    max_tokens, but always at temperature 0 whatever the config says.
    Provider errors propagate to the caller.
    """

    def __init__(
        self,
        llm_config: LLMConfig = None,
        composer_config: ComposerConfig = None,
        llm: Optional[BaseChatModel] = None,
    ):
        """
        Args:
            llm_config: Provider, model and token limit. Temperature is
                always pinned to 0.
            composer_config: How many hits to use and the answer language.
            llm: A pre-built chat model. Skips get_llm() when given.
        """
        llm_config = llm_config or LLMConfig()
        self._config = composer_config or ComposerConfig()
        self._llm = llm if llm is not None else get_llm(
            llm_config.model_copy(update={"temperature": 0.0})
        )
        self._model_name = f"{llm_config.provider.value}/{llm_config.model_name}"

        self._prompt = ChatPromptTemplate.from_messages([
            ("system", _SYSTEM_PROMPT),
            ("human", _USER_PROMPT),
        ])

    async def compose(self, query: str, hits: list[ScoredHit]) -> AnswerResult:
        """
        Generate an answer grounded in retrieved hits.

        Args:
            query: The user's question.
            hits: Retrieved hits, nearest first.

        Returns:
            AnswerResult with the trimmed answer and citations in hit
            rank order, or the insufficient-context result if hits is empty.
        """
        if not hits:
            logger.info("answer_skipped_no_context")
            return AnswerResult(
                answer=INSUFFICIENT_CONTEXT_ANSWER,
                sources=[],
                insufficient_context=True,
                model=self._model_name,
            )

        used = hits[: self._config.max_context_hits]

        chain = self._prompt | self._llm
        response = await chain.ainvoke({
            "language": self._config.language,
            "query": query,
            "context": format_context(used),
        })

        # Chat models return AIMessage objects; extract the text
        answer = response.content if hasattr(response, "content") else str(response)

        logger.info("answer_generated", hits_used=len(used), model=self._model_name)

        return AnswerResult(
            answer=str(answer).strip(),
            sources=[
                SourceCitation(filename=hit.chunk.filename, page=hit.chunk.page)
                for hit in used
            ],
            model=self._model_name,
        )
