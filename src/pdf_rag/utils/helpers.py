"""
Shared utility functions.

Helpers used across the service: LLM factory, text cleaning.
"""

import re

from langchain_core.language_models.chat_models import BaseChatModel

from pdf_rag.config import LLMConfig, LLMProvider

# C0 controls except \n, plus DEL. \t and \r are handled separately.
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def get_llm(config: LLMConfig) -> BaseChatModel:
    """
    Factory that returns a LangChain chat model based on config.

    Lazy imports so you only need the package for the provider you
    actually use. API keys come from the environment
    (OPENAI_API_KEY / ANTHROPIC_API_KEY).

    Args:
        config: LLMConfig with provider, model_name, temperature, max_tokens.

    Returns:
        A LangChain BaseChatModel instance.
    """
    if config.provider == LLMProvider.OPENAI:
        from langchain_openai import ChatOpenAI

        return ChatOpenAI(
            model=config.model_name,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout=config.request_timeout,
            max_retries=0,
        )

    elif config.provider == LLMProvider.ANTHROPIC:
        from langchain_anthropic import ChatAnthropic

        return ChatAnthropic(
            model=config.model_name,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout=config.request_timeout,
            max_retries=0,
        )

    else:
        raise ValueError(
            f"Unknown LLM provider: '{config.provider}'. "
            f"Supported: 'openai', 'anthropic'."
        )


def clean_text(text: str) -> str:
    """
    Normalize extracted page text before segmentation.

    Tabs become spaces (PDF extraction leaves stray tabs), carriage
    returns become newlines, and every other control character is
    replaced by a space. Newlines survive because paragraph boundaries
    depend on them.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = text.replace("\t", " ")
    return _CONTROL_CHARS.sub(" ", text)
