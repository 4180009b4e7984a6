"""LLM Service: the single prompt-in, text-out model interface.

Only the flow executor talks to these backends.
"""

from .base_llm import (
    BaseLLM,
    HuggingFaceLLM,
    LLMConfig,
    LLMProvider,
    LLMResponse,
    OpenAILLM,
    create_llm,
)

__all__ = [
    "BaseLLM",
    "HuggingFaceLLM",
    "LLMConfig",
    "LLMProvider",
    "LLMResponse",
    "OpenAILLM",
    "create_llm",
]
