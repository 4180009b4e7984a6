"""Model backend interface and provider implementations.

The whole pipeline sees a model as prompt-in, text-out. Only the flow
executor calls :meth:`BaseLLM.generate`; it wraps every call in a timeout and
treats any exception as the backend being unavailable.

Providers implement ``_complete``; prompt checks, timing and logging live
in the base class so every backend reports the same events.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class LLMProvider(Enum):
    """Supported model backends."""
    HUGGINGFACE = "huggingface"
    OPENAI = "openai"


@dataclass(frozen=True)
class LLMConfig:
    """Backend connection and sampling settings."""
    provider: LLMProvider
    model_name: str
    endpoint: Optional[str] = None
    api_key: Optional[str] = None
    max_tokens: int = 1024
    temperature: float = 0.7
    top_p: float = 0.9
    timeout_seconds: int = 30
    # Compiled flow prompts embed a JSON schema, so allow generous prompts
    max_prompt_chars: int = 20000


@dataclass(frozen=True)
class LLMResponse:
    """Raw completion text plus call metadata."""
    text: str
    model: str
    provider: str
    tokens_used: Optional[int] = None
    latency_ms: Optional[float] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


# (completion text, tokens used)
Completion = Tuple[str, Optional[int]]


class BaseLLM(ABC):
    """Prompt-in, text-out model backend."""

    def __init__(self, config: LLMConfig):
        self.config = config
        logger.info(
            "LLM_BACKEND_INITIALIZED",
            extra={
                "provider": config.provider.value,
                "model": config.model_name,
            }
        )

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
    ) -> LLMResponse:
        """Generate a completion for ``prompt``.

        Args:
            prompt: Compiled flow prompt
            system_prompt: Optional system instructions

        Returns:
            LLMResponse with the raw completion text

        Raises:
            ValueError: If the prompt is empty or too long
            Exception: Any transport or provider error, unchanged
        """
        if not self.validate_prompt(prompt):
            raise ValueError("Prompt rejected before sending")

        started = time.monotonic()
        try:
            text, tokens_used = await self._complete(prompt, system_prompt)
        except Exception as e:
            logger.error(
                "LLM_GENERATION_FAILED",
                extra={
                    "provider": self.config.provider.value,
                    "model": self.config.model_name,
                    "error_type": type(e).__name__,
                    "error": str(e),
                }
            )
            raise

        latency_ms = (time.monotonic() - started) * 1000
        logger.info(
            "LLM_GENERATION_SUCCEEDED",
            extra={
                "provider": self.config.provider.value,
                "model": self.config.model_name,
                "latency_ms": round(latency_ms, 1),
                "tokens_used": tokens_used,
            }
        )

        return LLMResponse(
            text=text,
            model=self.config.model_name,
            provider=self.config.provider.value,
            tokens_used=tokens_used,
            latency_ms=latency_ms,
        )

    @abstractmethod
    async def _complete(self, prompt: str, system_prompt: Optional[str]) -> Completion:
        """Send one request to the provider."""

    def validate_prompt(self, prompt: str) -> bool:
        """Reject empty or oversized prompts before they go on the wire."""
        if not prompt or not prompt.strip():
            logger.warning("LLM_PROMPT_EMPTY")
            return False

        if len(prompt) > self.config.max_prompt_chars:
            logger.warning(
                "LLM_PROMPT_TOO_LONG",
                extra={"length": len(prompt), "max_length": self.config.max_prompt_chars}
            )
            return False

        return True


class HuggingFaceLLM(BaseLLM):
    """Text-generation inference endpoint (HuggingFace or compatible)."""

    def __init__(self, config: LLMConfig):
        super().__init__(config)

        if not config.endpoint:
            raise ValueError("HuggingFace endpoint required")

        self.endpoint = config.endpoint
        self.headers = {"Content-Type": "application/json"}
        if config.api_key:
            self.headers["Authorization"] = f"Bearer {config.api_key}"

    def build_payload(self, prompt: str, system_prompt: Optional[str]) -> Dict[str, Any]:
        # TGI endpoints take a single input string
        inputs = f"{system_prompt}\n\n{prompt}" if system_prompt else prompt
        return {
            "inputs": inputs,
            "parameters": {
                "max_new_tokens": self.config.max_tokens,
                "temperature": self.config.temperature,
                "top_p": self.config.top_p,
                "return_full_text": False,
            },
        }

    async def _complete(self, prompt: str, system_prompt: Optional[str]) -> Completion:
        import aiohttp

        timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(
                self.endpoint,
                headers=self.headers,
                json=self.build_payload(prompt, system_prompt),
            ) as response:
                response.raise_for_status()
                body = await response.json()

        # Endpoints answer with either [{...}] or {...}
        if isinstance(body, list):
            body = body[0] if body else {}
        return body.get("generated_text", ""), None


class OpenAILLM(BaseLLM):
    """OpenAI chat completions in JSON mode.

    ``config.endpoint``, when set, points at an OpenAI-compatible server.
    The client is opened per call: pooled connections belong to the event
    loop that created them, and callers may run each request on a new loop.
    """

    def __init__(self, config: LLMConfig):
        super().__init__(config)

        if not config.api_key:
            raise ValueError("OpenAI API key required")

    def _client(self):
        import openai
        return openai.AsyncOpenAI(api_key=self.config.api_key, base_url=self.config.endpoint)

    async def _complete(self, prompt: str, system_prompt: Optional[str]) -> Completion:
        messages = [{"role": "user", "content": prompt}]
        if system_prompt:
            messages.insert(0, {"role": "system", "content": system_prompt})

        async with self._client() as client:
            completion = await client.chat.completions.create(
                model=self.config.model_name,
                messages=messages,
                max_tokens=self.config.max_tokens,
                temperature=self.config.temperature,
                top_p=self.config.top_p,
                response_format={"type": "json_object"},
                timeout=self.config.timeout_seconds,
            )

        tokens_used = completion.usage.total_tokens if completion.usage else None
        return completion.choices[0].message.content or "", tokens_used


_BACKENDS = {
    LLMProvider.HUGGINGFACE: HuggingFaceLLM,
    LLMProvider.OPENAI: OpenAILLM,
}


def create_llm(config: LLMConfig) -> BaseLLM:
    """Build the backend for ``config.provider``.

    Raises:
        ValueError: If the provider is not supported or misconfigured
    """
    try:
        backend = _BACKENDS[config.provider]
    except KeyError:
        raise ValueError(f"Unsupported provider: {config.provider}") from None
    return backend(config)
