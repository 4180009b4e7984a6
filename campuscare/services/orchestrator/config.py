"""Pipeline configuration, read from environment variables."""
import os
from dataclasses import dataclass
from typing import Optional

from campuscare.services.crisis_engine.publisher import DEFAULT_STREAM_NAME
from campuscare.services.llm_service import LLMConfig, LLMProvider

DEV_PII_SALT = "default_dev_salt_change_in_production_32chars"


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() == "true"


# Credential variable read for each provider
API_KEY_ENV = {
    "huggingface": "HUGGINGFACE_TOKEN",
    "openai": "OPENAI_API_KEY",
}


@dataclass(frozen=True)
class PipelineConfig:
    """Configuration for the flow pipeline."""
    # Context and retries
    max_context_messages: int = 5
    max_retries: int = 2
    model_timeout_seconds: float = 30.0

    # Escalation events
    escalation_publishing_enabled: bool = False
    stream_name: str = DEFAULT_STREAM_NAME

    # Model backend
    llm_provider: str = "huggingface"  # or "openai"
    model_name: str = "Mental-Health-FineTuned-Mistral-7B"
    model_endpoint: Optional[str] = None
    api_key: Optional[str] = None
    max_tokens: int = 1024
    temperature: float = 0.7

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        """Create configuration from environment variables."""
        provider = os.environ.get("LLM_PROVIDER", "huggingface")
        key_env = API_KEY_ENV.get(provider.lower())

        return cls(
            max_context_messages=int(os.environ.get("CONTEXT_WINDOW_SIZE", "5")),
            max_retries=int(os.environ.get("FLOW_MAX_RETRIES", "2")),
            model_timeout_seconds=float(os.environ.get("MODEL_TIMEOUT_SECONDS", "30")),
            escalation_publishing_enabled=_env_flag("ESCALATION_PUBLISHING_ENABLED", "false"),
            stream_name=os.environ.get("KINESIS_STREAM_NAME", DEFAULT_STREAM_NAME),
            llm_provider=provider,
            model_name=os.environ.get("LLM_MODEL_NAME", "Mental-Health-FineTuned-Mistral-7B"),
            model_endpoint=os.environ.get("LLM_ENDPOINT"),
            api_key=os.environ.get(key_env) if key_env else None,
        )

    def llm_config(self) -> LLMConfig:
        """Backend configuration for :func:`create_llm`.

        Raises:
            ValueError: If the provider name is not supported
        """
        try:
            provider = LLMProvider(self.llm_provider.lower())
        except ValueError:
            raise ValueError(f"Unsupported provider: {self.llm_provider}") from None

        return LLMConfig(
            provider=provider,
            model_name=self.model_name,
            endpoint=self.model_endpoint,
            api_key=self.api_key,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            timeout_seconds=int(self.model_timeout_seconds),
        )
