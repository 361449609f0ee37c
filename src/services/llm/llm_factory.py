"""Provider selection for LLM clients."""
from enum import Enum
from typing import Optional

from src.core.config import settings
from .base_client import BaseLLMClient
from .claude_client import ClaudeClient
from .openai_client import OpenAIClient


class LLMProvider(str, Enum):
    OPENAI = "openai"
    CLAUDE = "claude"


class LLMFactory:
    """Builds a configured client for the requested provider."""

    @staticmethod
    def default_model(provider: LLMProvider) -> str:
        if provider == LLMProvider.CLAUDE:
            return settings.ANTHROPIC_MODEL
        return settings.OPENAI_MODEL

    @classmethod
    def create(
        cls,
        provider: LLMProvider,
        api_key: str,
        model: Optional[str] = None
    ) -> BaseLLMClient:
        provider = LLMProvider(provider)
        client_cls = ClaudeClient if provider == LLMProvider.CLAUDE else OpenAIClient
        return client_cls(
            api_key=api_key,
            model=model or cls.default_model(provider),
            max_tokens=settings.LLM_MAX_TOKENS,
            temperature=settings.LLM_TEMPERATURE,
            timeout=settings.LLM_TIMEOUT,
        )


def get_llm_client(provider: str, api_key: str, model: Optional[str] = None) -> BaseLLMClient:
    """Shortcut for ``LLMFactory.create``; raises ValueError on unknown providers."""
    return LLMFactory.create(LLMProvider(provider), api_key, model)
