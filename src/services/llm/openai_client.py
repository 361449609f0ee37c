"""OpenAI chat completions client for PR review."""
from typing import Optional, Dict, Any
from openai import AsyncOpenAI

from .base_client import BaseLLMClient, LLMCompletion
from src.utils.logging import get_logger

logger = get_logger(__name__)


class OpenAIClient(BaseLLMClient):
    """Wrapper for the OpenAI chat completions API."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        max_tokens: int = 4096,
        temperature: float = 0.2,
        timeout: int = 120
    ):
        super().__init__(api_key, model, max_tokens, temperature, timeout)
        self.client = AsyncOpenAI(api_key=api_key, timeout=timeout)

    @property
    def provider_name(self) -> str:
        return "openai"

    async def generate_completion(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> LLMCompletion:
        """Generate completion with a chat model, optionally in JSON object mode."""
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        request: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": kwargs.get("temperature", self.temperature),
            "max_tokens": kwargs.get("max_tokens", self.max_tokens),
        }
        if kwargs.get("json_mode"):
            request["response_format"] = {"type": "json_object"}

        try:
            response = await self.client.chat.completions.create(**request)
        except Exception as e:
            logger.error(f"OpenAI API error: {e}")
            raise

        choice = response.choices[0] if response.choices else None
        usage = response.usage

        return self.build_completion(
            choice.message.content if choice else None,
            getattr(usage, "prompt_tokens", 0),
            getattr(usage, "completion_tokens", 0),
            model=response.model,
            stop_reason=choice.finish_reason if choice else None,
        )
