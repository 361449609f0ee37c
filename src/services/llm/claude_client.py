"""Anthropic Claude API client for PR review."""
from typing import Optional
from anthropic import AsyncAnthropic

from .base_client import BaseLLMClient, LLMCompletion
from src.utils.logging import get_logger

logger = get_logger(__name__)


class ClaudeClient(BaseLLMClient):
    """Wrapper for the Anthropic messages API."""

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-5-sonnet-20241022",
        max_tokens: int = 4096,
        temperature: float = 0.2,
        timeout: int = 120
    ):
        super().__init__(api_key, model, max_tokens, temperature, timeout)
        self.client = AsyncAnthropic(api_key=api_key, timeout=timeout)

    @property
    def provider_name(self) -> str:
        return "claude"

    async def generate_completion(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> LLMCompletion:
        """Generate completion with Claude.

        The messages API has no JSON mode; ``json_mode`` is accepted and the
        JSON-only contract is left to the system prompt.
        """
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=kwargs.get("max_tokens", self.max_tokens),
                temperature=kwargs.get("temperature", self.temperature),
                system=system_prompt or "",
                messages=[{"role": "user", "content": prompt}],
            )
        except Exception as e:
            logger.error(f"Claude API error: {e}")
            raise

        content = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        usage = response.usage

        return self.build_completion(
            content,
            getattr(usage, "input_tokens", 0),
            getattr(usage, "output_tokens", 0),
            model=response.model,
            stop_reason=response.stop_reason,
        )
