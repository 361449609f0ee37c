"""Provider-neutral interface for the AI review call."""
from abc import ABC, abstractmethod
from typing import Any, Optional, TypedDict


class CompletionUsage(TypedDict):
    input_tokens: int
    output_tokens: int


class LLMCompletion(TypedDict):
    content: str
    usage: CompletionUsage
    model: Optional[str]
    stop_reason: Optional[str]


class BaseLLMClient(ABC):
    """One chat-style completion per review, with bounded output size."""

    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int = 4096,
        temperature: float = 0.2,
        timeout: int = 120
    ):
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout

    @abstractmethod
    async def generate_completion(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> LLMCompletion:
        """
        Send the review prompt to the provider.

        Args:
            prompt: User prompt carrying the diff block
            system_prompt: Review instructions and repository rules
            **kwargs: ``json_mode`` to constrain the output to a JSON object,
                plus ``max_tokens``/``temperature`` overrides

        Raises:
            Whatever the provider SDK raises; callers wrap it.
        """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider key as used in configuration ('openai', 'claude')."""

    @staticmethod
    def build_completion(
        content: Optional[str],
        input_tokens: Any,
        output_tokens: Any,
        model: Optional[str] = None,
        stop_reason: Optional[str] = None
    ) -> LLMCompletion:
        """Normalize an SDK response; missing usage counts as zero."""
        return LLMCompletion(
            content=content or "",
            usage=CompletionUsage(
                input_tokens=input_tokens or 0,
                output_tokens=output_tokens or 0,
            ),
            model=model,
            stop_reason=stop_reason,
        )
