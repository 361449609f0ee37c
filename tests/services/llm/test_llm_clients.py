"""
Tests for the AI provider clients and provider selection.
"""

import pytest
from types import SimpleNamespace
from unittest.mock import AsyncMock

from src.services.llm.claude_client import ClaudeClient
from src.services.llm.llm_factory import LLMFactory, LLMProvider, get_llm_client
from src.services.llm.openai_client import OpenAIClient


def openai_completion(content, prompt_tokens=50, completion_tokens=20):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content), finish_reason="stop")],
        usage=SimpleNamespace(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens),
        model="gpt-4o-mini",
    )


class TestOpenAIClient:

    @pytest.mark.asyncio
    async def test_json_mode_request(self):
        client = OpenAIClient(api_key="sk-test")
        client.client.chat.completions.create = AsyncMock(return_value=openai_completion('{"summary": "ok"}'))

        result = await client.generate_completion("diff here", system_prompt="be strict", json_mode=True)

        kwargs = client.client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"] == [
            {"role": "system", "content": "be strict"},
            {"role": "user", "content": "diff here"},
        ]
        assert result["content"] == '{"summary": "ok"}'
        assert result["usage"] == {"input_tokens": 50, "output_tokens": 20}

    @pytest.mark.asyncio
    async def test_missing_usage_and_content(self):
        client = OpenAIClient(api_key="sk-test")
        response = openai_completion(None)
        response.usage = None
        client.client.chat.completions.create = AsyncMock(return_value=response)

        result = await client.generate_completion("diff")

        assert result["content"] == ""
        assert result["usage"] == {"input_tokens": 0, "output_tokens": 0}
        assert "response_format" not in client.client.chat.completions.create.call_args.kwargs

    @pytest.mark.asyncio
    async def test_errors_propagate(self):
        client = OpenAIClient(api_key="sk-test")
        client.client.chat.completions.create = AsyncMock(side_effect=RuntimeError("rate limited"))

        with pytest.raises(RuntimeError):
            await client.generate_completion("diff")


class TestClaudeClient:

    @pytest.mark.asyncio
    async def test_joins_text_blocks(self):
        client = ClaudeClient(api_key="sk-ant-test")
        client.client.messages.create = AsyncMock(return_value=SimpleNamespace(
            content=[
                SimpleNamespace(type="text", text='{"summary": '),
                SimpleNamespace(type="text", text='"ok"}'),
            ],
            usage=SimpleNamespace(input_tokens=70, output_tokens=10),
            model="claude-3-5-sonnet-20241022",
            stop_reason="end_turn",
        ))

        result = await client.generate_completion("diff", system_prompt="be strict", json_mode=True)

        assert result["content"] == '{"summary": "ok"}'
        assert result["usage"] == {"input_tokens": 70, "output_tokens": 10}
        assert client.client.messages.create.call_args.kwargs["system"] == "be strict"


class TestLLMFactory:

    def test_creates_openai_client(self):
        client = LLMFactory.create(LLMProvider.OPENAI, "sk-test")
        assert isinstance(client, OpenAIClient)
        assert client.provider_name == "openai"

    def test_creates_claude_client_with_model_override(self):
        client = get_llm_client("claude", "sk-ant-test", model="claude-3-haiku-20240307")
        assert isinstance(client, ClaudeClient)
        assert client.model == "claude-3-haiku-20240307"

    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            get_llm_client("gemini", "key")
