"""
Tests for ReviewAnalysisService

Covers response parsing, comment validation against the reviewed files,
enum normalization and token accounting.
"""

import json

import pytest
from unittest.mock import AsyncMock, MagicMock

from src.models.schemas.pr_review.review_output import CommentCategory, CommentSeverity
from src.services.pr_review.review_generation.exceptions import (
    LLMGenerationError,
    LLMResponseParseError,
)
from src.services.pr_review.review_generation.service import (
    DEFAULT_SUMMARY,
    EMPTY_RESPONSE_SUMMARY,
    UNPARSEABLE_RESPONSE_SUMMARY,
    ReviewAnalysisService,
    count_tokens,
    parse_llm_response,
    validate_comments,
)


def llm_response(content, input_tokens=120, output_tokens=30):
    return {
        "content": content,
        "usage": {"input_tokens": input_tokens, "output_tokens": output_tokens},
        "model": "gpt-4o-mini",
        "stop_reason": "stop",
    }


@pytest.fixture
def mock_llm_client():
    client = MagicMock()
    client.provider_name = "openai"
    client.model = "gpt-4o-mini"
    client.generate_completion = AsyncMock()
    return client


@pytest.fixture
def files(make_patch):
    return [make_patch("src/app.py"), make_patch("src/util.py")]


class TestParseLLMResponse:

    def test_valid_object(self):
        assert parse_llm_response('{"summary": "ok", "comments": []}') == {"summary": "ok", "comments": []}

    @pytest.mark.parametrize("content", [None, "", "   \n"])
    def test_empty(self, content):
        with pytest.raises(LLMResponseParseError):
            parse_llm_response(content)

    def test_not_json(self):
        with pytest.raises(LLMResponseParseError) as exc_info:
            parse_llm_response("Here is my review: looks fine")
        assert exc_info.value.details["parse_error"]

    def test_nesting_too_deep(self):
        with pytest.raises(LLMResponseParseError):
            parse_llm_response("[" * 200000)

    def test_not_an_object(self):
        with pytest.raises(LLMResponseParseError):
            parse_llm_response('[{"filePath": "a.py"}]')


class TestValidateComments:

    def test_drops_unknown_files_and_bad_lines(self):
        raw = [
            {"filePath": "src/app.py", "line": 4, "body": "ok", "category": "bug", "severity": "error"},
            {"filePath": "src/invented.py", "line": 1, "body": "hallucinated"},
            {"filePath": "src/app.py", "line": "12", "body": "string line"},
            {"filePath": "src/app.py", "line": True, "body": "bool line"},
            {"filePath": "src/app.py", "body": "no line"},
            {"filePath": ["src/app.py"], "line": 1, "body": "list path"},
            "not a dict",
        ]
        comments = validate_comments(raw, {"src/app.py"})

        assert len(comments) == 1
        assert comments[0].file_path == "src/app.py"
        assert comments[0].line == 4
        assert comments[0].category == CommentCategory.BUG
        assert comments[0].severity == CommentSeverity.ERROR

    def test_normalizes_unknown_enums(self):
        raw = [{"filePath": "a.py", "line": 2.0, "body": "x", "category": "naming", "severity": "critical"}]
        comments = validate_comments(raw, {"a.py"})

        assert comments[0].line == 2
        assert comments[0].category == CommentCategory.BEST_PRACTICE
        assert comments[0].severity == CommentSeverity.INFO

    def test_missing_body_becomes_empty_string(self):
        comments = validate_comments([{"filePath": "a.py", "line": 1}], {"a.py"})
        assert comments[0].body == ""

    def test_non_list(self):
        assert validate_comments({"filePath": "a.py"}, {"a.py"}) == []
        assert validate_comments(None, {"a.py"}) == []


class TestCountTokens:

    def test_sums_input_and_output(self):
        assert count_tokens({"input_tokens": 100, "output_tokens": 25}) == 125

    def test_missing_usage(self):
        assert count_tokens(None) == 0
        assert count_tokens({}) == 0
        assert count_tokens({"input_tokens": None, "output_tokens": 7}) == 7


class TestReviewAnalysisService:

    @pytest.mark.asyncio
    async def test_analyze_success(self, mock_llm_client, files):
        mock_llm_client.generate_completion.return_value = llm_response(json.dumps({
            "summary": "  One real problem.  ",
            "comments": [
                {"filePath": "src/app.py", "line": 6, "body": "eval is unsafe",
                 "category": "security", "severity": "error"},
                {"filePath": "src/ghost.py", "line": 1, "body": "nope",
                 "category": "bug", "severity": "warning"},
            ],
        }))
        service = ReviewAnalysisService(max_prompt_chars=10_000)

        result = await service.analyze(files, "No eval.", mock_llm_client)

        assert result.summary == "One real problem."
        assert len(result.comments) == 1
        assert result.comments[0].category == CommentCategory.SECURITY
        assert result.tokens_used == 150
        assert result.included_files == ["src/app.py", "src/util.py"]
        assert result.has_errors

        args, kwargs = mock_llm_client.generate_completion.call_args
        assert "### File: src/app.py" in args[0]
        assert "No eval." in kwargs["system_prompt"]
        assert kwargs["json_mode"] is True

    @pytest.mark.asyncio
    async def test_comments_outside_prompt_ceiling_are_dropped(self, mock_llm_client, make_patch):
        files = [make_patch("small.py", "x"), make_patch("huge.py", "x" * 1000)]
        mock_llm_client.generate_completion.return_value = llm_response(json.dumps({
            "summary": "s",
            "comments": [{"filePath": "huge.py", "line": 1, "body": "b"}],
        }))
        service = ReviewAnalysisService(max_prompt_chars=200)

        result = await service.analyze(files, None, mock_llm_client)

        assert result.included_files == ["small.py"]
        assert result.comments == []

    @pytest.mark.asyncio
    async def test_invalid_json_degrades(self, mock_llm_client, files):
        mock_llm_client.generate_completion.return_value = llm_response("I think this PR is great!")

        result = await ReviewAnalysisService().analyze(files, None, mock_llm_client)

        assert result.comments == []
        assert result.summary == UNPARSEABLE_RESPONSE_SUMMARY
        assert result.tokens_used == 150

    @pytest.mark.asyncio
    async def test_empty_response_degrades(self, mock_llm_client, files):
        mock_llm_client.generate_completion.return_value = llm_response("", 80, 0)

        result = await ReviewAnalysisService().analyze(files, None, mock_llm_client)

        assert result.comments == []
        assert result.summary == EMPTY_RESPONSE_SUMMARY
        assert result.tokens_used == 80

    @pytest.mark.asyncio
    async def test_missing_summary_uses_default(self, mock_llm_client, files):
        mock_llm_client.generate_completion.return_value = llm_response('{"comments": []}')

        result = await ReviewAnalysisService().analyze(files, None, mock_llm_client)

        assert result.summary == DEFAULT_SUMMARY

    @pytest.mark.asyncio
    async def test_missing_usage_counts_zero(self, mock_llm_client, files):
        mock_llm_client.generate_completion.return_value = {"content": '{"summary": "ok", "comments": []}'}

        result = await ReviewAnalysisService().analyze(files, None, mock_llm_client)

        assert result.tokens_used == 0

    @pytest.mark.asyncio
    async def test_provider_failure_raises(self, mock_llm_client, files):
        mock_llm_client.generate_completion.side_effect = RuntimeError("401 invalid api key")

        with pytest.raises(LLMGenerationError) as exc_info:
            await ReviewAnalysisService().analyze(files, None, mock_llm_client)

        assert "401 invalid api key" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_deeply_nested_invalid_json_degrades(self, mock_llm_client, files):
        mock_llm_client.generate_completion.return_value = llm_response("[" * 200000)

        result = await ReviewAnalysisService().analyze(files, None, mock_llm_client)

        assert result.comments == []
        assert result.summary == UNPARSEABLE_RESPONSE_SUMMARY
