"""
Review Analysis Service

Sends the bounded diff prompt to the AI provider and turns whatever comes
back into validated review comments.

Response handling contract:
- an empty or non-JSON response degrades to zero comments and an
  explanatory summary; it never raises
- comments pointing at files outside the prompt, or without a numeric line,
  are dropped
- unknown category/severity values are normalized, not dropped
- token usage is prompt + completion tokens, zero when not reported

Only a failing provider call raises (LLMGenerationError).
"""

import json
import math
from typing import Any, Dict, List, Optional, Sequence, Set

from src.models.schemas.pr_review.pr_patch import PRFilePatch
from src.models.schemas.pr_review.review_output import (
    AnalysisResult,
    CommentCategory,
    CommentSeverity,
    ReviewCommentDraft,
)
from src.services.llm.base_client import BaseLLMClient
from src.services.pr_review.review_generation.exceptions import (
    LLMGenerationError,
    LLMResponseParseError,
)
from src.services.pr_review.review_generation.prompt_builder import build_review_prompt
from src.utils.logging import get_logger

logger = get_logger(__name__)

EMPTY_RESPONSE_SUMMARY = "The AI reviewer returned an empty response; no comments were produced."
UNPARSEABLE_RESPONSE_SUMMARY = "The AI reviewer returned a response that could not be parsed; no comments were produced."
DEFAULT_SUMMARY = "Review completed."


def normalize_category(value: Any) -> CommentCategory:
    try:
        return CommentCategory(value)
    except ValueError:
        return CommentCategory.BEST_PRACTICE


def normalize_severity(value: Any) -> CommentSeverity:
    try:
        return CommentSeverity(value)
    except ValueError:
        return CommentSeverity.INFO


def _coerce_line(value: Any) -> Optional[int]:
    # bool is an int subclass but not a line number
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return int(value)


def parse_llm_response(content: Optional[str]) -> Dict[str, Any]:
    """Parse the raw model output into a JSON object.

    Raises:
        LLMResponseParseError: If the content is empty, not JSON, or not an object
    """
    if content is None or not content.strip():
        raise LLMResponseParseError("Empty response from AI provider", raw_response=content)

    try:
        parsed = json.loads(content)
    except (ValueError, RecursionError) as e:
        raise LLMResponseParseError(
            "AI provider response is not valid JSON",
            raw_response=content,
            parse_error=str(e),
        ) from e

    if not isinstance(parsed, dict):
        raise LLMResponseParseError(
            f"Expected a JSON object, got {type(parsed).__name__}",
            raw_response=content,
        )
    return parsed


def validate_comments(raw_comments: Any, allowed_files: Set[str]) -> List[ReviewCommentDraft]:
    """Keep comments anchored to an included file and a numeric line."""
    if not isinstance(raw_comments, list):
        return []

    validated: List[ReviewCommentDraft] = []
    dropped = 0

    for raw in raw_comments:
        if not isinstance(raw, dict):
            dropped += 1
            continue

        file_path = raw.get("filePath")
        line = _coerce_line(raw.get("line"))
        if not isinstance(file_path, str) or file_path not in allowed_files or line is None:
            dropped += 1
            continue

        body = raw.get("body")
        validated.append(
            ReviewCommentDraft(
                file_path=file_path,
                line=line,
                body=body if isinstance(body, str) else str(body or ""),
                category=normalize_category(raw.get("category")),
                severity=normalize_severity(raw.get("severity")),
            )
        )

    if dropped:
        logger.warning(f"Dropped {dropped} AI comments outside the reviewed diff")

    return validated


def count_tokens(usage: Optional[Dict[str, Any]]) -> int:
    if not isinstance(usage, dict):
        return 0
    total = 0
    for key in ("input_tokens", "output_tokens"):
        value = usage.get(key)
        if isinstance(value, int) and not isinstance(value, bool) and value > 0:
            total += value
    return total


class ReviewAnalysisService:
    """
    AI analysis of a filtered pull request diff.

    Example usage:
        service = ReviewAnalysisService()
        result = await service.analyze(files, custom_rules, llm_client)
    """

    def __init__(self, max_prompt_chars: Optional[int] = None):
        self.max_prompt_chars = max_prompt_chars

    async def analyze(
        self,
        files: Sequence[PRFilePatch],
        custom_rules: Optional[str],
        llm_client: BaseLLMClient
    ) -> AnalysisResult:
        """
        Review the given files with the AI provider.

        Args:
            files: Filtered files, in diff order
            custom_rules: Free-text repository rules, passed through verbatim
            llm_client: Provider client to call

        Returns:
            AnalysisResult with validated comments, summary and token usage

        Raises:
            LLMGenerationError: If the provider call fails
        """
        prompt = build_review_prompt(files, custom_rules, max_chars=self.max_prompt_chars)

        if len(prompt.included_files) < len(files):
            logger.info(
                f"Prompt ceiling reached: {len(prompt.included_files)} of {len(files)} files included"
            )

        try:
            response = await llm_client.generate_completion(
                prompt.user_prompt,
                system_prompt=prompt.system_prompt,
                json_mode=True,
            )
        except Exception as e:
            raise LLMGenerationError(
                f"AI provider request failed: {e}",
                provider=getattr(llm_client, "provider_name", "unknown"),
                model=getattr(llm_client, "model", None),
                cause=e,
            ) from e

        tokens_used = count_tokens(response.get("usage") if isinstance(response, dict) else None)
        content = response.get("content") if isinstance(response, dict) else None

        try:
            parsed = parse_llm_response(content)
        except LLMResponseParseError as e:
            logger.warning(f"Unusable AI response: {e.message}", extra=e.details)
            summary = EMPTY_RESPONSE_SUMMARY if not (content or "").strip() else UNPARSEABLE_RESPONSE_SUMMARY
            return AnalysisResult(
                summary=summary,
                comments=[],
                tokens_used=tokens_used,
                included_files=prompt.included_files,
            )

        comments = validate_comments(parsed.get("comments"), set(prompt.included_files))
        summary = parsed.get("summary")
        if not isinstance(summary, str) or not summary.strip():
            summary = DEFAULT_SUMMARY

        logger.info(
            f"AI analysis produced {len(comments)} comments using {tokens_used} tokens"
        )

        return AnalysisResult(
            summary=summary.strip(),
            comments=comments,
            tokens_used=tokens_used,
            included_files=prompt.included_files,
        )
