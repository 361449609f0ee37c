"""
Review Generation Exceptions

Response shape problems are handled inside the analysis service and never
leave it; only provider call failures reach the orchestrator.
"""

from typing import Optional

from src.exceptions.pr_review_exceptions import PRReviewException


class ReviewGenerationError(PRReviewException):
    """Base exception for AI analysis failures."""


class LLMGenerationError(ReviewGenerationError):
    """Raised when the AI provider call itself fails."""

    def __init__(
        self,
        message: str,
        provider: str = "unknown",
        model: Optional[str] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(
            message=message,
            error_code="LLM_GENERATION_ERROR",
            details={
                "provider": provider,
                "model": model,
                "cause": type(cause).__name__ if cause else None,
            }
        )


class LLMResponseParseError(ReviewGenerationError):
    """Raised when the model's response is not a JSON object."""

    def __init__(
        self,
        message: str,
        raw_response: Optional[str] = None,
        parse_error: Optional[str] = None
    ):
        super().__init__(
            message=message,
            error_code="LLM_RESPONSE_PARSE_ERROR",
            details={
                "raw_response_length": len(raw_response) if raw_response else 0,
                "parse_error": parse_error,
            }
        )
