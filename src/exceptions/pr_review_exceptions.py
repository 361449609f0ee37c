"""
PR Review Pipeline Exceptions

Errors raised by the diff source, publication, credential and persistence
collaborators of the review pipeline. Every one of them is terminal for the
review run that raised it; the orchestrator records the message on the
Review row.
"""

from typing import Optional, Dict, Any
from uuid import UUID


class PRReviewException(Exception):
    """Base exception for review pipeline failures."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return self.message


# ============================================================================
# GITHUB API ERRORS
# ============================================================================

class GitHubAPIException(PRReviewException):
    """Raised when the GitHub REST API answers with a non-success status."""

    def __init__(
        self,
        status_code: int,
        message: str,
        url: Optional[str] = None,
        response_body: Optional[str] = None
    ):
        super().__init__(
            message=f"GitHub API error ({status_code}): {message}",
            error_code="GITHUB_API_ERROR",
            details={
                "status_code": status_code,
                "url": url,
                "response_body": response_body,
            }
        )
        self.status_code = status_code


class GitHubRateLimitException(GitHubAPIException):
    """Raised when GitHub rejects a request because the quota is exhausted."""

    def __init__(
        self,
        status_code: int,
        url: Optional[str] = None,
        retry_after_seconds: Optional[int] = None
    ):
        super().__init__(
            status_code=status_code,
            message="rate limit exceeded",
            url=url,
        )
        self.error_code = "GITHUB_RATE_LIMIT_ERROR"
        self.retry_after_seconds = retry_after_seconds
        self.details["retry_after_seconds"] = retry_after_seconds


# ============================================================================
# CREDENTIAL ERRORS
# ============================================================================

class GitHubConnectionNotFoundException(PRReviewException):
    """Raised when the repository owner has no GitHub connection."""

    def __init__(self, user_id: UUID):
        super().__init__(
            message=f"No GitHub connection found for user {user_id}",
            error_code="GITHUB_CONNECTION_NOT_FOUND",
            details={"user_id": str(user_id)}
        )


class LLMCredentialNotFoundException(PRReviewException):
    """Raised when neither a per-user nor a shared AI credential is configured."""

    def __init__(self, provider: str):
        super().__init__(
            message=f"No API key configured for AI provider '{provider}'",
            error_code="LLM_CREDENTIAL_NOT_FOUND",
            details={"provider": provider}
        )


# ============================================================================
# REVIEW STATE ERRORS
# ============================================================================

class ReviewNotFoundException(PRReviewException):
    def __init__(self, review_id: UUID):
        super().__init__(
            message=f"Review {review_id} not found",
            error_code="REVIEW_NOT_FOUND",
            details={"review_id": str(review_id)}
        )


class InvalidReviewTransitionException(PRReviewException):
    """Raised on any transition the review state machine does not allow."""

    def __init__(self, current_status: str, target_status: str):
        super().__init__(
            message=f"Illegal review transition: {current_status} -> {target_status}",
            error_code="INVALID_REVIEW_TRANSITION",
            details={"from": current_status, "to": target_status}
        )
        self.current_status = current_status
        self.target_status = target_status
