"""
GitHub Services Package

Provides GitHub API integration for PR review operations.
"""

from src.services.github.pr_api_client import PRApiClient, GitHubAPIRateLimit
from src.services.github.review_publisher import (
    ReviewPublisher,
    PublishResult,
)

__all__ = [
    # GitHub API client
    "PRApiClient",
    "GitHubAPIRateLimit",
    # Review publishing
    "ReviewPublisher",
    "PublishResult",
]
