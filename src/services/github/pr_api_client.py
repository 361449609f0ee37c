"""
PR API Client

Thin async client over the GitHub REST endpoints the review pipeline needs:
the paginated PR file list and review creation. Requests are authenticated
with the repository owner's OAuth access token. Failures are never retried;
any non-success status is raised as a GitHubAPIException.
"""

import re
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from src.core.config import settings
from src.exceptions.pr_review_exceptions import (
    GitHubAPIException,
    GitHubRateLimitException,
)
from src.models.schemas.pr_review.pr_patch import PRFilePatch
from src.utils.logging import get_logger

logger = get_logger(__name__)

GITHUB_API_VERSION = "2022-11-28"
# GitHub lists at most 3000 files per pull request
MAX_FILE_PAGES = 30
LOW_RATE_LIMIT_THRESHOLD = 100

_NEXT_LINK_PATTERN = re.compile(r'<[^>]+>\s*;\s*rel="next"')


@dataclass
class GitHubAPIRateLimit:
    """Rate limit state reported by the x-ratelimit-* response headers."""
    limit: Optional[int] = None
    remaining: Optional[int] = None
    reset_at: Optional[int] = None

    @classmethod
    def from_headers(cls, headers: Any) -> "GitHubAPIRateLimit":
        def _int(name: str) -> Optional[int]:
            value = headers.get(name) if headers else None
            try:
                return int(value) if value is not None else None
            except (TypeError, ValueError):
                return None

        return cls(
            limit=_int("x-ratelimit-limit"),
            remaining=_int("x-ratelimit-remaining"),
            reset_at=_int("x-ratelimit-reset"),
        )

    @property
    def exhausted(self) -> bool:
        return self.remaining == 0

    def seconds_until_reset(self) -> Optional[int]:
        if self.reset_at is None:
            return None
        return max(0, self.reset_at - int(time.time()))


class PRApiClient:
    """GitHub REST client for pull request files and reviews."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        per_page: Optional[int] = None
    ):
        self.base_url = (base_url or settings.GITHUB_API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.GITHUB_API_TIMEOUT
        self.per_page = per_page or settings.GITHUB_FILES_PER_PAGE
        self.last_rate_limit: Optional[GitHubAPIRateLimit] = None

    def _headers(self, access_token: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }

    async def _request(
        self,
        method: str,
        path: str,
        access_token: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None
    ) -> httpx.Response:
        url = f"{self.base_url}{path}"

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.request(
                method,
                url,
                headers=self._headers(access_token),
                params=params,
                json=json,
            )

        self._track_rate_limit(response)

        if not 200 <= response.status_code < 300:
            self._raise_for_status(response, method, url)

        return response

    def _track_rate_limit(self, response: httpx.Response) -> None:
        rate_limit = GitHubAPIRateLimit.from_headers(response.headers)
        self.last_rate_limit = rate_limit

        if rate_limit.remaining is not None and rate_limit.remaining < LOW_RATE_LIMIT_THRESHOLD:
            logger.warning(
                f"GitHub rate limit running low: {rate_limit.remaining}/{rate_limit.limit} remaining",
                extra={"reset_in_seconds": rate_limit.seconds_until_reset()}
            )

    def _raise_for_status(self, response: httpx.Response, method: str, url: str) -> None:
        status_code = response.status_code
        headers = response.headers or {}

        if status_code == 429 or (status_code == 403 and self.last_rate_limit and self.last_rate_limit.exhausted):
            retry_after = headers.get("retry-after")
            try:
                retry_after_seconds = int(retry_after) if retry_after is not None else None
            except (TypeError, ValueError):
                retry_after_seconds = None
            if retry_after_seconds is None and self.last_rate_limit:
                retry_after_seconds = self.last_rate_limit.seconds_until_reset()

            logger.error(f"GitHub rate limit exceeded on {method} {url}")
            raise GitHubRateLimitException(
                status_code=status_code,
                url=url,
                retry_after_seconds=retry_after_seconds,
            )

        try:
            body = response.text[:500]
        except Exception:
            body = None

        logger.error(
            f"GitHub API request failed: {method} {url} -> {status_code}",
            extra={"response_body": body}
        )
        raise GitHubAPIException(
            status_code=status_code,
            message=f"{method} {url} failed",
            url=url,
            response_body=body,
        )

    @staticmethod
    def _has_next_page(response: httpx.Response) -> bool:
        link_header = (response.headers or {}).get("link") or ""
        return bool(_NEXT_LINK_PATTERN.search(link_header))

    async def get_pr_files(
        self,
        repo_full_name: str,
        pr_number: int,
        access_token: str
    ) -> List[PRFilePatch]:
        """
        Fetch every changed file of a pull request.

        Pages are requested until a page comes back shorter than ``per_page``
        or the Link header no longer advertises a next page.

        Args:
            repo_full_name: Repository in ``owner/name`` form
            pr_number: Pull request number
            access_token: OAuth token of the repository owner

        Returns:
            Changed files in the order GitHub lists them

        Raises:
            GitHubAPIException: On any non-success response
        """
        path = f"/repos/{repo_full_name}/pulls/{pr_number}/files"
        files: List[PRFilePatch] = []

        for page in range(1, MAX_FILE_PAGES + 1):
            response = await self._request(
                "GET",
                path,
                access_token,
                params={"per_page": self.per_page, "page": page},
            )
            entries = response.json() or []
            files.extend(PRFilePatch.from_github(entry) for entry in entries)

            if len(entries) < self.per_page or not self._has_next_page(response):
                break
        else:
            logger.warning(
                f"Stopped paginating files for {repo_full_name}#{pr_number} after {MAX_FILE_PAGES} pages"
            )

        logger.info(f"Fetched {len(files)} files for {repo_full_name}#{pr_number}")
        return files

    async def create_review(
        self,
        repo_full_name: str,
        pr_number: int,
        access_token: str,
        body: str,
        event: str,
        comments: Optional[List[Dict[str, Any]]] = None
    ) -> Dict[str, Any]:
        """Create a pull request review, optionally with inline comments."""
        payload: Dict[str, Any] = {"body": body, "event": event}
        if comments:
            payload["comments"] = comments

        response = await self._request(
            "POST",
            f"/repos/{repo_full_name}/pulls/{pr_number}/reviews",
            access_token,
            json=payload,
        )
        return response.json()
