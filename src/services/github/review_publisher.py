"""
Review Publisher

Posts the analysis result back to GitHub as a pull request review.

The primary attempt anchors every comment inline. GitHub rejects the whole
review when a single anchor falls outside the diff, so a failed primary
attempt is retried exactly once as a body-only COMMENT review with the
comments folded into the body.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from src.exceptions.pr_review_exceptions import GitHubAPIException
from src.models.schemas.pr_review.review_output import (
    CommentSeverity,
    ReviewCommentDraft,
)
from src.services.github.pr_api_client import PRApiClient
from src.utils.logging import get_logger

logger = get_logger(__name__)

REVIEW_HEADER = "## 🤖 AI Code Review"

EVENT_REQUEST_CHANGES = "REQUEST_CHANGES"
EVENT_COMMENT = "COMMENT"

SEVERITY_MARKERS = {
    CommentSeverity.ERROR: "🔴",
    CommentSeverity.WARNING: "🟡",
    CommentSeverity.INFO: "🔵",
}


@dataclass
class PublishResult:
    """Outcome of publishing one review."""
    github_review_id: Optional[int]
    event: str
    inline_comments: int
    used_fallback: bool = False


def format_severity_breakdown(comments: Sequence[ReviewCommentDraft]) -> str:
    counts = {severity: 0 for severity in CommentSeverity}
    for comment in comments:
        counts[comment.severity] += 1

    parts = [
        f"{SEVERITY_MARKERS[severity]} {counts[severity]} {severity.value}"
        for severity in (CommentSeverity.ERROR, CommentSeverity.WARNING, CommentSeverity.INFO)
    ]
    return f"**{len(comments)} comment(s):** " + " · ".join(parts)


def format_comment_body(comment: ReviewCommentDraft) -> str:
    marker = SEVERITY_MARKERS[comment.severity]
    return f"{marker} **[{comment.severity.value.upper()}]** · `{comment.category.value}`\n\n{comment.body}"


def build_review_body(summary: str, comments: Sequence[ReviewCommentDraft]) -> str:
    sections = [REVIEW_HEADER, summary]
    if comments:
        sections.append(format_severity_breakdown(comments))
    return "\n\n".join(sections)


def build_fallback_body(summary: str, comments: Sequence[ReviewCommentDraft]) -> str:
    """Body-only review text listing every comment with its location."""
    body = build_review_body(summary, comments)
    if not comments:
        return body

    lines = [
        f"- {SEVERITY_MARKERS[c.severity]} **[{c.severity.value.upper()}]** "
        f"`{c.file_path}:{c.line}` ({c.category.value}): {c.body}"
        for c in comments
    ]
    return body + "\n\n### Comments\n\n" + "\n".join(lines)


def build_inline_comments(comments: Sequence[ReviewCommentDraft]) -> List[Dict[str, Any]]:
    return [
        {
            "path": comment.file_path,
            "line": comment.line,
            "side": "RIGHT",
            "body": format_comment_body(comment),
        }
        for comment in comments
    ]


def select_review_event(comments: Sequence[ReviewCommentDraft]) -> str:
    if any(c.severity == CommentSeverity.ERROR for c in comments):
        return EVENT_REQUEST_CHANGES
    return EVENT_COMMENT


class ReviewPublisher:
    def __init__(self, pr_client: Optional[PRApiClient] = None):
        self.pr_client = pr_client or PRApiClient()

    async def publish(
        self,
        repo_full_name: str,
        pr_number: int,
        access_token: str,
        summary: str,
        comments: Sequence[ReviewCommentDraft]
    ) -> PublishResult:
        """
        Publish a review, falling back to a body-only review once.

        Raises:
            GitHubAPIException: If the fallback attempt fails as well
        """
        event = select_review_event(comments)
        inline_comments = build_inline_comments(comments)

        try:
            response = await self.pr_client.create_review(
                repo_full_name,
                pr_number,
                access_token,
                body=build_review_body(summary, comments),
                event=event,
                comments=inline_comments,
            )
            logger.info(
                f"Published review on {repo_full_name}#{pr_number} "
                f"with {len(inline_comments)} inline comments ({event})"
            )
            return PublishResult(
                github_review_id=response.get("id") if isinstance(response, dict) else None,
                event=event,
                inline_comments=len(inline_comments),
            )
        except GitHubAPIException as e:
            logger.warning(
                f"Inline review rejected for {repo_full_name}#{pr_number}, "
                f"retrying as body-only review: {e}"
            )

        response = await self.pr_client.create_review(
            repo_full_name,
            pr_number,
            access_token,
            body=build_fallback_body(summary, comments),
            event=EVENT_COMMENT,
            comments=[],
        )
        logger.info(f"Published body-only fallback review on {repo_full_name}#{pr_number}")
        return PublishResult(
            github_review_id=response.get("id") if isinstance(response, dict) else None,
            event=EVENT_COMMENT,
            inline_comments=0,
            used_fallback=True,
        )
