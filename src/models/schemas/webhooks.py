"""
GitHub webhook payload models.

Only the fields the review pipeline reads are modelled; everything else in
the delivery is ignored.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from src.models.schemas.pull_requests import PullRequestStatus


REVIEW_TRIGGERING_ACTIONS = frozenset({"opened", "synchronize", "reopened"})


class GitHubUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    login: str
    id: Optional[int] = None


class GitHubRepositoryRef(BaseModel):
    model_config = ConfigDict(extra="ignore")

    full_name: str
    name: Optional[str] = None


class GitHubPullRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    number: int
    title: str
    html_url: str
    state: str = "open"
    merged: bool = False
    user: GitHubUser

    @property
    def status(self) -> PullRequestStatus:
        if self.merged:
            return PullRequestStatus.MERGED
        if self.state == "closed":
            return PullRequestStatus.CLOSED
        return PullRequestStatus.OPEN


class PullRequestEventPayload(BaseModel):
    """Body of a ``pull_request`` webhook delivery."""
    model_config = ConfigDict(extra="ignore")

    action: str
    pull_request: GitHubPullRequest
    repository: GitHubRepositoryRef
    sender: Optional[GitHubUser] = Field(default=None)

    @property
    def triggers_review(self) -> bool:
        return self.action in REVIEW_TRIGGERING_ACTIONS
