from enum import Enum
from uuid import UUID
from pydantic import BaseModel, ConfigDict
from datetime import datetime


class PullRequestStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    MERGED = "merged"


class PullRequestUpsert(BaseModel):
    """Fields written when a webhook delivery creates or refreshes a PR row."""
    repository_id: UUID
    number: int
    title: str
    author: str
    url: str
    status: PullRequestStatus = PullRequestStatus.OPEN


class PullRequestRead(PullRequestUpsert):
    id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
