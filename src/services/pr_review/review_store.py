"""
Review Store

Persistence operations the review pipeline needs: repository lookup, pull
request upsert on (repository, number), review creation, guarded status
transitions and the terminal comment batch.
"""

import datetime
from dataclasses import dataclass
from datetime import timezone
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from src.exceptions.pr_review_exceptions import (
    InvalidReviewTransitionException,
    ReviewNotFoundException,
)
from src.models.db.pull_requests import PullRequest
from src.models.db.repositories import Repository
from src.models.db.review_comments import ReviewComment
from src.models.db.reviews import Review
from src.models.schemas.pr_review.review_output import ReviewCommentDraft
from src.models.schemas.pull_requests import PullRequestUpsert
from src.models.schemas.reviews import ReviewStatus
from src.utils.logging import get_logger

logger = get_logger(__name__)


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(timezone.utc)


@dataclass
class ReviewTarget:
    """Everything a review run needs to know about the PR it reviews."""
    review_id: UUID
    pull_request_id: UUID
    pr_number: int
    repo_full_name: str
    owner_user_id: UUID
    custom_rules: Optional[str] = None


class ReviewStore:
    def __init__(self, db: Session):
        self.db = db

    def get_repository_by_full_name(self, full_name: str) -> Optional[Repository]:
        return self.db.query(Repository).filter(Repository.full_name == full_name).first()

    def upsert_pull_request(self, data: PullRequestUpsert) -> PullRequest:
        """
        Create the PR row or refresh title/status of the existing one.

        A concurrent delivery for the same (repository, number) can win the
        insert race; the unique constraint then rejects ours and the winner's
        row is updated instead.
        """
        existing = self._find_pull_request(data.repository_id, data.number)
        if existing:
            return self._refresh_pull_request(existing, data)

        pull_request = PullRequest(
            repository_id=data.repository_id,
            number=data.number,
            title=data.title,
            author=data.author,
            url=data.url,
            status=data.status.value,
        )
        try:
            self.db.add(pull_request)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            existing = self._find_pull_request(data.repository_id, data.number)
            if existing is None:
                raise
            logger.info(f"Lost insert race for PR #{data.number}, updating existing row")
            return self._refresh_pull_request(existing, data)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error while upserting PR #{data.number}: {e}")
            raise

        self.db.refresh(pull_request)
        logger.info(f"Created pull request {pull_request.id} for #{data.number}")
        return pull_request

    def _find_pull_request(self, repository_id: UUID, number: int) -> Optional[PullRequest]:
        return (
            self.db.query(PullRequest)
            .filter(PullRequest.repository_id == repository_id, PullRequest.number == number)
            .first()
        )

    def _refresh_pull_request(self, pull_request: PullRequest, data: PullRequestUpsert) -> PullRequest:
        pull_request.title = data.title
        pull_request.status = data.status.value
        pull_request.updated_at = _utcnow()
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error while updating PR {pull_request.id}: {e}")
            raise
        self.db.refresh(pull_request)
        return pull_request

    def create_review(self, pr_id: UUID) -> Review:
        review = Review(
            pr_id=pr_id,
            status=ReviewStatus.PENDING.value,
            started_at=_utcnow(),
        )
        try:
            self.db.add(review)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error while creating review for PR {pr_id}: {e}")
            raise
        self.db.refresh(review)
        return review

    def get_review(self, review_id: UUID) -> Review:
        review = self.db.get(Review, review_id)
        if review is None:
            raise ReviewNotFoundException(review_id)
        return review

    def load_review_target(self, review_id: UUID) -> ReviewTarget:
        review = self.get_review(review_id)
        pull_request = review.pull_request
        repository = pull_request.repository
        return ReviewTarget(
            review_id=review.id,
            pull_request_id=pull_request.id,
            pr_number=pull_request.number,
            repo_full_name=repository.full_name,
            owner_user_id=repository.user_id,
            custom_rules=repository.rules,
        )

    def _apply_transition(self, review: Review, target: ReviewStatus) -> None:
        current = ReviewStatus(review.status)
        if not current.can_transition_to(target):
            raise InvalidReviewTransitionException(current.value, target.value)
        review.status = target.value

    def mark_running(self, review_id: UUID) -> Review:
        review = self.get_review(review_id)
        self._apply_transition(review, ReviewStatus.RUNNING)
        self._commit(review_id)
        return review

    def complete_review(
        self,
        review_id: UUID,
        summary: str,
        tokens_used: int,
        comments: Sequence[ReviewCommentDraft] = ()
    ) -> Review:
        """Move a running review to done and insert its comments in one commit."""
        review = self.get_review(review_id)
        self._apply_transition(review, ReviewStatus.DONE)
        review.summary = summary
        review.tokens_used = tokens_used
        review.completed_at = _utcnow()
        self.db.add_all(
            ReviewComment(
                review_id=review.id,
                file_path=c.file_path,
                line=c.line,
                body=c.body,
                category=c.category.value,
                severity=c.severity.value,
            )
            for c in comments
        )
        self._commit(review_id)
        return review

    def fail_review(self, review_id: UUID, message: str) -> Review:
        review = self.get_review(review_id)
        self._apply_transition(review, ReviewStatus.ERROR)
        review.summary = message
        review.completed_at = _utcnow()
        self._commit(review_id)
        return review

    def _commit(self, review_id: UUID) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error while updating review {review_id}: {e}")
            raise
