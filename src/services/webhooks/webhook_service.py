import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from fastapi import status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from src.models.schemas.pull_requests import PullRequestUpsert
from src.models.schemas.responses import ReviewTriggeredResponse, WebhookAckResponse
from src.models.schemas.webhooks import PullRequestEventPayload
from src.services.pr_review.review_orchestrator import ReviewOrchestrator
from src.services.pr_review.review_store import ReviewStore
from src.services.webhooks.signature import verify_webhook_signature
from src.utils.exception import BadRequestException, UnauthorizedException
from src.utils.logging import get_logger

logger = get_logger(__name__)

PULL_REQUEST_EVENT = "pull_request"


@dataclass
class WebhookResult:
    status_code: int
    body: Dict[str, Any] = field(default_factory=dict)


def _ack(message: str) -> WebhookResult:
    return WebhookResult(
        status_code=status.HTTP_200_OK,
        body=WebhookAckResponse(message=message).model_dump(),
    )


class WebhookService:
    """Turns GitHub pull_request deliveries into review runs."""

    def __init__(self, db: Session, orchestrator: ReviewOrchestrator):
        self.db = db
        self.store = ReviewStore(db)
        self.orchestrator = orchestrator

    async def handle_event(
        self,
        event_type: Optional[str],
        raw_body: bytes,
        signature: Optional[str]
    ) -> WebhookResult:
        """
        Process one webhook delivery.

        Raises:
            BadRequestException: If the body is not a pull_request payload
            UnauthorizedException: If the repository has a webhook secret and
                the signature does not match
        """
        if event_type != PULL_REQUEST_EVENT:
            logger.info(f"Ignoring webhook event: {event_type}")
            return _ack(f"Ignored event: {event_type}")

        payload = self._parse_payload(raw_body)

        if not payload.triggers_review:
            return _ack(f"Ignored action: {payload.action}")

        full_name = payload.repository.full_name
        repository = self.store.get_repository_by_full_name(full_name)
        if repository is None:
            logger.info(f"Webhook for unregistered repository {full_name}")
            return _ack(f"Repository {full_name} not registered")

        if repository.webhook_secret and not verify_webhook_signature(
            raw_body, signature, repository.webhook_secret
        ):
            logger.warning(f"Invalid webhook signature for {full_name}")
            raise UnauthorizedException("Invalid signature")

        pr = payload.pull_request
        pull_request = self.store.upsert_pull_request(
            PullRequestUpsert(
                repository_id=repository.id,
                number=pr.number,
                title=pr.title,
                author=pr.user.login,
                url=pr.html_url,
                status=pr.status,
            )
        )

        review_id = None
        try:
            review_id = self.orchestrator.trigger_review(pull_request.id)
        except Exception as e:
            logger.error(
                f"Failed to trigger review for {full_name}#{pr.number}: {e}",
                exc_info=True,
            )

        logger.info(
            f"Webhook {payload.action} for {full_name}#{pr.number} processed",
            extra={"pr_id": str(pull_request.id), "review_id": str(review_id)},
        )
        return WebhookResult(
            status_code=status.HTTP_201_CREATED,
            body=ReviewTriggeredResponse(
                message="Review triggered" if review_id else "Review could not be triggered",
                reviewTriggered=review_id is not None,
                pullRequestId=pull_request.id,
                reviewId=review_id,
            ).model_dump(mode="json"),
        )

    def _parse_payload(self, raw_body: bytes) -> PullRequestEventPayload:
        try:
            body = json.loads(raw_body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            raise BadRequestException("Invalid JSON payload")

        try:
            return PullRequestEventPayload.model_validate(body)
        except ValidationError as e:
            logger.error(f"Webhook payload validation error: {e}")
            raise BadRequestException("Invalid pull_request webhook payload")
