from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Error body returned by the exception handlers."""
    success: bool = False
    errorMessage: str


class WebhookAckResponse(BaseModel):
    """Acknowledgment for webhook deliveries that do not trigger a review."""
    message: str


class ReviewTriggeredResponse(BaseModel):
    """Body of the 201 response when a review run was triggered."""
    message: str = "Review triggered"
    reviewTriggered: bool
    pullRequestId: UUID
    reviewId: Optional[UUID] = None
