from typing import Optional

from fastapi import APIRouter, Depends, Header
from fastapi.requests import Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from src.core.database import get_db
from src.services.webhooks.webhook_service import WebhookService
from src.utils.logging import logger

router = APIRouter(
    prefix="/webhooks",
    tags=["Webhooks"],
)


def get_webhook_service(request: Request, db: Session = Depends(get_db)) -> WebhookService:
    return WebhookService(db, request.app.state.review_orchestrator)


@router.post("/github")
async def github_webhook(
    request: Request,
    x_github_event: Optional[str] = Header(None),
    x_hub_signature_256: Optional[str] = Header(None),
    webhook_service: WebhookService = Depends(get_webhook_service)
):
    """Receive GitHub pull_request events and trigger AI reviews."""
    body_bytes = await request.body()
    logger.info(f"GitHub webhook received - event: {x_github_event}")

    result = await webhook_service.handle_event(x_github_event, body_bytes, x_hub_signature_256)
    return JSONResponse(content=result.body, status_code=result.status_code)
