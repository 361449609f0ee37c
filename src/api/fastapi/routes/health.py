from datetime import datetime, timezone

from fastapi import APIRouter, Request
from src.utils.logging import logger

router = APIRouter()

@router.get("/health")
def health_check(request: Request):
    logger.info("Health check endpoint hit")
    worker_pool = getattr(request.app.state, "review_worker_pool", None)
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "active_reviews": worker_pool.active_count if worker_pool else 0,
    }

@router.get("/ping")
def ping():
    logger.info("Ping endpoint hit")
    return {"status": "pong"}
