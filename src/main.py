from fastapi import FastAPI
import uvicorn
from dotenv import load_dotenv
from contextlib import asynccontextmanager

load_dotenv()

from src.api.fastapi import FastAPIApp
from src.core.config import settings
from src.core.database import SessionLocal
from src.services.pr_review.review_orchestrator import ReviewOrchestrator
from src.utils.exception import add_exception_handlers
from src.utils.logging import logger
from src.workers.review_worker import ReviewWorkerPool


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting up QualityGate reviewer")
    worker_pool = ReviewWorkerPool(max_concurrency=settings.REVIEW_WORKER_CONCURRENCY)
    app.state.review_worker_pool = worker_pool
    app.state.review_orchestrator = ReviewOrchestrator(
        session_factory=SessionLocal,
        worker_pool=worker_pool,
    )

    yield

    logger.info("Shutting down QualityGate reviewer")
    try:
        await worker_pool.shutdown(timeout=settings.REVIEW_WORKER_SHUTDOWN_TIMEOUT)
        logger.info("Review worker pool drained")
    except Exception as e:
        logger.error(f"Failed to drain review worker pool: {e}")

app_instance = FastAPIApp(lifespan=lifespan)
app = app_instance.get_app()

add_exception_handlers(app, logger)

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000, log_level="info")
