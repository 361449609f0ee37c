import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from src.utils.logging import Logger

QUIET_PATHS = {"/", "/api/health", "/api/ping"}


class LogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.id = request_id

        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        # The body is left unread: webhook signatures are computed over the raw bytes
        LOGGER = Logger("FastAPIApp", {"request_id": request_id})
        extra = {
            "method": request.method,
            "url": str(request.url),
            "github_delivery": request.headers.get("x-github-delivery", "unknown"),
            "ip": request.client.host if request.client else "unknown",
        }

        LOGGER.info("Incoming Request", extra)
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            extra["error"] = str(e)
            LOGGER.error("Error in request processing", extra=extra)
            raise

        extra["status_code"] = response.status_code
        extra["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
        LOGGER.info("Response", extra=extra)

        response.headers["x-request-id"] = request_id
        return response
