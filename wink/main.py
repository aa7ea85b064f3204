"""
Wink API application.
"""

import time
import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request

from wink.config import settings
from wink.db.pool import db_pool
from wink.features.availability.api.router import router as availability_router
from wink.features.matching.api.router import router as matches_router
from wink.features.matching.services.match_service import match_service
from wink.features.matching.services.notifications import notify_match
from wink.features.recommendations.api.router import router as recommendations_router
from wink.features.recommendations.preferences import PreferenceProfileCache
from wink.infrastructure.observability.logging import get_logger, log_request, setup_logging
from wink.routes import health

setup_logging(log_level=settings.LOG_LEVEL)
logger = get_logger(__name__)

match_service.add_listener(notify_match)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Wink starting", environment=settings.environment, debug=settings.debug)
    await db_pool.initialize()
    try:
        yield
    finally:
        logger.info("Wink shutting down")
        await db_pool.close()


app = FastAPI(
    title="Wink",
    description="Shared free time, activity recommendations and mutual matches for friends",
    version="0.1.0",
    lifespan=lifespan,
)
app.state.preference_cache = PreferenceProfileCache(settings.PREFERENCE_CACHE_TTL_SECONDS)

app.include_router(health.router)
app.include_router(availability_router)
app.include_router(recommendations_router)
app.include_router(matches_router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Bind a request id for every log line of the request, then log the outcome."""
    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id)

    started = time.perf_counter()
    response = await call_next(request)
    log_request(
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 2),
    )
    response.headers["x-request-id"] = request_id
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
