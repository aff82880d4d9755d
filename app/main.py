"""Main FastAPI application."""
import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from app.api import calls, health
from app.api.webhooks import voice
from app.core.config import settings
from app.core.errors import AppError, NotFoundError, app_error_handler
from app.core.logging import request_id_var, setup_logging
from app.services.persistence.factory import build_call_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging()
    app.state.call_store = await build_call_store(settings)
    yield
    # Shutdown
    await app.state.call_store.close()


app = FastAPI(
    title="Medication Reminder Voice Service",
    description="Automated medication reminder calls with SMS fallback",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_exception_handler(AppError, app_error_handler)


@app.middleware("http")
async def request_context(request: Request, call_next):
    """Tag each request with an id and log its outcome."""
    request_id = (
        request.headers.get("x-request-id")
        or request.headers.get("x-correlation-id")
        or f"req-{uuid.uuid4().hex[:12]}"
    )
    token = request_id_var.set(request_id)
    started = time.perf_counter()
    try:
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"[REQUEST] {request.method} {request.url.path} - "
            f"Status: {response.status_code}, Time: {elapsed_ms:.1f}ms"
        )
        response.headers["X-Request-ID"] = request_id
        return response
    finally:
        request_id_var.reset(token)


app.include_router(health.router, tags=["health"])
app.include_router(calls.router, prefix="/api", tags=["calls"])
app.include_router(voice.router, prefix="/api/twilio", tags=["webhooks"])


@app.api_route("/{path:path}", methods=["GET", "POST", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def not_found(request: Request, path: str):
    """Answer unknown routes with the standard error body."""
    raise NotFoundError(f"Route not found: {request.method} /{path}")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.host, port=settings.port)
