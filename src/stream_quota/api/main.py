"""FastAPI application for per-user stream admission control.

Endpoints (all under /api/users):
1. POST /api/users - Register a user with a stream limit
2. GET|DELETE /api/users/{id} - Inspect or remove a user
3. GET|PUT /api/users/{id}/limit - Check capacity or change the limit
4. POST|DELETE /api/users/{id}/streams - Start or stop a stream

Run with a single worker: the registry's gate only serializes callers
inside one process.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from stream_quota import __version__
from stream_quota.api.errors import install_error_handlers
from stream_quota.api.routes import router
from stream_quota.core.config import get_settings
from stream_quota.core.logging import get_logger, setup_logging
from stream_quota.registry import get_registry, init_registry

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup/shutdown tasks.

    Startup:
    - Configure logging
    - Open the record store and initialize the registry

    Shutdown:
    - Close the record store
    """
    settings = get_settings()
    setup_logging(settings.log_level, format_style=settings.log_format)
    logger.info("Starting stream quota API...")

    registry = init_registry(settings=settings)
    logger.info("Registry initialized with %d users", len(registry))

    yield

    logger.info("Shutting down stream quota API...")
    registry.store.close()


app = FastAPI(
    title="Stream Quota API",
    description="Per-user concurrent stream admission control",
    version=__version__,
    lifespan=lifespan,
)

install_error_handlers(app)

app.include_router(router, prefix="/api")


@app.get("/")
async def root() -> dict[str, Any]:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "stream-quota-api",
        "version": __version__,
    }


@app.get("/health")
def health() -> dict[str, Any]:
    """Detailed health check endpoint."""
    registry = get_registry()
    settings = get_settings()
    return {
        "status": "healthy",
        "users": len(registry),
        "max_concurrency": registry.max_concurrency,
        "storage_backend": settings.storage_backend,
        "ephemeral": settings.is_ephemeral,
    }
