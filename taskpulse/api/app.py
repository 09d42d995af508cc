"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .routes import (
    communication_router,
    events_router,
    insights_router,
    notifications_router,
    tasks_router,
)
from ..container import get_container
from ..domain.errors import StorageError
from ..scheduler import JobRegistry, TaskScheduler, create_default_jobs

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Wires the container from settings unless a store is already configured,
    and runs the background jobs while the app is up.
    """
    container = get_container()
    if not container.is_configured:
        container.configure_from_settings()

    scheduler = None
    scheduler_settings = container.settings.scheduler
    if scheduler_settings.enabled:
        registry = JobRegistry()
        create_default_jobs(registry, container, scheduler_settings)
        scheduler = TaskScheduler(registry, timezone=scheduler_settings.timezone)
        scheduler.start()

    yield

    if scheduler:
        scheduler.stop()


async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error(f"Storage error on {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": str(exc)})


def create_app(
    title: str = "TaskPulse API",
    version: str = "1.0.0",
    cors_origins: list[str] | None = None,
) -> FastAPI:
    """Create FastAPI application.

    Args:
        title: API title
        version: API version
        cors_origins: Allowed CORS origins

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title=title,
        version=version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add CORS middleware
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(StorageError, storage_error_handler)

    # Include routers
    app.include_router(tasks_router)
    app.include_router(insights_router)
    app.include_router(notifications_router)
    app.include_router(communication_router)
    app.include_router(events_router)

    @app.get("/health")
    async def health_check() -> dict:
        """Health check endpoint."""
        return {"status": "healthy", "version": version}

    return app


# Create default app instance
app = create_app()
