"""
FastAPI server for the back-office admin surface.

Order, stock and sync routes share one wired ``Container``. The lifespan
starts the reconciliation queue and polling when a remote store is
configured, and drains the queue on shutdown.
"""
from __future__ import annotations

import logging
import os
import urllib.parse
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from backoffice import __version__
from backoffice.api.common import set_container
from backoffice.api.orders import router as orders_router
from backoffice.api.stock import router as stock_router
from backoffice.api.sync import router as sync_router
from backoffice.bootstrap import Container
from backoffice.core.exceptions import BackofficeException, EntityNotFoundException
from backoffice.core.metrics import metrics
from backoffice.integrations.sentry_integration import capture_exception

logger = logging.getLogger(__name__)


def _origin_from_url(value: str | None) -> str | None:
    if not value:
        return None
    try:
        parsed = urllib.parse.urlsplit(value.strip())
    except ValueError:
        return None
    if not parsed.scheme or not parsed.netloc:
        return None
    return f"{parsed.scheme}://{parsed.netloc}"


def create_api_app(container: Container, *, manage_lifecycle: bool = True) -> FastAPI:
    """
    Create FastAPI application for the admin back-office.

    Args:
        container: Wired services from ``build_container``
        manage_lifecycle: Start/stop background sync with the app lifespan
    """
    set_container(container)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Back-office API starting...")
        if manage_lifecycle:
            await container.start()
        yield
        logger.info("Back-office API shutting down...")
        if manage_lifecycle:
            await container.stop()

    app = FastAPI(
        title="Back-office Admin API",
        description="Order lifecycle, stock and rewards reconciliation",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    environment = container.settings.environment.lower()
    is_dev = environment in ("development", "dev", "local", "test")

    allowed_origins: list[str] = []
    for raw in os.getenv("CORS_ALLOWED_ORIGINS", "").split(","):
        origin = _origin_from_url(raw)
        if origin and origin not in allowed_origins:
            allowed_origins.append(origin)
    if is_dev:
        allowed_origins.extend(["http://localhost:8081", "http://localhost:19006", "http://localhost:3000"])

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Sentry-Trace", "Baggage"],
    )

    @app.exception_handler(EntityNotFoundException)
    async def not_found_handler(request: Request, exc: EntityNotFoundException):
        return JSONResponse(status_code=404, content={"detail": exc.message})

    @app.exception_handler(BackofficeException)
    async def backoffice_exception_handler(request: Request, exc: BackofficeException):
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        capture_exception(exc, path=request.url.path)
        return JSONResponse(status_code=500, content={"detail": exc.message})

    app.include_router(orders_router)
    app.include_router(stock_router)
    app.include_router(sync_router)

    @app.get("/")
    async def root():
        return {"service": "Back-office Admin API", "version": __version__, "docs": "/api/docs"}

    @app.get("/health")
    async def health():
        return {
            "status": "ok",
            "remote_configured": container.store.configured,
            "sync_pending": container.queue.pending_count,
            "sync_failed": container.queue.failed_count,
            "metrics": metrics.get_summary(),
        }

    @app.get("/metrics")
    async def prometheus_metrics():
        return PlainTextResponse(metrics.export_prometheus())

    return app


async def run_api_server(container: Container, host: str = "0.0.0.0", port: int = 8080):
    """Run FastAPI server as async task."""
    app = create_api_app(container)

    config = uvicorn.Config(app, host=host, port=port, log_level="info", access_log=True)
    server = uvicorn.Server(config)

    logger.info(f"Starting back-office API on http://{host}:{port}")
    await server.serve()
