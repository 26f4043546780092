"""FastAPI application factory with role-based route mounting."""

import asyncio
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator, Literal

from fastapi import FastAPI, Request, Response

from innkeep.infra.settings import get_settings
from innkeep.observability.correlation import (
    CORRELATION_ID_HEADER,
    generate_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from innkeep.tasks.scheduler import AutoCheckoutScheduler

from .errors import install_error_handlers
from .routers import public, worker

AppRole = Literal["public", "worker"]


def _lifespan(role: AppRole):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        scheduler = None
        settings = get_settings()
        if role == "worker" and settings.auto_checkout_enabled:
            scheduler = AutoCheckoutScheduler(settings.auto_checkout_interval_seconds)
            scheduler.start()
        app.state.auto_checkout = scheduler
        try:
            yield
        finally:
            if scheduler is not None:
                # stop() joins the sweep thread; keep the event loop free.
                await asyncio.to_thread(scheduler.stop)

    return lifespan


def create_app(role: AppRole | None = None) -> FastAPI:
    """Create FastAPI app with routes based on APP_ROLE.

    Args:
        role: Explicit role override. If None, reads from APP_ROLE env var.
              Defaults to "public" if env var is not set.

    Returns:
        Configured FastAPI application. The worker role additionally runs
        the auto-checkout scheduler for the lifetime of the app.
    """
    if role is None:
        role = os.environ.get("APP_ROLE", "public")  # type: ignore[assignment]

    app = FastAPI(
        title="Innkeep",
        docs_url=None,
        redoc_url=None,
        lifespan=_lifespan(role),
    )

    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next) -> Response:
        cid = request.headers.get(CORRELATION_ID_HEADER) or generate_correlation_id()
        token = set_correlation_id(cid)
        try:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = cid
            return response
        finally:
            reset_correlation_id(token)

    install_error_handlers(app)

    app.include_router(public.router)

    if role == "worker":
        app.include_router(worker.router)

    return app
