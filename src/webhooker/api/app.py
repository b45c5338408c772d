"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest
from starlette.responses import Response

from webhooker import __author__, __description__, __license__, __version__
from webhooker.api.v1 import v1_router
from webhooker.config.settings import AppConfig
from webhooker.errors.webhooker_errors import WebhookerError
from webhooker.metrics.collector import RelayMetrics
from webhooker.notifications.webhook import WebhookForwarder
from webhooker.relay.controller import LifecycleController
from webhooker.storage.client import StorageClient

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from webhooker.storage.client import StorageBackend
    from webhooker.stream.engine import Connector

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle hooks.

    Connects storage and the webhook client, applies the configured relay
    settings, resumes relaying if it was enabled before the restart, and
    stops the engine on exit without touching the persisted state.
    """
    config: AppConfig = app.state.config
    storage = StorageClient(config.storage, backend=app.state.storage_backend)
    forwarder = WebhookForwarder(config.forwarder)

    await storage.connect()
    await forwarder.connect()
    controller = LifecycleController(
        storage,
        forwarder,
        engine_config=config.engine,
        connect=app.state.connect,
        metrics=app.state.metrics,
    )
    app.state.controller = controller
    try:
        await controller.validate_and_set_config(config.relay)
        if controller.enabled and config.engine.auto_resume:
            try:
                await controller.enable()
            except WebhookerError as exc:
                logger.warning("Could not resume relay: %s", exc.message)
        logger.info("Webhooker relay initialized")
        yield
    finally:
        await controller.shutdown()
        await forwarder.close()
        await storage.close()
        logger.info("Webhooker relay shut down")


def create_app(
    *,
    config: AppConfig | None = None,
    storage_backend: StorageBackend | None = None,
    connect: Connector | None = None,
) -> FastAPI:
    """Build and return the FastAPI application.

    Args:
        config: Optional AppConfig. If *None*, a default config is created
            from environment variables.
        storage_backend: Pre-built storage backend overriding
            ``config.storage.engine``.
        connect: Stream connector overriding the websocket client.
    """
    if config is None:
        config = AppConfig()

    app = FastAPI(
        title="webhooker",
        version=__version__,
        description=__description__,
        contact={"name": __author__},
        license_info={"name": __license__},
        lifespan=_lifespan,
    )

    app.state.config = config
    app.state.storage_backend = storage_backend
    app.state.connect = connect
    app.state.metrics = RelayMetrics()

    # -- Error handler --
    @app.exception_handler(WebhookerError)
    async def _webhooker_error_handler(request: Request, exc: WebhookerError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"code": exc.code, "message": exc.message},
        )

    # -- Base routes --
    @app.get("/health", tags=["base"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/metrics", tags=["base"], include_in_schema=False)
    async def metrics_endpoint() -> Response:
        """Prometheus metrics endpoint."""
        body = generate_latest(app.state.metrics.registry)
        return Response(
            content=body,
            media_type="text/plain; version=0.0.4; charset=utf-8",
        )

    app.include_router(v1_router)

    return app
