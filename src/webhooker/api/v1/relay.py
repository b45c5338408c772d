"""V1 relay endpoints: info, status, configuration, enable and disable."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends

import webhooker
from webhooker.api.dependencies import get_controller
from webhooker.api.v1.schemas import (
    ErrorResponse,
    RelayConfigRequest,
    RelayConfigResponse,
    RelayInfoResponse,
    RelayStatusResponse,
)
from webhooker.config.settings import RelayConfig
from webhooker.errors.webhooker_errors import WebhookerError
from webhooker.relay.controller import LifecycleController  # noqa: TC001

router = APIRouter(prefix="/relay", tags=["relay"])

Controller = Annotated[LifecycleController, Depends(get_controller)]


def _config_resp(config: RelayConfig) -> RelayConfigResponse:
    return RelayConfigResponse.redacted(
        webhook_url=config.webhook_url,
        host_server=config.host_server,
        client_token=config.client_token,
    )


def _error_resp(exc: BaseException | None) -> ErrorResponse | None:
    if exc is None:
        return None
    if isinstance(exc, WebhookerError):
        return ErrorResponse(code=exc.code, message=exc.message)
    return ErrorResponse(code="internal-error", message=str(exc))


def _status(controller: LifecycleController) -> dict[str, Any]:
    config = controller.config
    return RelayStatusResponse(
        enabled=controller.enabled,
        engine_state=controller.engine_state.value,
        config=_config_resp(config) if config is not None else None,
        last_error=_error_resp(controller.last_error),
    ).model_dump(mode="json")


@router.get("")
async def get_status(controller: Controller) -> dict[str, Any]:
    """Return the armed flag, engine state and current configuration."""
    return _status(controller)


@router.get("/info")
async def get_info() -> dict[str, Any]:
    """Return the relay's name, version, author, description and license."""
    return RelayInfoResponse(
        name=webhooker.__title__,
        version=webhooker.__version__,
        author=webhooker.__author__,
        description=webhooker.__description__,
        license=webhooker.__license__,
    ).model_dump(mode="json")


@router.get("/config/default")
async def get_default_config(controller: Controller) -> dict[str, Any]:
    """Return the configuration a fresh install starts with."""
    return _config_resp(controller.default_config()).model_dump(mode="json")


@router.put("/config")
async def set_config(body: RelayConfigRequest, controller: Controller) -> dict[str, Any]:
    """Replace the configuration and restore the persisted armed state."""
    await controller.validate_and_set_config(body.model_dump())
    return _status(controller)


@router.post("/enable")
async def enable(controller: Controller) -> dict[str, Any]:
    """Probe the stream host, start relaying and persist the armed state."""
    await controller.enable()
    return _status(controller)


@router.post("/disable")
async def disable(controller: Controller) -> dict[str, Any]:
    """Stop relaying and persist the disarmed state."""
    await controller.disable()
    return _status(controller)
