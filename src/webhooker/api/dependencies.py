"""FastAPI dependency injection helpers.

Usage in a route::

    @router.post("/enable")
    async def enable(
        controller: Annotated[LifecycleController, Depends(get_controller)],
    ) -> ...:
        ...
"""

from __future__ import annotations

from fastapi import Request

from webhooker.errors.webhooker_errors import WebhookerError
from webhooker.relay.controller import LifecycleController  # noqa: TC001


def get_controller(request: Request) -> LifecycleController:
    """Retrieve the lifecycle controller from ``app.state``.

    The controller is stored on ``app.state.controller`` during lifespan
    startup.

    Raises:
        WebhookerError: If the controller is not initialized.
    """
    controller: LifecycleController | None = getattr(request.app.state, "controller", None)
    if controller is None:
        raise WebhookerError("relay not initialized", status_code=503, code="not-initialized")
    return controller
