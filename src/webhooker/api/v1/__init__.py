"""V1 REST API routes.

Combines all sub-routers under the ``/api/v1`` prefix.
"""

from fastapi import APIRouter

from webhooker.api.v1.relay import router as relay_router

v1_router = APIRouter(prefix="/api/v1")

v1_router.include_router(relay_router)

__all__ = ["v1_router"]
