"""API v1 router that aggregates all endpoint routers."""

from fastapi import APIRouter

from inventory_service.api.v1 import admin, health

api_router = APIRouter()

# Include all routers
api_router.include_router(
    health.router,
    tags=["Health"],
)

api_router.include_router(
    admin.router,
    prefix="/admin",
    tags=["Admin"],
)
