"""
API v1 Router
Main router for all API v1 endpoints
"""

from fastapi import APIRouter
from catalog_api.api.v1.endpoints import admin, api_keys, assets, auth, categories, health, owner, products

api_router = APIRouter()

# Authentication endpoints
api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["authentication"]
)

# Owner administration (ADMIN)
api_router.include_router(
    admin.router,
    prefix="/admin",
    tags=["admin"]
)

# Staff and permission administration (OWNER)
api_router.include_router(
    owner.router,
    prefix="/owner",
    tags=["owner"]
)

# Tenant-scoped catalog endpoints
api_router.include_router(
    products.router,
    prefix="/products",
    tags=["products"]
)

api_router.include_router(
    categories.router,
    prefix="/categories",
    tags=["categories"]
)

api_router.include_router(
    assets.router,
    prefix="/assets",
    tags=["assets"]
)

api_router.include_router(
    api_keys.router,
    prefix="/api-keys",
    tags=["api-keys"]
)

# Health and monitoring endpoints
api_router.include_router(
    health.router,
    prefix="/health",
    tags=["health"]
)
