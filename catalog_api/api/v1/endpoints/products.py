"""
Product Endpoints
Tenant-scoped product CRUD behind the full guard pipeline
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from catalog_api.core.database import get_db
from catalog_api.core.deps import require_access
from catalog_api.core.guards import RequestContext
from catalog_api.schemas.base import PaginatedResponse, SuccessResponse
from catalog_api.schemas.catalog import ProductCreate, ProductResponse, ProductUpdate
from catalog_api.services.catalog import product_service

logger = structlog.get_logger()
router = APIRouter()


@router.get("/", response_model=PaginatedResponse)
async def list_products(
    search: Optional[str] = Query(None, description="Search in product name"),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(20, ge=1, le=100, description="Maximum number of records"),
    ctx: RequestContext = Depends(require_access("products", "read")),
    db: AsyncSession = Depends(get_db)
) -> Any:
    """List products of the caller's tenant (every tenant for admins)."""
    items, total = await product_service.list_records(db, ctx.principal, search=search, skip=skip, limit=limit)
    return PaginatedResponse.create(
        items=[ProductResponse.model_validate(item) for item in items],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.post("/", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    ctx: RequestContext = Depends(require_access("products", "create")),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await product_service.create(db, ctx.principal, product_data)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: int,
    ctx: RequestContext = Depends(require_access("products", "read", id_param="product_id")),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await product_service.get(db, ctx.principal, product_id)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int,
    product_data: ProductUpdate,
    ctx: RequestContext = Depends(require_access("products", "update", id_param="product_id")),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await product_service.update(db, ctx.principal, product_id, product_data)


@router.delete("/{product_id}", response_model=SuccessResponse)
async def delete_product(
    product_id: int,
    ctx: RequestContext = Depends(require_access("products", "delete", id_param="product_id")),
    db: AsyncSession = Depends(get_db)
) -> Any:
    await product_service.delete(db, ctx.principal, product_id)
    return SuccessResponse(message="Product deleted successfully", data={"product_id": product_id})
