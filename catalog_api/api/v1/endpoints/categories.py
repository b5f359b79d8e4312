"""
Category Endpoints
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_api.core.database import get_db
from catalog_api.core.deps import require_access
from catalog_api.core.guards import RequestContext
from catalog_api.schemas.base import PaginatedResponse, SuccessResponse
from catalog_api.schemas.catalog import CategoryCreate, CategoryResponse, CategoryUpdate
from catalog_api.services.catalog import category_service

router = APIRouter()


@router.get("/", response_model=PaginatedResponse)
async def list_categories(
    search: Optional[str] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    ctx: RequestContext = Depends(require_access("categories", "read")),
    db: AsyncSession = Depends(get_db)
) -> Any:
    items, total = await category_service.list_records(db, ctx.principal, search=search, skip=skip, limit=limit)
    return PaginatedResponse.create(
        items=[CategoryResponse.model_validate(item) for item in items],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.post("/", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    category_data: CategoryCreate,
    ctx: RequestContext = Depends(require_access("categories", "create")),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await category_service.create(db, ctx.principal, category_data)


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: int,
    ctx: RequestContext = Depends(require_access("categories", "read", id_param="category_id")),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await category_service.get(db, ctx.principal, category_id)


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: int,
    category_data: CategoryUpdate,
    ctx: RequestContext = Depends(require_access("categories", "update", id_param="category_id")),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await category_service.update(db, ctx.principal, category_id, category_data)


@router.delete("/{category_id}", response_model=SuccessResponse)
async def delete_category(
    category_id: int,
    ctx: RequestContext = Depends(require_access("categories", "delete", id_param="category_id")),
    db: AsyncSession = Depends(get_db)
) -> Any:
    """Delete a category. Subcategories are removed with it."""
    await category_service.delete(db, ctx.principal, category_id)
    return SuccessResponse(message="Category deleted successfully", data={"category_id": category_id})
