"""
Asset Endpoints
Metadata for tenant files. Storage of the file bytes is handled elsewhere.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_api.core.database import get_db
from catalog_api.core.deps import require_access
from catalog_api.core.guards import RequestContext
from catalog_api.schemas.base import PaginatedResponse, SuccessResponse
from catalog_api.schemas.catalog import AssetCreate, AssetResponse, AssetUpdate
from catalog_api.services.catalog import asset_service

router = APIRouter()


@router.get("/", response_model=PaginatedResponse)
async def list_assets(
    search: Optional[str] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    ctx: RequestContext = Depends(require_access("assets", "read")),
    db: AsyncSession = Depends(get_db)
) -> Any:
    items, total = await asset_service.list_records(db, ctx.principal, search=search, skip=skip, limit=limit)
    return PaginatedResponse.create(
        items=[AssetResponse.model_validate(item) for item in items],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.post("/", response_model=AssetResponse, status_code=status.HTTP_201_CREATED)
async def create_asset(
    asset_data: AssetCreate,
    ctx: RequestContext = Depends(require_access("assets", "create")),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await asset_service.create(db, ctx.principal, asset_data)


@router.get("/{asset_id}", response_model=AssetResponse)
async def get_asset(
    asset_id: int,
    ctx: RequestContext = Depends(require_access("assets", "read", id_param="asset_id")),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await asset_service.get(db, ctx.principal, asset_id)


@router.put("/{asset_id}", response_model=AssetResponse)
async def update_asset(
    asset_id: int,
    asset_data: AssetUpdate,
    ctx: RequestContext = Depends(require_access("assets", "update", id_param="asset_id")),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await asset_service.update(db, ctx.principal, asset_id, asset_data)


@router.delete("/{asset_id}", response_model=SuccessResponse)
async def delete_asset(
    asset_id: int,
    ctx: RequestContext = Depends(require_access("assets", "delete", id_param="asset_id")),
    db: AsyncSession = Depends(get_db)
) -> Any:
    await asset_service.delete(db, ctx.principal, asset_id)
    return SuccessResponse(message="Asset deleted successfully", data={"asset_id": asset_id})
