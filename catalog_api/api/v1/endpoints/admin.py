"""Owner account administration (ADMIN only)."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_api.core.database import get_db
from catalog_api.core.deps import require_roles
from catalog_api.core.rbac import Principal, Role
from catalog_api.schemas.base import SuccessResponse
from catalog_api.schemas.user_management import (
    AccountDetail,
    OwnerCreateRequest,
    OwnerDetail,
    OwnerSummary,
    OwnerUpdateRequest,
)
from catalog_api.services.user_management import user_management_service

logger = structlog.get_logger()
router = APIRouter()

require_admin = require_roles(Role.ADMIN)


@router.post("/owners", response_model=AccountDetail, status_code=status.HTTP_201_CREATED)
async def create_owner(
    owner_data: OwnerCreateRequest,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Provision a new tenant owner."""
    return await user_management_service.create_owner(db, owner_data)


@router.get("/owners", response_model=list[OwnerSummary])
async def list_owners(
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await user_management_service.list_owners(db)


@router.get("/owners/{owner_id}", response_model=OwnerDetail)
async def get_owner(
    owner_id: int,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Owner detail with staff members and tenant record counts."""
    return await user_management_service.get_owner(db, owner_id)


@router.patch("/owners/{owner_id}", response_model=AccountDetail)
async def update_owner(
    owner_id: int,
    owner_data: OwnerUpdateRequest,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await user_management_service.update_owner(db, owner_id, owner_data)


@router.delete("/owners/{owner_id}", response_model=SuccessResponse)
async def delete_owner(
    owner_id: int,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Delete an owner. Its staff, their grants and all tenant data go with it."""
    await user_management_service.delete_owner(db, owner_id)
    return SuccessResponse(message="Owner deleted successfully", data={"owner_id": owner_id})
