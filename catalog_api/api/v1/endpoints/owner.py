"""Staff administration and staff permission management for owners."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_api.core.database import get_db
from catalog_api.core.deps import get_principal, require_roles
from catalog_api.core.rbac import MANAGED_RESOURCES, PERMISSION_ACTIONS, Principal, Role
from catalog_api.schemas.base import SuccessResponse
from catalog_api.schemas.permission import (
    BulkPermissionAssignRequest,
    BulkPermissionAssignResponse,
    PermissionAssignRequest,
    PermissionCatalog,
    PermissionGrantResponse,
)
from catalog_api.schemas.user_management import AccountDetail, StaffCreateRequest, StaffUpdateRequest
from catalog_api.services.permission import permission_service
from catalog_api.services.user_management import user_management_service

logger = structlog.get_logger()
router = APIRouter()

require_owner = require_roles(Role.OWNER)


@router.get("/permissions/catalog", response_model=PermissionCatalog)
async def get_permission_catalog(principal: Principal = Depends(require_owner)) -> Any:
    """Resource and action tags that can be granted to staff."""
    return PermissionCatalog(resources=list(MANAGED_RESOURCES), actions=list(PERMISSION_ACTIONS))


@router.post("/staff", response_model=AccountDetail, status_code=status.HTTP_201_CREATED)
async def create_staff(
    staff_data: StaffCreateRequest,
    principal: Principal = Depends(require_owner),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Create a staff account bound to the calling owner. It starts with no grants."""
    return await user_management_service.create_staff(db, principal, staff_data)


@router.get("/staff", response_model=list[AccountDetail])
async def list_staff(
    principal: Principal = Depends(require_owner),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await user_management_service.list_staff(db, principal)


@router.patch("/staff/{staff_id}", response_model=AccountDetail)
async def update_staff(
    staff_id: int,
    staff_data: StaffUpdateRequest,
    principal: Principal = Depends(require_owner),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await user_management_service.update_staff(db, principal, staff_id, staff_data)


@router.delete("/staff/{staff_id}", response_model=SuccessResponse)
async def delete_staff(
    staff_id: int,
    principal: Principal = Depends(require_owner),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Delete a staff account and every grant it held."""
    await user_management_service.delete_staff(db, principal, staff_id)
    return SuccessResponse(message="Staff member deleted successfully", data={"staff_id": staff_id})


@router.post("/staff/{staff_id}/permissions", response_model=PermissionGrantResponse)
async def grant_permission(
    staff_id: int,
    permission_data: PermissionAssignRequest,
    principal: Principal = Depends(require_owner),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Create or overwrite a single (resource, action) grant."""
    return await permission_service.grant(db, principal, staff_id, permission_data)


@router.post("/staff/{staff_id}/permissions/bulk", response_model=BulkPermissionAssignResponse)
async def bulk_grant_permissions(
    staff_id: int,
    bulk_data: BulkPermissionAssignRequest,
    principal: Principal = Depends(require_owner),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Apply a batch of grants atomically: all entries take effect or none do."""
    grants = await permission_service.bulk_grant(db, principal, staff_id, bulk_data.permissions)
    return BulkPermissionAssignResponse(
        success=True,
        applied=len(grants),
        message=f"{len(grants)} permissions applied",
        permissions=[PermissionGrantResponse.model_validate(grant) for grant in grants],
    )


@router.delete("/staff/{staff_id}/permissions", response_model=SuccessResponse)
async def revoke_permission(
    staff_id: int,
    resource: str = Query(..., min_length=1),
    action: str = Query(..., min_length=1),
    principal: Principal = Depends(require_owner),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Remove a grant. Revoking a grant that does not exist still succeeds."""
    removed = await permission_service.revoke(db, principal, staff_id, resource, action)
    return SuccessResponse(
        message="Permission revoked" if removed else "Permission was not granted",
        data={"staff_id": staff_id, "resource": resource, "action": action, "removed": removed},
    )


@router.get("/staff/{staff_id}/permissions", response_model=list[PermissionGrantResponse])
async def list_staff_permissions(
    staff_id: int,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Grants of a staff member. Readable by the staff member, their owner, or an admin."""
    return await permission_service.list_for_staff(db, principal, staff_id)
