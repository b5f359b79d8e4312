"""
Permission Administration Service
Owners grant, revoke and inspect their staff's (resource, action) grants.
"""

from __future__ import annotations

from typing import Sequence

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_api.core.exceptions import Forbidden, NotFound
from catalog_api.core.rbac import Principal, Role, normalize_permission
from catalog_api.models.permission import PermissionGrant
from catalog_api.repositories.permission import permission_repository
from catalog_api.repositories.user import user_repository
from catalog_api.schemas.permission import PermissionAssignRequest
from catalog_api.services.user_management import user_management_service

logger = structlog.get_logger()


class PermissionService:
    async def grant(
        self,
        db: AsyncSession,
        principal: Principal,
        staff_id: int,
        data: PermissionAssignRequest,
    ) -> PermissionGrant:
        """Create or overwrite one grant. Repeating the call leaves a single record."""
        staff = await user_management_service.get_staff_for_owner(db, principal, staff_id)
        requirement = normalize_permission(data.resource, data.action)

        grant = await permission_repository.upsert(
            db,
            user_id=staff.id,
            resource=requirement.resource,
            action=requirement.action,
            granted=data.granted,
        )
        await db.commit()

        logger.info(
            "Permission granted",
            owner_id=principal.id,
            staff_id=staff.id,
            permission=str(requirement),
            granted=data.granted,
        )
        return grant

    async def bulk_grant(
        self,
        db: AsyncSession,
        principal: Principal,
        staff_id: int,
        entries: Sequence[PermissionAssignRequest],
    ) -> list[PermissionGrant]:
        """
        Apply every entry or none of them.

        Authority over the target is checked first. The whole batch is then
        validated before the first write, and all upserts share one
        transaction that is rolled back if any of them fails.
        """
        staff = await user_management_service.get_staff_for_owner(db, principal, staff_id)
        requirements = [(normalize_permission(entry.resource, entry.action), entry.granted) for entry in entries]

        grants = []
        try:
            for requirement, granted in requirements:
                grants.append(
                    await permission_repository.upsert(
                        db,
                        user_id=staff.id,
                        resource=requirement.resource,
                        action=requirement.action,
                        granted=granted,
                    )
                )
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error(
                "Bulk permission grant rolled back",
                owner_id=principal.id,
                staff_id=staff_id,
                applied_before_failure=len(grants),
                error=str(e),
            )
            raise

        logger.info("Permissions bulk granted", owner_id=principal.id, staff_id=staff_id, count=len(grants))
        return grants

    async def revoke(
        self,
        db: AsyncSession,
        principal: Principal,
        staff_id: int,
        resource: str,
        action: str,
    ) -> bool:
        """Delete one grant. Returns whether a record existed; absence is not an error."""
        staff = await user_management_service.get_staff_for_owner(db, principal, staff_id)
        requirement = normalize_permission(resource, action)

        removed = await permission_repository.delete_grant(
            db,
            user_id=staff.id,
            resource=requirement.resource,
            action=requirement.action,
        )
        await db.commit()

        logger.info(
            "Permission revoked",
            owner_id=principal.id,
            staff_id=staff.id,
            permission=str(requirement),
            existed=removed > 0,
        )
        return removed > 0

    async def list_for_staff(self, db: AsyncSession, principal: Principal, staff_id: int) -> list[PermissionGrant]:
        """
        Grants of one staff member, readable by that staff member, their
        owner, or any admin.
        """
        if principal.role == Role.STAFF:
            if principal.id != staff_id:
                logger.warning("Staff attempted to read another user's grants", user_id=principal.id, staff_id=staff_id)
                raise Forbidden()
            return await permission_repository.list_for_user(db, staff_id)

        if principal.role == Role.OWNER:
            staff = await user_management_service.get_staff_for_owner(db, principal, staff_id)
            return await permission_repository.list_for_user(db, staff.id)

        staff = await user_repository.get_with_role(db, staff_id, Role.STAFF)
        if staff is None:
            raise NotFound("Staff member not found")
        return await permission_repository.list_for_user(db, staff.id)


permission_service = PermissionService()
