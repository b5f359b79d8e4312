"""
Permission Repository
Storage for per-staff (resource, action) grants.
"""

from __future__ import annotations

from typing import Optional

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_api.models.permission import PermissionGrant
from catalog_api.repositories.base import CRUDBase

logger = structlog.get_logger()

_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class PermissionRepository(CRUDBase[PermissionGrant, None, None]):
    async def get_grant(
        self, db: AsyncSession, user_id: int, resource: str, action: str
    ) -> Optional[PermissionGrant]:
        result = await db.execute(
            select(PermissionGrant)
            .where(
                PermissionGrant.user_id == user_id,
                PermissionGrant.resource == resource,
                PermissionGrant.action == action,
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_for_user(self, db: AsyncSession, user_id: int) -> list[PermissionGrant]:
        result = await db.execute(
            select(PermissionGrant)
            .where(PermissionGrant.user_id == user_id)
            .order_by(PermissionGrant.resource.asc(), PermissionGrant.action.asc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def upsert(
        self, db: AsyncSession, *, user_id: int, resource: str, action: str, granted: bool
    ) -> PermissionGrant:
        """
        Insert or overwrite the grant for (user_id, resource, action).

        Uses the dialect's ON CONFLICT upsert so concurrent writers to the
        same triple serialize on the unique constraint. Does not commit.
        """
        insert = _UPSERT_INSERTS.get(db.get_bind().dialect.name)

        if insert is None:
            grant = await self.get_grant(db, user_id, resource, action)
            if grant is None:
                grant = PermissionGrant(user_id=user_id, resource=resource, action=action, granted=granted)
                db.add(grant)
            else:
                grant.granted = granted
            await db.flush()
            return grant

        stmt = insert(PermissionGrant).values(
            user_id=user_id,
            resource=resource,
            action=action,
            granted=granted,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[PermissionGrant.user_id, PermissionGrant.resource, PermissionGrant.action],
            set_={"granted": granted, "updated_at": func.now()},
        )
        await db.execute(stmt)

        grant = await self.get_grant(db, user_id, resource, action)
        logger.debug(
            "Permission grant upserted",
            user_id=user_id,
            resource=resource,
            action=action,
            granted=granted,
        )
        return grant

    async def delete_grant(self, db: AsyncSession, *, user_id: int, resource: str, action: str) -> int:
        """Delete the grant if present. Returns the number of rows removed. Does not commit."""
        result = await db.execute(
            delete(PermissionGrant).where(
                PermissionGrant.user_id == user_id,
                PermissionGrant.resource == resource,
                PermissionGrant.action == action,
            )
        )
        return result.rowcount or 0


permission_repository = PermissionRepository(PermissionGrant)
