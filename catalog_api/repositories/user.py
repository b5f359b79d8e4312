"""
User Repository
Database operations for the ADMIN / OWNER / STAFF hierarchy.
"""

from __future__ import annotations

from typing import Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_api.core.rbac import Role
from catalog_api.models.user import User
from catalog_api.repositories.base import CRUDBase

logger = structlog.get_logger()


class UserRepository(CRUDBase[User, None, None]):
    async def get_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email.lower().strip()))
        return result.scalar_one_or_none()

    async def get_active(self, db: AsyncSession, user_id: int) -> Optional[User]:
        # populate_existing: roles and ownership must reflect the stored row, not a stale identity map
        result = await db.execute(
            select(User)
            .where(User.id == user_id, User.is_active == True)  # noqa: E712
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_by_api_key(self, db: AsyncSession, api_key: str) -> Optional[User]:
        result = await db.execute(
            select(User)
            .where(User.api_key == api_key, User.is_active == True)  # noqa: E712
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_with_role(self, db: AsyncSession, user_id: int, role: Role) -> Optional[User]:
        result = await db.execute(select(User).where(User.id == user_id, User.role == role))
        return result.scalar_one_or_none()

    async def list_by_role(self, db: AsyncSession, role: Role) -> list[User]:
        result = await db.execute(
            select(User).where(User.role == role).order_by(User.created_at.desc(), User.id.desc())
        )
        return list(result.scalars().all())

    async def list_staff(self, db: AsyncSession, owner_id: int) -> list[User]:
        result = await db.execute(
            select(User)
            .where(User.owner_id == owner_id, User.role == Role.STAFF)
            .order_by(User.id.asc())
        )
        return list(result.scalars().all())

    async def count_staff(self, db: AsyncSession, owner_id: int) -> int:
        query = select(func.count(User.id)).where(User.owner_id == owner_id, User.role == Role.STAFF)
        return (await db.execute(query)).scalar() or 0

    async def admin_exists(self, db: AsyncSession) -> bool:
        query = select(func.count(User.id)).where(User.role == Role.ADMIN)
        return ((await db.execute(query)).scalar() or 0) > 0


user_repository = UserRepository(User)
