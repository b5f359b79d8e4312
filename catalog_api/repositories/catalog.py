"""
Catalog Repositories
Tenant-scoped data access for catalog collaborators.
"""

from __future__ import annotations

from typing import Any, Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_api.core.ownership import register_owner_lookup
from catalog_api.models.catalog import Asset, Category, Product
from catalog_api.repositories.base import CRUDBase

logger = structlog.get_logger()


class TenantScopedRepository(CRUDBase):
    """
    CRUD access where every read is filtered by the owning tenant.

    A tenant_id of None means unrestricted (ADMIN callers only).
    """

    def _scoped(self, query, tenant_id: Optional[int]):
        if tenant_id is not None:
            query = query.where(self.model.user_id == tenant_id)
        return query

    async def get_owner_id(self, db: AsyncSession, record_id: int) -> Optional[int]:
        """Narrow read used by the ownership validator."""
        result = await db.execute(select(self.model.user_id).where(self.model.id == record_id))
        return result.scalar_one_or_none()

    async def get_for_tenant(self, db: AsyncSession, record_id: int, tenant_id: Optional[int]):
        query = self._scoped(select(self.model).where(self.model.id == record_id), tenant_id)
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def list_for_tenant(
        self,
        db: AsyncSession,
        tenant_id: Optional[int],
        *,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[Any], int]:
        query = self._scoped(select(self.model), tenant_id)
        if search:
            query = query.where(self.model.name.ilike(f"%{search.strip()}%"))

        count_query = select(func.count()).select_from(query.subquery())
        total = (await db.execute(count_query)).scalar() or 0

        query = query.order_by(self.model.id.desc()).offset(skip).limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all()), total


product_repository = TenantScopedRepository(Product)
category_repository = TenantScopedRepository(Category)
asset_repository = TenantScopedRepository(Asset)

register_owner_lookup("products", product_repository.get_owner_id)
register_owner_lookup("categories", category_repository.get_owner_id)
register_owner_lookup("assets", asset_repository.get_owner_id)
