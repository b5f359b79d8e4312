"""
Catalog Service
Tenant-scoped CRUD for catalog collaborators. Every query is filtered by the
request's effective tenant id, never by the caller's own id.
"""

from __future__ import annotations

from typing import Any, Optional

import structlog
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_api.core.exceptions import BadRequest, NotFound
from catalog_api.core.rbac import Principal, Role
from catalog_api.repositories.catalog import (
    TenantScopedRepository,
    asset_repository,
    category_repository,
    product_repository,
)
from catalog_api.repositories.user import user_repository

logger = structlog.get_logger()


class TenantCatalogService:
    def __init__(self, repository: TenantScopedRepository, resource: str):
        self.repository = repository
        self.resource = resource

    async def _target_tenant(self, db: AsyncSession, principal: Principal, requested: Optional[int]) -> int:
        if not principal.is_admin:
            return principal.effective_user_id

        if requested is None:
            raise BadRequest("user_id is required when creating as an administrator")
        owner = await user_repository.get_with_role(db, requested, Role.OWNER)
        if owner is None:
            raise BadRequest("user_id must reference an owner account")
        return owner.id

    async def _validate_payload(
        self, db: AsyncSession, tenant_id: int, payload: dict, record_id: Optional[int] = None
    ) -> None:
        return None

    async def list_records(
        self,
        db: AsyncSession,
        principal: Principal,
        *,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[Any], int]:
        return await self.repository.list_for_tenant(
            db, principal.effective_user_id, search=search, skip=skip, limit=limit
        )

    async def get(self, db: AsyncSession, principal: Principal, record_id: int):
        record = await self.repository.get_for_tenant(db, record_id, principal.effective_user_id)
        if record is None:
            raise NotFound()
        return record

    async def create(self, db: AsyncSession, principal: Principal, data: BaseModel):
        payload = data.model_dump(exclude_none=True)
        payload["user_id"] = await self._target_tenant(db, principal, payload.pop("user_id", None))
        await self._validate_payload(db, payload["user_id"], payload)

        record = await self.repository.create(db, obj_in=payload)
        logger.info(
            "Catalog record created",
            resource=self.resource,
            record_id=record.id,
            tenant_id=record.user_id,
            created_by=principal.id,
        )
        return record

    async def update(self, db: AsyncSession, principal: Principal, record_id: int, data: BaseModel):
        record = await self.get(db, principal, record_id)
        payload = data.model_dump(exclude_unset=True)
        await self._validate_payload(db, record.user_id, payload, record_id=record.id)
        return await self.repository.update(db, db_obj=record, obj_in=payload)

    async def delete(self, db: AsyncSession, principal: Principal, record_id: int) -> None:
        record = await self.get(db, principal, record_id)
        await self.repository.delete(db, db_obj=record)
        logger.info("Catalog record deleted", resource=self.resource, record_id=record_id, deleted_by=principal.id)


class CategoryService(TenantCatalogService):
    async def _validate_payload(
        self, db: AsyncSession, tenant_id: int, payload: dict, record_id: Optional[int] = None
    ) -> None:
        parent_id = payload.get("parent_category_id")
        if parent_id is None:
            return
        # a parent from another tenant is reported like a missing one
        parent = await self.repository.get_for_tenant(db, parent_id, tenant_id)
        if parent is None:
            raise BadRequest("Parent category not found")
        if record_id is None:
            return

        # walk up from the new parent; meeting the record itself means a cycle
        seen = set()
        while parent is not None and parent.id not in seen:
            if parent.id == record_id:
                raise BadRequest("A category cannot be its own ancestor")
            seen.add(parent.id)
            if parent.parent_category_id is None:
                break
            parent = await self.repository.get_for_tenant(db, parent.parent_category_id, tenant_id)


product_service = TenantCatalogService(product_repository, "products")
category_service = CategoryService(category_repository, "categories")
asset_service = TenantCatalogService(asset_repository, "assets")
