"""
Permission engine.

ADMIN and OWNER hold implicit authority over their scope. STAFF is
default-deny: only an explicit grant with granted=True allows an action.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_api.core.exceptions import InvalidRole
from catalog_api.core.rbac import Principal, Role
from catalog_api.repositories.permission import permission_repository

logger = structlog.get_logger()


class PermissionResolver(ABC):
    @abstractmethod
    async def check_permission(
        self, db: AsyncSession, principal: Principal, resource: str, action: str
    ) -> bool:
        raise NotImplementedError


class DBPermissionResolver(PermissionResolver):
    async def check_permission(
        self, db: AsyncSession, principal: Principal, resource: str, action: str
    ) -> bool:
        if principal.role in (Role.ADMIN, Role.OWNER):
            return True

        if principal.role == Role.STAFF:
            grant = await permission_repository.get_grant(db, principal.id, resource, action)
            allowed = grant is not None and bool(grant.granted)
            logger.debug(
                "Staff permission evaluated",
                user_id=principal.id,
                resource=resource,
                action=action,
                allowed=allowed,
            )
            return allowed

        logger.critical("Permission check for unknown role", user_id=principal.id, role=principal.role)
        raise InvalidRole(principal.role)


permission_resolver = DBPermissionResolver()
