"""
Ownership validation for routes that address a single tenant-owned record.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_api.core.exceptions import NotFound
from catalog_api.core.rbac import Principal

logger = structlog.get_logger()

OwnerLookup = Callable[[AsyncSession, int], Awaitable[Optional[int]]]

_owner_lookups: dict[str, OwnerLookup] = {}


def register_owner_lookup(resource_type: str, lookup: OwnerLookup) -> None:
    """Register the collaborator read that answers 'which tenant owns record X'."""
    _owner_lookups[resource_type] = lookup


def get_owner_lookup(resource_type: str) -> OwnerLookup:
    try:
        return _owner_lookups[resource_type]
    except KeyError:
        raise LookupError(f"No owner lookup registered for resource type {resource_type!r}")


async def validate_ownership(
    db: AsyncSession,
    principal: Principal,
    resource_type: str,
    resource_id: int,
) -> None:
    """
    Allow iff the record's owning tenant equals the principal's effective scope.

    ADMIN is exempt. A missing record and a record of another tenant raise
    the same NotFound.
    """
    if principal.is_admin:
        return

    lookup = get_owner_lookup(resource_type)
    owner_id = await lookup(db, resource_id)

    if owner_id is None or owner_id != principal.effective_user_id:
        logger.warning(
            "Ownership check failed",
            user_id=principal.id,
            resource_type=resource_type,
            resource_id=resource_id,
            found=owner_id is not None,
        )
        raise NotFound()
