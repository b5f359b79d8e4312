"""
RBAC helpers and canonical permission definitions for the catalog API.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import structlog

from catalog_api.core.exceptions import BadRequest, InvalidRole

logger = structlog.get_logger()


class Role(str, Enum):
    ADMIN = "ADMIN"
    OWNER = "OWNER"
    STAFF = "STAFF"


MANAGED_RESOURCES: tuple[str, ...] = (
    "products",
    "attributes",
    "attribute-groups",
    "families",
    "categories",
    "assets",
    "asset-groups",
    "integrations",
    "notifications",
    "api-keys",
)

PERMISSION_ACTIONS: tuple[str, ...] = (
    "create",
    "read",
    "update",
    "delete",
    "manage",
    "export",
    "import",
)


@dataclass(frozen=True)
class PermissionRequirement:
    resource: str
    action: str

    def __str__(self) -> str:
        return f"{self.resource}:{self.action}"


@dataclass(frozen=True)
class Principal:
    """Authenticated caller, rebuilt on every request."""

    id: int
    role: Role
    owner_id: Optional[int]
    effective_user_id: Optional[int]

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def _normalize_tag(tag: str) -> str:
    return tag.strip().lower()


def normalize_permission(resource: str, action: str) -> PermissionRequirement:
    """
    Validate a (resource, action) pair against the registry.

    Unknown tags would create grants no route ever checks, so they are
    rejected instead of stored.
    """
    normalized_resource = _normalize_tag(resource or "")
    normalized_action = _normalize_tag(action or "")

    if normalized_resource not in MANAGED_RESOURCES:
        raise BadRequest(f"Unknown permission resource: {resource!r}")
    if normalized_action not in PERMISSION_ACTIONS:
        raise BadRequest(f"Unknown permission action: {action!r}")

    return PermissionRequirement(resource=normalized_resource, action=normalized_action)


def coerce_role(value: object) -> Role:
    try:
        return value if isinstance(value, Role) else Role(str(value))
    except ValueError:
        logger.critical("Stored user has an invalid role", role=value)
        raise InvalidRole(value)


def resolve_scope(role: object, user_id: int, owner_id: Optional[int]) -> Optional[int]:
    """
    Compute the tenant id every data query of the request is filtered by.

    - ADMIN: None (unrestricted)
    - OWNER: own id
    - STAFF: owner's id, never the staff member's own id
    """
    resolved = coerce_role(role)

    if resolved == Role.ADMIN:
        return None
    if resolved == Role.OWNER:
        return user_id
    if resolved == Role.STAFF:
        if owner_id is None or owner_id == user_id:
            logger.critical("Staff user without a valid owner", user_id=user_id, owner_id=owner_id)
            raise InvalidRole(resolved)
        return owner_id

    logger.critical("Unhandled role in scope resolution", role=resolved)
    raise InvalidRole(resolved)


def build_principal(user) -> Principal:
    """Build the request principal from a freshly loaded user row."""
    role = coerce_role(user.role)
    return Principal(
        id=user.id,
        role=role,
        owner_id=user.owner_id,
        effective_user_id=resolve_scope(role, user.id, user.owner_id),
    )
