"""
FastAPI Dependencies
Wire the guard pipeline into routes
"""

from typing import Optional

from fastapi import Depends, Request, Security
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from catalog_api.core.database import get_db
from catalog_api.core.exceptions import Forbidden
from catalog_api.core.guards import RequestContext, guard_pipeline, resolve_identity
from catalog_api.core.rbac import (
    MANAGED_RESOURCES,
    PERMISSION_ACTIONS,
    PermissionRequirement,
    Principal,
    Role,
    build_principal,
)

logger = structlog.get_logger()

# Security schemes
security = HTTPBearer(auto_error=False)
api_key_security = APIKeyHeader(name="X-API-Key", auto_error=False)


async def get_principal(
    db: AsyncSession = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    api_key: Optional[str] = Security(api_key_security),
) -> Principal:
    """
    Authenticate the caller and resolve their effective scope

    Used by routes that need identity but declare no resource requirement.
    """
    user = await resolve_identity(
        db,
        bearer_token=credentials.credentials if credentials else None,
        api_key=api_key,
    )
    return build_principal(user)


def require_roles(*roles: Role):
    """
    Dependency factory for role-gated administration routes

    Args:
        roles: Roles allowed to call the route

    Returns:
        Dependency function
    """
    async def role_checker(principal: Principal = Depends(get_principal)) -> Principal:
        if principal.role not in roles:
            logger.warning(
                "User lacks required role",
                user_id=principal.id,
                role=principal.role.value,
                required_roles=[role.value for role in roles],
            )
            raise Forbidden()
        return principal

    return role_checker


def require_access(
    resource: Optional[str] = None,
    action: Optional[str] = None,
    *,
    id_param: Optional[str] = None,
    resource_type: Optional[str] = None,
):
    """
    Dependency factory running the full guard pipeline for a route

    Args:
        resource: Permission resource tag the route requires
        action: Permission action tag the route requires
        id_param: Path parameter carrying the targeted record id, if any
        resource_type: Owner lookup key for id_param, defaults to resource

    Returns:
        Dependency resolving to the request's access context
    """
    requirement = None
    if resource is not None or action is not None:
        if resource not in MANAGED_RESOURCES or action not in PERMISSION_ACTIONS:
            raise ValueError(f"Unknown permission requirement {resource}:{action}")
        requirement = PermissionRequirement(resource=resource, action=action)

    target_type = resource_type or resource
    if id_param is not None and target_type is None:
        raise ValueError("id_param requires a resource_type")

    async def access_guard(
        request: Request,
        db: AsyncSession = Depends(get_db),
        credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
        api_key: Optional[str] = Security(api_key_security),
    ) -> RequestContext:
        resource_id = request.path_params.get(id_param) if id_param is not None else None

        ctx = RequestContext(
            bearer_token=credentials.credentials if credentials else None,
            api_key=api_key,
            resource_type=target_type if resource_id is not None else None,
            resource_id=resource_id,
            requirement=requirement,
        )
        return await guard_pipeline.run(db, ctx)

    return access_guard
