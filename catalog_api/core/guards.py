"""
Access-control guard pipeline.

Every tenant-scoped request passes through the same ordered stages before
its handler runs:

1. authenticate     credential -> stored user          (Unauthenticated)
2. resolve scope    user -> Principal + effective id   (InvalidRole, unreachable)
3. ownership        route record belongs to the scope  (NotFound)
4. permission       declared (resource, action) held   (Forbidden)

The first failing stage ends the request. The whole chain runs under a
deadline and fails closed when it is exceeded.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Sequence, Union

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_api.core.config import settings
from catalog_api.core.exceptions import Forbidden, NotFound, Unauthenticated
from catalog_api.core.ownership import validate_ownership
from catalog_api.core.permission_resolver import permission_resolver
from catalog_api.core.rbac import PermissionRequirement, Principal, build_principal
from catalog_api.core.security import verify_token
from catalog_api.models.user import User
from catalog_api.repositories.user import user_repository

logger = structlog.get_logger()


@dataclass
class RequestContext:
    """Evolving per-request access state. Never shared between requests."""

    bearer_token: Optional[str] = None
    api_key: Optional[str] = None
    resource_type: Optional[str] = None
    resource_id: Optional[Union[int, str]] = None
    requirement: Optional[PermissionRequirement] = None
    user: Optional[User] = None
    principal: Optional[Principal] = None

    @property
    def effective_user_id(self) -> Optional[int]:
        if self.principal is None:
            raise RuntimeError("Access context used before scope resolution")
        return self.principal.effective_user_id


Stage = Callable[[AsyncSession, RequestContext], Awaitable[None]]


async def resolve_identity(
    db: AsyncSession,
    bearer_token: Optional[str] = None,
    api_key: Optional[str] = None,
) -> User:
    """
    Resolve a credential to an existing, active user read fresh from storage.

    Raises:
        Unauthenticated: missing, malformed, expired or dangling credential
    """
    if not bearer_token and not api_key:
        logger.warning("Missing authentication credentials")
        raise Unauthenticated()

    try:
        if bearer_token:
            subject = verify_token(bearer_token, token_type="access")
            try:
                user_id = int(subject)
            except (TypeError, ValueError):
                logger.warning("Token subject is not a user id", subject=subject)
                raise Unauthenticated()
            user = await user_repository.get_active(db, user_id)
        else:
            user = await user_repository.get_by_api_key(db, api_key)
    except SQLAlchemyError as e:
        logger.error("Database error during authentication", error=str(e))
        raise Unauthenticated()

    if user is None:
        logger.warning("Credential does not resolve to an active user")
        raise Unauthenticated()

    return user


async def authenticate(db: AsyncSession, ctx: RequestContext) -> None:
    ctx.user = await resolve_identity(db, ctx.bearer_token, ctx.api_key)


async def resolve_scope_stage(db: AsyncSession, ctx: RequestContext) -> None:
    ctx.principal = build_principal(ctx.user)
    logger.debug(
        "Request scope resolved",
        user_id=ctx.principal.id,
        role=ctx.principal.role.value,
        effective_user_id=ctx.principal.effective_user_id,
    )


async def check_ownership(db: AsyncSession, ctx: RequestContext) -> None:
    if ctx.resource_id is None or ctx.resource_type is None:
        return

    try:
        resource_id = int(ctx.resource_id)
    except (TypeError, ValueError):
        raise NotFound()

    await validate_ownership(db, ctx.principal, ctx.resource_type, resource_id)


async def check_permission(db: AsyncSession, ctx: RequestContext) -> None:
    if ctx.requirement is None:
        return

    allowed = await permission_resolver.check_permission(
        db, ctx.principal, ctx.requirement.resource, ctx.requirement.action
    )
    if not allowed:
        logger.warning("Permission denied", user_id=ctx.principal.id, required=str(ctx.requirement))
        raise Forbidden()


DEFAULT_STAGES: tuple[Stage, ...] = (
    authenticate,
    resolve_scope_stage,
    check_ownership,
    check_permission,
)


class GuardPipeline:
    def __init__(self, stages: Sequence[Stage] = DEFAULT_STAGES, timeout: Optional[float] = None) -> None:
        self.stages = tuple(stages)
        self.timeout = timeout

    async def _run_stages(self, db: AsyncSession, ctx: RequestContext) -> None:
        for stage in self.stages:
            await stage(db, ctx)

    async def run(self, db: AsyncSession, ctx: RequestContext) -> RequestContext:
        timeout = self.timeout if self.timeout is not None else settings.GUARD_TIMEOUT_SECONDS
        try:
            await asyncio.wait_for(self._run_stages(db, ctx), timeout=timeout)
        except asyncio.TimeoutError:
            logger.error("Access-control pipeline timed out", timeout=timeout, resolved=ctx.principal is not None)
            if ctx.principal is None:
                raise Unauthenticated()
            raise Forbidden()
        return ctx


guard_pipeline = GuardPipeline()
