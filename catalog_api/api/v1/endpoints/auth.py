"""
Authentication Endpoints
Login and caller profile
"""

from datetime import timedelta
from typing import Any
import asyncio

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from catalog_api.core.config import settings
from catalog_api.core.database import get_db
from catalog_api.core.deps import require_access
from catalog_api.core.exceptions import Unauthenticated
from catalog_api.core.guards import RequestContext
from catalog_api.core.rbac import build_principal
from catalog_api.core.security import create_access_token, verify_password
from catalog_api.models.user import User
from catalog_api.repositories.user import user_repository
from catalog_api.schemas.auth import LoginRequest, LoginResponse, PrincipalProfile, TokenResponse

logger = structlog.get_logger()
router = APIRouter()


def _profile(user: User, effective_user_id) -> PrincipalProfile:
    return PrincipalProfile(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        role=user.role,
        owner_id=user.owner_id,
        effective_user_id=effective_user_id,
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    login_data: LoginRequest,
    db: AsyncSession = Depends(get_db)
) -> Any:
    """
    User login endpoint

    Args:
        login_data: Login credentials
        db: Database session

    Returns:
        Login response with the caller's profile, scope and access token

    Raises:
        Unauthenticated: Unknown email, wrong password or inactive account
    """
    user = await user_repository.get_by_email(db, login_data.email)

    if not user:
        logger.warning("Login attempt with non-existent email", email=login_data.email)
        raise Unauthenticated("Invalid email or password")

    # Verify password (run in executor to avoid blocking event loop)
    password_valid = await asyncio.to_thread(
        verify_password, login_data.password, user.hashed_password
    )

    if not password_valid:
        logger.warning("Login attempt with invalid password", email=login_data.email, user_id=user.id)
        raise Unauthenticated("Invalid email or password")

    if not user.is_active:
        logger.warning("Login attempt by inactive user", email=login_data.email, user_id=user.id)
        raise Unauthenticated("Account is inactive")

    principal = build_principal(user)

    access_token_expires = timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_access_token(subject=str(user.id), expires_delta=access_token_expires)

    tokens = TokenResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=int(access_token_expires.total_seconds())
    )

    logger.info("User logged in successfully", user_id=user.id, role=principal.role.value)

    return LoginResponse(
        user=_profile(user, principal.effective_user_id),
        tokens=tokens,
        message="Login successful"
    )


@router.get("/me", response_model=PrincipalProfile)
async def get_me(ctx: RequestContext = Depends(require_access())) -> Any:
    """Return the authenticated caller together with the tenant scope their requests run under."""
    return _profile(ctx.user, ctx.effective_user_id)
