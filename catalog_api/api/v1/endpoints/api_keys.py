"""
API Key Endpoints
Machine credential accepted in the X-API-Key header
"""

from typing import Any

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from catalog_api.core.database import get_db
from catalog_api.core.deps import require_access
from catalog_api.core.guards import RequestContext
from catalog_api.core.security import API_KEY_PREFIX, generate_api_key
from catalog_api.schemas.auth import APIKeyResponse, APIKeyStatus

logger = structlog.get_logger()
router = APIRouter()


@router.get("/", response_model=APIKeyStatus)
async def get_api_key_status(
    ctx: RequestContext = Depends(require_access("api-keys", "read")),
) -> Any:
    """Report whether the caller has a key, without revealing it."""
    api_key = ctx.user.api_key
    return APIKeyStatus(
        has_api_key=api_key is not None,
        prefix=api_key[: len(API_KEY_PREFIX) + 4] if api_key else None,
    )


@router.post("/", response_model=APIKeyResponse, status_code=status.HTTP_201_CREATED)
async def generate_key(
    ctx: RequestContext = Depends(require_access("api-keys", "create")),
    db: AsyncSession = Depends(get_db)
) -> Any:
    """
    Generate a new API key for the caller, replacing any previous one.

    The key authenticates as the caller, so a staff key carries exactly the
    staff member's grants.
    """
    user = ctx.user
    user.api_key = generate_api_key()
    await db.commit()

    logger.info("API key generated", user_id=user.id)
    return APIKeyResponse(api_key=user.api_key, message="API key generated. Store it now, it will not be shown again")
