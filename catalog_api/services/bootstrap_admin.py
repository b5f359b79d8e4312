"""
Bootstrap admin creation service.
"""

from __future__ import annotations

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_api.core.config import settings
from catalog_api.core.rbac import Role
from catalog_api.core.security import get_password_hash
from catalog_api.models.user import User
from catalog_api.repositories.user import user_repository

logger = structlog.get_logger()


async def ensure_bootstrap_admin_exists(db: AsyncSession) -> None:
    if await user_repository.admin_exists(db):
        logger.info("Admin account already present, skipping bootstrap")
        return

    admin_email = settings.BOOTSTRAP_ADMIN_EMAIL.lower().strip()
    existing = await user_repository.get_by_email(db, admin_email)
    if existing:
        logger.error(
            "Bootstrap admin email is taken by a non-admin account",
            email=admin_email,
            user_id=existing.id,
            role=existing.role,
        )
        return

    bootstrap_user = User(
        email=admin_email,
        full_name=settings.BOOTSTRAP_ADMIN_FULL_NAME,
        hashed_password=get_password_hash(settings.BOOTSTRAP_ADMIN_PASSWORD),
        role=Role.ADMIN,
        owner_id=None,
        is_active=True,
    )

    db.add(bootstrap_user)
    await db.commit()
    await db.refresh(bootstrap_user)

    logger.info("Bootstrap admin created", email=admin_email, user_id=bootstrap_user.id)
