"""
Account Administration Service
ADMIN provisions OWNER accounts; each OWNER provisions its own STAFF.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_api.core.exceptions import ConflictOnCreate, Forbidden, NotFound
from catalog_api.core.rbac import Principal, Role
from catalog_api.core.security import get_password_hash
from catalog_api.models.user import User
from catalog_api.repositories.catalog import asset_repository, category_repository, product_repository
from catalog_api.repositories.user import user_repository
from catalog_api.schemas.user_management import (
    AccountCreateRequest,
    AccountDetail,
    AccountUpdateRequest,
    OwnerDetail,
    OwnerSummary,
)

logger = structlog.get_logger()


class UserManagementService:
    def _to_account_detail(self, user: User) -> AccountDetail:
        return AccountDetail.model_validate(user)

    async def _ensure_email_available(
        self, db: AsyncSession, email: str, exclude_id: Optional[int] = None
    ) -> None:
        existing = await user_repository.get_by_email(db, email)
        if existing is not None and existing.id != exclude_id:
            logger.warning("Email already registered", email=email, existing_user_id=existing.id)
            raise ConflictOnCreate()

    async def _create_account(
        self,
        db: AsyncSession,
        data: AccountCreateRequest,
        *,
        role: Role,
        owner_id: Optional[int] = None,
    ) -> User:
        await self._ensure_email_available(db, data.email)

        hashed_password = await asyncio.to_thread(get_password_hash, data.password)
        return await user_repository.create(
            db,
            obj_in={
                "email": data.email,
                "full_name": data.full_name,
                "hashed_password": hashed_password,
                "role": role,
                "owner_id": owner_id,
                "is_active": True,
            },
        )

    async def _apply_update(self, db: AsyncSession, user: User, data: AccountUpdateRequest) -> User:
        update_data = data.model_dump(exclude_unset=True, exclude_none=True)

        if "email" in update_data and update_data["email"] != user.email:
            await self._ensure_email_available(db, update_data["email"], exclude_id=user.id)

        password = update_data.pop("password", None)
        if password is not None:
            update_data["hashed_password"] = await asyncio.to_thread(get_password_hash, password)

        if not update_data:
            return user
        return await user_repository.update(db, db_obj=user, obj_in=update_data)

    async def _get_owner(self, db: AsyncSession, owner_id: int) -> User:
        owner = await user_repository.get_with_role(db, owner_id, Role.OWNER)
        if owner is None:
            raise NotFound("Owner not found")
        return owner

    async def _owner_summary(self, db: AsyncSession, owner: User) -> dict:
        filters = {"user_id": owner.id}
        return {
            **AccountDetail.model_validate(owner).model_dump(),
            "staff_count": await user_repository.count_staff(db, owner.id),
            "product_count": await product_repository.count(db, filters=filters),
            "asset_count": await asset_repository.count(db, filters=filters),
        }

    # Owners (ADMIN only)

    async def create_owner(self, db: AsyncSession, data: AccountCreateRequest) -> AccountDetail:
        owner = await self._create_account(db, data, role=Role.OWNER)
        logger.info("Owner created by admin", owner_id=owner.id, email=owner.email)
        return self._to_account_detail(owner)

    async def list_owners(self, db: AsyncSession) -> list[OwnerSummary]:
        owners = await user_repository.list_by_role(db, Role.OWNER)
        return [OwnerSummary(**await self._owner_summary(db, owner)) for owner in owners]

    async def get_owner(self, db: AsyncSession, owner_id: int) -> OwnerDetail:
        owner = await self._get_owner(db, owner_id)
        staff = await user_repository.list_staff(db, owner.id)
        summary = await self._owner_summary(db, owner)
        return OwnerDetail(
            **summary,
            category_count=await category_repository.count(db, filters={"user_id": owner.id}),
            staff_members=[self._to_account_detail(member) for member in staff],
        )

    async def update_owner(self, db: AsyncSession, owner_id: int, data: AccountUpdateRequest) -> AccountDetail:
        owner = await self._get_owner(db, owner_id)
        owner = await self._apply_update(db, owner, data)
        logger.info("Owner updated by admin", owner_id=owner.id)
        return self._to_account_detail(owner)

    async def delete_owner(self, db: AsyncSession, owner_id: int) -> None:
        """
        Remove an owner together with its whole tenant.

        Staff accounts, their grants and every catalog record owned by the
        tenant are removed by ON DELETE CASCADE in the same statement.
        """
        owner = await self._get_owner(db, owner_id)
        staff_count = await user_repository.count_staff(db, owner.id)
        await user_repository.delete(db, db_obj=owner)
        logger.info("Owner deleted by admin", owner_id=owner_id, staff_removed=staff_count)

    # Staff (OWNER only, own staff)

    async def get_staff_for_owner(self, db: AsyncSession, principal: Principal, staff_id: int) -> User:
        """
        Load a staff member the calling owner is allowed to manage.

        A missing id, a non-staff account and another owner's staff all
        raise the same Forbidden, so the response reveals nothing about
        users outside the caller's tenant.
        """
        staff = await user_repository.get(db, staff_id)
        if (
            staff is None
            or staff.role != Role.STAFF
            or principal.role != Role.OWNER
            or staff.owner_id != principal.id
        ):
            logger.warning(
                "Owner targeted staff outside their authority",
                user_id=principal.id,
                staff_id=staff_id,
            )
            raise Forbidden()
        return staff

    async def create_staff(self, db: AsyncSession, principal: Principal, data: AccountCreateRequest) -> AccountDetail:
        staff = await self._create_account(db, data, role=Role.STAFF, owner_id=principal.id)
        logger.info("Staff created by owner", owner_id=principal.id, staff_id=staff.id)
        return self._to_account_detail(staff)

    async def list_staff(self, db: AsyncSession, principal: Principal) -> list[AccountDetail]:
        staff = await user_repository.list_staff(db, principal.id)
        return [self._to_account_detail(member) for member in staff]

    async def update_staff(
        self, db: AsyncSession, principal: Principal, staff_id: int, data: AccountUpdateRequest
    ) -> AccountDetail:
        staff = await self.get_staff_for_owner(db, principal, staff_id)
        staff = await self._apply_update(db, staff, data)
        logger.info("Staff updated by owner", owner_id=principal.id, staff_id=staff.id)
        return self._to_account_detail(staff)

    async def delete_staff(self, db: AsyncSession, principal: Principal, staff_id: int) -> None:
        staff = await self.get_staff_for_owner(db, principal, staff_id)
        await user_repository.delete(db, db_obj=staff)
        logger.info("Staff deleted by owner", owner_id=principal.id, staff_id=staff_id)


user_management_service = UserManagementService()
