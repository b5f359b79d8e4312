"""
Tests for the permission engine
ADMIN/OWNER implicit authority and STAFF default-deny against a real database
"""

import itertools

import pytest

from catalog_api.core.exceptions import InvalidRole
from catalog_api.core.permission_resolver import permission_resolver
from catalog_api.core.rbac import MANAGED_RESOURCES, PERMISSION_ACTIONS, Principal
from catalog_api.repositories.permission import permission_repository
from tests.conftest import principal_for


ALL_PAIRS = list(itertools.product(MANAGED_RESOURCES, PERMISSION_ACTIONS))


@pytest.mark.asyncio
class TestImplicitAuthority:
    async def test_admin_is_allowed_everything(self, db, admin):
        principal = principal_for(admin)

        for resource, action in ALL_PAIRS:
            assert await permission_resolver.check_permission(db, principal, resource, action)

    async def test_owner_is_allowed_everything_without_grants(self, db, owner):
        principal = principal_for(owner)

        for resource, action in ALL_PAIRS:
            assert await permission_resolver.check_permission(db, principal, resource, action)


@pytest.mark.asyncio
class TestStaffDefaultDeny:
    async def test_staff_without_grants_is_denied_every_pair(self, db, staff):
        principal = principal_for(staff)

        for resource, action in ALL_PAIRS:
            assert not await permission_resolver.check_permission(db, principal, resource, action)

    async def test_explicit_grant_allows_only_that_pair(self, db, staff):
        await permission_repository.upsert(db, user_id=staff.id, resource="products", action="read", granted=True)
        await db.commit()
        principal = principal_for(staff)

        assert await permission_resolver.check_permission(db, principal, "products", "read")
        assert not await permission_resolver.check_permission(db, principal, "products", "delete")
        assert not await permission_resolver.check_permission(db, principal, "assets", "read")

    async def test_grant_with_granted_false_denies(self, db, staff):
        await permission_repository.upsert(db, user_id=staff.id, resource="assets", action="read", granted=False)
        await db.commit()

        assert not await permission_resolver.check_permission(db, principal_for(staff), "assets", "read")

    async def test_owner_grants_do_not_leak_to_staff_lookup(self, db, owner, staff):
        # grants are keyed by the staff member's own id, not the tenant id
        await permission_repository.upsert(db, user_id=owner.id, resource="products", action="read", granted=True)
        await db.commit()

        assert not await permission_resolver.check_permission(db, principal_for(staff), "products", "read")


@pytest.mark.asyncio
async def test_unknown_role_raises_invalid_role(db):
    principal = Principal(id=1, role="GUEST", owner_id=None, effective_user_id=1)

    with pytest.raises(InvalidRole):
        await permission_resolver.check_permission(db, principal, "products", "read")
