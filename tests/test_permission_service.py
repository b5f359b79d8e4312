"""
Tests for the permission administration service
Idempotent grants, atomic bulk grants, revocation and authority checks
"""

from unittest.mock import patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from catalog_api.core.exceptions import BadRequest, Forbidden, NotFound
from catalog_api.models.permission import PermissionGrant
from catalog_api.repositories.permission import permission_repository
from catalog_api.schemas.permission import PermissionAssignRequest
from catalog_api.services.permission import permission_service
from tests.conftest import principal_for


def _entry(resource, action, granted=True):
    return PermissionAssignRequest(resource=resource, action=action, granted=granted)


async def _grant_count(db, user_id):
    query = select(func.count(PermissionGrant.id)).where(PermissionGrant.user_id == user_id)
    return (await db.execute(query)).scalar()


@pytest.mark.asyncio
class TestGrant:
    async def test_granting_twice_keeps_one_record_with_latest_value(self, db, owner, staff):
        principal = principal_for(owner)

        await permission_service.grant(db, principal, staff.id, _entry("products", "read", True))
        grant = await permission_service.grant(db, principal, staff.id, _entry("products", "read", False))

        assert grant.granted is False
        assert await _grant_count(db, staff.id) == 1
        stored = await permission_repository.get_grant(db, staff.id, "products", "read")
        assert stored.granted is False

    async def test_granted_defaults_to_true(self, db, owner, staff):
        grant = await permission_service.grant(
            db, principal_for(owner), staff.id, PermissionAssignRequest(resource="assets", action="create")
        )

        assert grant.granted is True

    async def test_unknown_resource_is_rejected_before_any_write(self, db, owner, staff):
        with pytest.raises(BadRequest):
            await permission_service.grant(db, principal_for(owner), staff.id, _entry("prodcuts", "read"))

        assert await _grant_count(db, staff.id) == 0

    async def test_owner_cannot_grant_to_another_owners_staff(self, db, owner, other_staff):
        with pytest.raises(Forbidden):
            await permission_service.grant(db, principal_for(owner), other_staff.id, _entry("products", "read"))

        assert await _grant_count(db, other_staff.id) == 0

    async def test_targets_outside_own_staff_are_indistinguishable(self, db, owner, other_owner, other_staff):
        principal = principal_for(owner)
        errors = []

        for target_id in (9999, other_owner.id, owner.id, other_staff.id):
            with pytest.raises(Forbidden) as exc:
                await permission_service.grant(db, principal, target_id, _entry("products", "read"))
            errors.append((exc.value.status_code, exc.value.detail))

        assert len(set(errors)) == 1

    async def test_authority_is_checked_before_tags(self, db, owner, other_staff):
        with pytest.raises(Forbidden):
            await permission_service.grant(db, principal_for(owner), other_staff.id, _entry("prodcuts", "read"))

        assert await _grant_count(db, other_staff.id) == 0


@pytest.mark.asyncio
class TestBulkGrant:
    async def test_bulk_grant_applies_every_entry(self, db, owner, staff):
        entries = [_entry("products", "read"), _entry("products", "update"), _entry("assets", "read", False)]

        grants = await permission_service.bulk_grant(db, principal_for(owner), staff.id, entries)

        assert len(grants) == 3
        assert await _grant_count(db, staff.id) == 3

    async def test_invalid_entry_persists_nothing(self, db, owner, staff):
        entries = [_entry("products", "read"), _entry("not-a-resource", "read"), _entry("assets", "read")]

        with pytest.raises(BadRequest):
            await permission_service.bulk_grant(db, principal_for(owner), staff.id, entries)

        assert await _grant_count(db, staff.id) == 0

    async def test_failure_mid_batch_rolls_back_earlier_entries(self, db, owner, staff):
        staff_id = staff.id
        principal = principal_for(owner)
        entries = [_entry("products", "read"), _entry("products", "update"), _entry("categories", "read")]

        real_upsert = permission_repository.upsert
        calls = {"count": 0}

        async def flaky_upsert(session, **kwargs):
            calls["count"] += 1
            if calls["count"] == 2:
                raise SQLAlchemyError("connection lost")
            return await real_upsert(session, **kwargs)

        with patch.object(permission_repository, "upsert", side_effect=flaky_upsert):
            with pytest.raises(SQLAlchemyError):
                await permission_service.bulk_grant(db, principal, staff_id, entries)

        assert calls["count"] == 2
        assert await permission_repository.list_for_user(db, staff_id) == []

    async def test_cross_owner_bulk_grant_is_forbidden(self, db, owner, other_staff):
        with pytest.raises(Forbidden):
            await permission_service.bulk_grant(
                db, principal_for(owner), other_staff.id, [_entry("products", "read")]
            )

    async def test_cross_owner_bulk_grant_with_bad_tag_is_forbidden(self, db, owner, other_staff):
        entries = [_entry("products", "read"), _entry("not-a-resource", "read")]

        with pytest.raises(Forbidden):
            await permission_service.bulk_grant(db, principal_for(owner), other_staff.id, entries)


@pytest.mark.asyncio
class TestRevoke:
    async def test_revoke_removes_grant(self, db, owner, staff):
        principal = principal_for(owner)
        await permission_service.grant(db, principal, staff.id, _entry("products", "read"))

        removed = await permission_service.revoke(db, principal, staff.id, "products", "read")

        assert removed is True
        assert await _grant_count(db, staff.id) == 0

    async def test_revoking_missing_grant_is_a_no_op(self, db, owner, staff):
        removed = await permission_service.revoke(db, principal_for(owner), staff.id, "products", "delete")

        assert removed is False

    async def test_owner_cannot_revoke_another_owners_staff(self, db, owner, other_owner, other_staff):
        await permission_service.grant(db, principal_for(other_owner), other_staff.id, _entry("products", "read"))

        with pytest.raises(Forbidden):
            await permission_service.revoke(db, principal_for(owner), other_staff.id, "products", "read")

        assert await _grant_count(db, other_staff.id) == 1

    async def test_cross_owner_revoke_with_bad_tag_is_forbidden(self, db, owner, other_staff):
        with pytest.raises(Forbidden):
            await permission_service.revoke(db, principal_for(owner), other_staff.id, "products", "erase")


@pytest.mark.asyncio
class TestListGrants:
    async def test_staff_reads_own_grants(self, db, owner, staff):
        await permission_service.grant(db, principal_for(owner), staff.id, _entry("products", "read"))

        grants = await permission_service.list_for_staff(db, principal_for(staff), staff.id)

        assert [(g.resource, g.action) for g in grants] == [("products", "read")]

    async def test_staff_cannot_read_other_staff_grants(self, db, staff, other_staff):
        with pytest.raises(Forbidden):
            await permission_service.list_for_staff(db, principal_for(staff), other_staff.id)

    async def test_owner_cannot_read_other_tenants_staff(self, db, owner, other_staff):
        with pytest.raises(Forbidden):
            await permission_service.list_for_staff(db, principal_for(owner), other_staff.id)

    async def test_admin_reads_any_staff_grants(self, db, admin, other_owner, other_staff):
        await permission_service.grant(db, principal_for(other_owner), other_staff.id, _entry("assets", "read"))

        grants = await permission_service.list_for_staff(db, principal_for(admin), other_staff.id)

        assert len(grants) == 1

    async def test_admin_listing_unknown_staff_is_not_found(self, db, admin):
        with pytest.raises(NotFound):
            await permission_service.list_for_staff(db, principal_for(admin), 4242)
