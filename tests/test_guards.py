"""
Tests for the guard pipeline
Stage ordering, fail-closed behaviour and tenant isolation
"""

import asyncio
from datetime import timedelta

import pytest

from catalog_api.core.exceptions import Forbidden, NotFound, Unauthenticated
from catalog_api.core.guards import (
    GuardPipeline,
    RequestContext,
    authenticate,
    check_ownership,
    guard_pipeline,
    resolve_identity,
    resolve_scope_stage,
)
from catalog_api.core.rbac import PermissionRequirement, Role
from catalog_api.core.security import create_access_token, generate_api_key
from catalog_api.repositories.permission import permission_repository
from catalog_api.repositories.user import user_repository
from tests.conftest import create_product, create_user


def _token(user, **kwargs):
    return create_access_token(subject=str(user.id), **kwargs)


def _ctx(user=None, *, token=None, resource_type=None, resource_id=None, requirement=None):
    return RequestContext(
        bearer_token=token or (_token(user) if user is not None else None),
        resource_type=resource_type,
        resource_id=resource_id,
        requirement=requirement,
    )


@pytest.mark.asyncio
class TestAuthentication:
    async def test_missing_credential_is_unauthenticated(self, db):
        with pytest.raises(Unauthenticated):
            await resolve_identity(db)

    async def test_expired_token_is_unauthenticated(self, db, owner):
        token = _token(owner, expires_delta=timedelta(seconds=-1))

        with pytest.raises(Unauthenticated):
            await guard_pipeline.run(db, _ctx(token=token))

    async def test_token_for_deleted_user_no_longer_resolves(self, db, owner, staff):
        token = _token(staff)
        await user_repository.delete(db, db_obj=staff)

        with pytest.raises(Unauthenticated):
            await resolve_identity(db, bearer_token=token)

    async def test_inactive_user_is_unauthenticated(self, db, owner):
        user = await create_user(db, "inactive@catalog.test", Role.OWNER, is_active=False)

        with pytest.raises(Unauthenticated):
            await resolve_identity(db, bearer_token=_token(user))

    async def test_non_numeric_subject_is_unauthenticated(self, db):
        with pytest.raises(Unauthenticated):
            await resolve_identity(db, bearer_token=create_access_token(subject="not-an-id"))

    async def test_api_key_resolves_its_user(self, db, owner):
        owner.api_key = generate_api_key()
        await db.commit()

        user = await resolve_identity(db, api_key=owner.api_key)

        assert user.id == owner.id

    async def test_unknown_api_key_is_unauthenticated(self, db, owner):
        with pytest.raises(Unauthenticated):
            await resolve_identity(db, api_key=generate_api_key())


@pytest.mark.asyncio
class TestScopeResolution:
    async def test_staff_context_is_scoped_to_owner(self, db, owner, staff):
        ctx = await guard_pipeline.run(db, _ctx(staff))

        assert ctx.principal.role == Role.STAFF
        assert ctx.effective_user_id == owner.id
        assert ctx.effective_user_id != staff.id

    async def test_admin_context_is_unrestricted(self, db, admin):
        ctx = await guard_pipeline.run(db, _ctx(admin))

        assert ctx.effective_user_id is None

    async def test_role_is_read_from_storage_not_token(self, db, owner):
        token = _token(owner, additional_claims={"role": "ADMIN"})

        ctx = await guard_pipeline.run(db, _ctx(token=token))

        assert ctx.principal.role == Role.OWNER

    async def test_effective_user_id_unavailable_before_scope_resolution(self):
        with pytest.raises(RuntimeError):
            RequestContext().effective_user_id


@pytest.mark.asyncio
class TestOwnershipStage:
    async def test_own_record_passes(self, db, owner, staff):
        product = await create_product(db, owner)
        ctx = _ctx(staff, resource_type="products", resource_id=product.id)

        await GuardPipeline(stages=[authenticate, resolve_scope_stage, check_ownership]).run(db, ctx)

    async def test_other_tenant_record_looks_missing(self, db, owner, other_owner, staff):
        foreign = await create_product(db, other_owner, name="Foreign")

        with pytest.raises(NotFound) as foreign_exc:
            await guard_pipeline.run(db, _ctx(staff, resource_type="products", resource_id=foreign.id))
        with pytest.raises(NotFound) as missing_exc:
            await guard_pipeline.run(db, _ctx(staff, resource_type="products", resource_id=foreign.id + 1000))

        assert foreign_exc.value.status_code == missing_exc.value.status_code == 404
        assert foreign_exc.value.detail == missing_exc.value.detail

    async def test_non_numeric_id_is_not_found(self, db, owner):
        with pytest.raises(NotFound):
            await guard_pipeline.run(db, _ctx(owner, resource_type="products", resource_id="abc"))

    async def test_admin_skips_ownership(self, db, admin, other_owner):
        foreign = await create_product(db, other_owner)

        ctx = await guard_pipeline.run(db, _ctx(admin, resource_type="products", resource_id=foreign.id))

        assert ctx.principal.is_admin

    async def test_ownership_runs_before_permission(self, db, owner, other_owner, staff):
        # no grants and a foreign id: the caller learns nothing beyond "not found"
        foreign = await create_product(db, other_owner)
        ctx = _ctx(
            staff,
            resource_type="products",
            resource_id=foreign.id,
            requirement=PermissionRequirement("products", "read"),
        )

        with pytest.raises(NotFound):
            await guard_pipeline.run(db, ctx)


@pytest.mark.asyncio
class TestPermissionStage:
    async def test_staff_without_grant_is_forbidden(self, db, staff):
        ctx = _ctx(staff, requirement=PermissionRequirement("products", "read"))

        with pytest.raises(Forbidden):
            await guard_pipeline.run(db, ctx)

    async def test_staff_with_grant_passes(self, db, staff):
        await permission_repository.upsert(db, user_id=staff.id, resource="products", action="read", granted=True)
        await db.commit()

        ctx = await guard_pipeline.run(db, _ctx(staff, requirement=PermissionRequirement("products", "read")))

        assert ctx.principal.id == staff.id


@pytest.mark.asyncio
class TestDeadline:
    async def test_timeout_before_identity_is_unauthenticated(self, db):
        async def stalled(db, ctx):
            await asyncio.sleep(1)

        with pytest.raises(Unauthenticated):
            await GuardPipeline(stages=[stalled], timeout=0.01).run(db, RequestContext())

    async def test_timeout_after_identity_is_forbidden(self, db, owner):
        async def stalled(db, ctx):
            await asyncio.sleep(1)

        pipeline = GuardPipeline(stages=[authenticate, resolve_scope_stage, stalled], timeout=0.5)

        with pytest.raises(Forbidden):
            await pipeline.run(db, _ctx(owner))
