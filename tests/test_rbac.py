from types import SimpleNamespace

import pytest

from catalog_api.core.exceptions import BadRequest, InvalidRole
from catalog_api.core.rbac import (
    MANAGED_RESOURCES,
    PERMISSION_ACTIONS,
    Role,
    build_principal,
    coerce_role,
    normalize_permission,
    resolve_scope,
)


@pytest.mark.parametrize("owner_id", [None, 7, 42])
def test_admin_scope_is_unrestricted_regardless_of_other_fields(owner_id):
    assert resolve_scope(Role.ADMIN, 1, owner_id) is None


@pytest.mark.parametrize("user_id", [1, 2, 999])
def test_owner_scope_is_own_id(user_id):
    assert resolve_scope(Role.OWNER, user_id, None) == user_id


@pytest.mark.parametrize("user_id,owner_id", [(5, 1), (10, 3), (2, 1)])
def test_staff_scope_is_owner_id_never_own_id(user_id, owner_id):
    scope = resolve_scope(Role.STAFF, user_id, owner_id)

    assert scope == owner_id
    assert scope != user_id


def test_staff_without_owner_is_an_invariant_violation():
    with pytest.raises(InvalidRole) as exc_info:
        resolve_scope(Role.STAFF, 5, None)

    assert exc_info.value.status_code == 500


def test_staff_owned_by_itself_is_an_invariant_violation():
    with pytest.raises(InvalidRole):
        resolve_scope(Role.STAFF, 5, 5)


def test_scope_accepts_stored_role_strings():
    assert resolve_scope("OWNER", 3, None) == 3


def test_unknown_role_is_rejected():
    with pytest.raises(InvalidRole):
        coerce_role("SUPERUSER")


def test_build_principal_from_staff_row():
    user = SimpleNamespace(id=8, role=Role.STAFF, owner_id=2)

    principal = build_principal(user)

    assert principal.id == 8
    assert principal.role == Role.STAFF
    assert principal.owner_id == 2
    assert principal.effective_user_id == 2
    assert not principal.is_admin


def test_normalize_permission_accepts_registry_tags_case_insensitively():
    requirement = normalize_permission(" Products ", "READ")

    assert requirement.resource == "products"
    assert requirement.action == "read"
    assert str(requirement) == "products:read"


@pytest.mark.parametrize(
    "resource,action",
    [("prodcuts", "read"), ("products", "destroy"), ("", "read"), ("products", "")],
)
def test_normalize_permission_rejects_unknown_tags(resource, action):
    with pytest.raises(BadRequest):
        normalize_permission(resource, action)


def test_registry_contains_catalog_resources():
    for resource in ("products", "categories", "assets", "api-keys"):
        assert resource in MANAGED_RESOURCES
    assert set(PERMISSION_ACTIONS) >= {"create", "read", "update", "delete"}
