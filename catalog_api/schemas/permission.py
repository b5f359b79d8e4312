"""
Permission administration schemas.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from catalog_api.core.rbac import MANAGED_RESOURCES, PERMISSION_ACTIONS
from catalog_api.schemas.base import BaseSchema


class PermissionAssignRequest(BaseSchema):
    resource: str = Field(..., min_length=1, max_length=64)
    action: str = Field(..., min_length=1, max_length=32)
    granted: bool = True

    @field_validator("resource")
    @classmethod
    def normalize_resource(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("action")
    @classmethod
    def normalize_action(cls, value: str) -> str:
        return value.strip().lower()


class BulkPermissionAssignRequest(BaseSchema):
    # Registry validation happens in the service so the whole batch is
    # checked before any write, whatever the entry point.
    permissions: list[PermissionAssignRequest] = Field(..., min_length=1, max_length=len(MANAGED_RESOURCES) * len(PERMISSION_ACTIONS))


class PermissionGrantResponse(BaseSchema):
    id: int
    user_id: int
    resource: str
    action: str
    granted: bool
    created_at: datetime
    updated_at: datetime


class BulkPermissionAssignResponse(BaseSchema):
    success: bool = Field(..., description="True only when every entry was applied")
    applied: int
    message: str
    permissions: list[PermissionGrantResponse] = Field(default_factory=list)


class PermissionCatalog(BaseSchema):
    resources: list[str]
    actions: list[str]
