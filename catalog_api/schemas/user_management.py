"""
Account administration schemas: ADMIN manages OWNERs, OWNER manages STAFF.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from catalog_api.schemas.base import BaseSchema, enum_value, validate_email, validate_non_empty_string


class AccountCreateRequest(BaseSchema):
    email: str = Field(..., description="Unique email")
    full_name: str = Field(..., min_length=2, max_length=100)
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, value: str) -> str:
        return validate_email(value)

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, value: str) -> str:
        return validate_non_empty_string(value)


class AccountUpdateRequest(BaseSchema):
    email: Optional[str] = None
    full_name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    password: Optional[str] = Field(default=None, min_length=8, max_length=128)

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, value: Optional[str]) -> Optional[str]:
        return validate_email(value) if value is not None else value


class OwnerCreateRequest(AccountCreateRequest):
    pass


class OwnerUpdateRequest(AccountUpdateRequest):
    pass


class StaffCreateRequest(AccountCreateRequest):
    pass


class StaffUpdateRequest(AccountUpdateRequest):
    pass


class AccountDetail(BaseSchema):
    id: int
    email: str
    full_name: str
    role: str
    owner_id: Optional[int] = None
    is_active: bool
    created_at: datetime

    normalize_role = field_validator("role", mode="before")(enum_value)


class OwnerSummary(AccountDetail):
    staff_count: int = 0
    product_count: int = 0
    asset_count: int = 0


class OwnerDetail(OwnerSummary):
    category_count: int = 0
    staff_members: list[AccountDetail] = Field(default_factory=list)
