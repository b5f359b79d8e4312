"""
Catalog collaborator schemas. Kept minimal: catalog validation rules live
outside the access-control core.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator

from catalog_api.schemas.base import BaseSchema


class CatalogItemBase(BaseSchema):
    name: str = Field(..., min_length=1, max_length=255)


class CatalogItemUpdate(BaseSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=255)

    @field_validator("name")
    @classmethod
    def reject_null_name(cls, value: Optional[str]) -> str:
        # name may be omitted from an update but never cleared
        if value is None:
            raise ValueError("name cannot be null")
        return value


class ProductCreate(CatalogItemBase):
    sku: Optional[str] = Field(None, max_length=100)
    price: Optional[Decimal] = Field(None, ge=0)
    description: Optional[str] = None
    # Only honoured for ADMIN callers; tenants always create in their own scope.
    user_id: Optional[int] = None


class ProductUpdate(CatalogItemUpdate):
    sku: Optional[str] = Field(None, max_length=100)
    price: Optional[Decimal] = Field(None, ge=0)
    description: Optional[str] = None


class ProductResponse(BaseSchema):
    id: int
    user_id: int
    name: str
    sku: Optional[str] = None
    price: Optional[Decimal] = None
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class CategoryCreate(CatalogItemBase):
    description: Optional[str] = None
    parent_category_id: Optional[int] = None
    user_id: Optional[int] = None


class CategoryUpdate(CatalogItemUpdate):
    description: Optional[str] = None
    parent_category_id: Optional[int] = None


class CategoryResponse(BaseSchema):
    id: int
    user_id: int
    name: str
    description: Optional[str] = None
    parent_category_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class AssetCreate(CatalogItemBase):
    file_path: str = Field(..., min_length=1, max_length=500)
    mime_type: Optional[str] = Field(None, max_length=100)
    size: Optional[int] = Field(None, ge=0)
    user_id: Optional[int] = None


class AssetUpdate(CatalogItemUpdate):
    mime_type: Optional[str] = Field(None, max_length=100)


class AssetResponse(BaseSchema):
    id: int
    user_id: int
    name: str
    file_path: str
    mime_type: Optional[str] = None
    size: Optional[int] = None
    created_at: datetime
    updated_at: datetime
