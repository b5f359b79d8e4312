"""
SQLAlchemy Models Package
Catalog API Database Models
"""

from catalog_api.models.user import User
from catalog_api.models.permission import PermissionGrant
from catalog_api.models.catalog import Asset, Category, Product, TenantOwnedMixin

__all__ = [
    "User",
    "PermissionGrant",
    "Product",
    "Category",
    "Asset",
    "TenantOwnedMixin",
]
