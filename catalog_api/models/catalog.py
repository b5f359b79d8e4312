"""
Catalog Models
Minimal tenant-owned catalog records. Every row belongs to an OWNER's id.
"""

from sqlalchemy import Column, String, Text, Integer, ForeignKey, Numeric
from sqlalchemy.orm import declared_attr

from catalog_api.models.base import BaseModel


class TenantOwnedMixin:
    """Owning tenant reference; always an OWNER id, never a STAFF id"""

    @declared_attr
    def user_id(cls):
        return Column(
            Integer,
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )


class Product(BaseModel, TenantOwnedMixin):
    __tablename__ = "products"

    name = Column(String(255), nullable=False)
    sku = Column(String(100), nullable=True, index=True)
    price = Column(Numeric(12, 2), nullable=True)
    description = Column(Text, nullable=True)


class Category(BaseModel, TenantOwnedMixin):
    __tablename__ = "categories"

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    parent_category_id = Column(
        Integer,
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=True,
    )


class Asset(BaseModel, TenantOwnedMixin):
    __tablename__ = "assets"

    name = Column(String(255), nullable=False)
    file_path = Column(String(500), nullable=False)
    mime_type = Column(String(100), nullable=True)
    size = Column(Integer, nullable=True)
