"""
User Model
Principal records for the three-tier ADMIN / OWNER / STAFF hierarchy
"""

from sqlalchemy import Column, String, Boolean, Integer, ForeignKey, Index, CheckConstraint
from sqlalchemy import Enum as SAEnum

from catalog_api.core.rbac import Role
from catalog_api.models.base import BaseModel


class User(BaseModel):
    """User model for authentication and tenant hierarchy"""
    __tablename__ = "users"

    # Basic user information
    email = Column(String(254), nullable=False, unique=True, index=True)
    full_name = Column(String(100), nullable=False)
    hashed_password = Column(String(128), nullable=False)

    # Hierarchy: owner_id is set only for STAFF and points at their OWNER.
    # Deleting an OWNER removes its STAFF rows at the database level.
    role = Column(SAEnum(Role, name="user_role"), nullable=False, default=Role.OWNER, index=True)
    owner_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    # Account status
    is_active = Column(Boolean, default=True, nullable=False)

    # Machine credential (X-API-Key)
    api_key = Column(String(80), nullable=True, unique=True, index=True)

    __table_args__ = (
        CheckConstraint(
            "(role = 'STAFF' AND owner_id IS NOT NULL) OR (role != 'STAFF' AND owner_id IS NULL)",
            name="ck_users_owner_matches_role",
        ),
        Index("ix_users_owner_role", "owner_id", "role"),
    )

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
