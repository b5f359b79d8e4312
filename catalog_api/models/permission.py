"""
Permission Grant Model
Per-staff (resource, action) capability records
"""

from sqlalchemy import Column, String, Boolean, Integer, ForeignKey, Index, UniqueConstraint

from catalog_api.models.base import BaseModel


class PermissionGrant(BaseModel):
    """A single capability granted (or explicitly denied) to a STAFF user"""
    __tablename__ = "user_permissions"

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    resource = Column(String(64), nullable=False)
    action = Column(String(32), nullable=False)
    granted = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "resource", "action", name="uq_user_permissions_user_resource_action"),
        Index("ix_user_permissions_user_resource", "user_id", "resource"),
    )

    def __repr__(self):
        return (
            f"<PermissionGrant(user_id={self.user_id}, "
            f"permission='{self.resource}:{self.action}', granted={self.granted})>"
        )
