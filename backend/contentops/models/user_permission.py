"""User permission model — per-site role grants."""

from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from contentops.models.base import Base, UUIDMixin


class UserPermission(UUIDMixin, Base):
    __tablename__ = "user_permissions"

    firebase_uid = Column(String(128), nullable=False, index=True)
    site_id = Column(UUID(as_uuid=True), ForeignKey("sites.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(20), nullable=False)  # admin, manager
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    site = relationship("Site", back_populates="permissions")

    __table_args__ = (
        UniqueConstraint("firebase_uid", "site_id", name="uq_user_permissions_uid_site"),
    )
