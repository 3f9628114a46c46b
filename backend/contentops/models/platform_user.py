"""Platform user model — tracks super admins by auth provider uid."""

from sqlalchemy import Column, String

from contentops.models.base import Base, TimestampMixin, UUIDMixin


class PlatformUser(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "platform_users"

    firebase_uid = Column(String(128), unique=True, nullable=False, index=True)
    email = Column(String(255), nullable=False)
    display_name = Column(String(255))
    role = Column(String(20), nullable=False, default="user")  # super_admin, user
