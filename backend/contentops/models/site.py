"""Site model — one managed WordPress destination (tenant)."""

from sqlalchemy import Column, String, Boolean, Text
from sqlalchemy.orm import relationship

from contentops.models.base import Base, TimestampMixin, UUIDMixin


class Site(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "sites"

    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    description = Column(Text)
    system_prompt = Column(Text)

    # WordPress REST credentials
    wp_url = Column(String(500))
    wp_username = Column(String(255))
    wp_app_password = Column(String(255))

    # Per-site n8n workflow trigger
    n8n_webhook_url = Column(String(500))

    is_active = Column(Boolean, default=True, nullable=False, index=True)

    # Relationships
    schedule = relationship("SiteSchedule", back_populates="site", uselist=False, cascade="all, delete-orphan")
    keywords = relationship("SiteKeyword", back_populates="site", cascade="all, delete-orphan")
    article_jobs = relationship("ArticleJob", back_populates="site", cascade="all, delete-orphan")
    articles = relationship("Article", back_populates="site", cascade="all, delete-orphan")
    permissions = relationship("UserPermission", back_populates="site", cascade="all, delete-orphan")
