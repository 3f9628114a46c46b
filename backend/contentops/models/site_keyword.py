"""Site keyword model — prioritized keyword list per site."""

from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from contentops.models.base import Base, TimestampMixin, UUIDMixin


class SiteKeyword(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "site_keywords"

    site_id = Column(UUID(as_uuid=True), ForeignKey("sites.id", ondelete="CASCADE"), nullable=False, index=True)
    keyword = Column(String(255), nullable=False)
    priority = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    use_count = Column(Integer, default=0, nullable=False)
    last_used_at = Column(DateTime(timezone=True))

    site = relationship("Site", back_populates="keywords")

    __table_args__ = (
        Index("idx_keyword_site_priority", "site_id", "priority"),
    )
