"""Article model — generated article drafts and their review history."""

from sqlalchemy import Column, String, Integer, Text, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import relationship

from contentops.models.base import Base, TimestampMixin, UUIDMixin


class Article(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "articles"

    site_id = Column(UUID(as_uuid=True), ForeignKey("sites.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(Text, nullable=False)
    content_html = Column(Text)
    status = Column(String(20), nullable=False, default="draft")  # draft, review, published
    source_data = Column(JSONB, default=dict)
    feedback_history = Column(JSONB, default=list)
    wp_post_id = Column(Integer)

    site = relationship("Site", back_populates="articles")

    __table_args__ = (
        Index("idx_article_site_created", "site_id", "created_at"),
    )
