"""Article job model — one asynchronous generation attempt."""

from sqlalchemy import Column, String, Integer, DateTime, Text, ForeignKey, Index, text
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import relationship

from contentops.models.base import Base, TimestampMixin, UUIDMixin


class ArticleJob(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "article_jobs"

    site_id = Column(UUID(as_uuid=True), ForeignKey("sites.id", ondelete="CASCADE"), nullable=False, index=True)
    wp_post_id = Column(Integer)

    # Dedup
    idempotency_key = Column(String(255), unique=True)

    status = Column(String(20), nullable=False, default="pending")  # pending, processing, completed, failed
    result_data = Column(JSONB)
    error_message = Column(Text)
    started_at = Column(DateTime(timezone=True))
    completed_at = Column(DateTime(timezone=True))

    site = relationship("Site", back_populates="article_jobs")

    __table_args__ = (
        Index("idx_job_site_status", "site_id", "status"),
        # At most one active job per (site, post); losing racers get 23505
        Index(
            "uq_article_jobs_active_post",
            "site_id",
            "wp_post_id",
            unique=True,
            postgresql_where=text("status IN ('pending', 'processing') AND wp_post_id IS NOT NULL"),
        ),
    )
