"""Site schedule model — recurrence config and run bookkeeping, one per site."""

from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID, ARRAY
from sqlalchemy.orm import relationship

from contentops.models.base import Base, TimestampMixin, UUIDMixin


class SiteSchedule(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "site_schedules"

    site_id = Column(UUID(as_uuid=True), ForeignKey("sites.id", ondelete="CASCADE"), unique=True, nullable=False)

    # Recurrence
    is_enabled = Column(Boolean, default=False, nullable=False)
    frequency_type = Column(String(20), nullable=False, default="daily")  # daily, weekly, custom
    time_of_day = Column(String(8), nullable=False, default="09:00")
    days_of_week = Column(ARRAY(Integer), nullable=False, default=list)  # 0=Sunday .. 6=Saturday
    custom_interval_hours = Column(Integer)
    articles_per_run = Column(Integer, nullable=False, default=1)

    # Run state
    last_run_at = Column(DateTime(timezone=True))
    next_run_at = Column(DateTime(timezone=True))

    site = relationship("Site", back_populates="schedule")

    __table_args__ = (
        Index("idx_schedule_due", "is_enabled", "next_run_at"),
    )
