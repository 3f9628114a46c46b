"""Publishing schedule for a site."""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends

from contentops.dependencies.auth import SiteAccess, require_site_access
from contentops.dependencies.common import get_now, get_store
from contentops.errors import NotFoundError, UniqueConstraintViolation, ValidationError
from contentops.repositories.base import Store
from contentops.schemas.schedule import ScheduleConfig, ScheduleResponse, ScheduleUpdateRequest
from contentops.services.scheduling import compute_next_run

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sites/{site_id}/schedule", tags=["schedule"])

DEFAULT_SCHEDULE = ScheduleConfig(
    is_enabled=False,
    frequency_type="daily",
    time_of_day="09:00",
    days_of_week=[1, 2, 3, 4, 5],
    custom_interval_hours=None,
    articles_per_run=1,
)


@router.get("", response_model=ScheduleResponse)
async def get_schedule(
    access: SiteAccess = Depends(require_site_access),
    store: Store = Depends(get_store),
):
    """The site's schedule; a disabled weekday default is created on first read."""
    schedule = await store.schedules.get(access.site.id)
    if schedule is None:
        try:
            schedule = await store.schedules.add(access.site.id, DEFAULT_SCHEDULE)
        except UniqueConstraintViolation:
            # Created by a concurrent first read
            schedule = await store.schedules.get(access.site.id)
    return ScheduleResponse(schedule=schedule, siteName=access.site.name)


@router.put("", response_model=ScheduleResponse)
async def update_schedule(
    body: ScheduleUpdateRequest,
    access: SiteAccess = Depends(require_site_access),
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
):
    """Save settings and recompute the next run, allowing a slot later today."""
    config = body.schedule
    if config.frequency_type == "weekly" and not config.days_of_week:
        raise ValidationError("Select at least one day for a weekly schedule")

    next_run_at = compute_next_run(config, now, allow_today=True)

    site_id = access.site.id
    if await store.schedules.get(site_id) is None:
        await store.schedules.add(site_id, DEFAULT_SCHEDULE)
    schedule = await store.schedules.update_config(site_id, config, next_run_at)
    if schedule is None:
        raise NotFoundError("Schedule not found")

    logger.info("Saved schedule for site %s; next run %s", site_id, next_run_at)
    return ScheduleResponse(schedule=schedule, siteName=access.site.name)
