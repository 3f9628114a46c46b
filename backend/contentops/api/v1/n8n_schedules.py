"""Schedule polling endpoints for the n8n cron workflow."""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends

from contentops.dependencies.auth import require_n8n_api_key
from contentops.dependencies.common import get_now, get_store
from contentops.errors import NotFoundError
from contentops.repositories.base import Store
from contentops.schemas.schedule import DueScheduleList, RecordRunRequest, RecordRunResponse
from contentops.services.scheduling import compute_next_run

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/n8n/schedules", tags=["n8n"], dependencies=[Depends(require_n8n_api_key)])


@router.get("/due", response_model=DueScheduleList)
async def list_due_schedules(
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
):
    """Enabled schedules on active sites whose next run is at or before now."""
    schedules = await store.schedules.list_due(now)
    return DueScheduleList(schedules=schedules, count=len(schedules), checkedAt=now)


@router.post("/due", response_model=RecordRunResponse)
async def record_schedule_run(
    body: RecordRunRequest,
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
):
    """Mark a site's schedule as run and advance it by one full period."""
    schedule = await store.schedules.get(body.site_id)
    if not schedule:
        raise NotFoundError("Schedule not found")

    next_run_at = compute_next_run(schedule, now, allow_today=False)
    updated = await store.schedules.record_run(body.site_id, last_run_at=now, next_run_at=next_run_at)
    logger.info("Recorded run for site %s; next run %s", body.site_id, next_run_at)
    return RecordRunResponse(schedule=updated, nextRunAt=next_run_at)
