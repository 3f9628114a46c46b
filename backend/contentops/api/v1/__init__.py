"""API v1 router aggregation."""

from fastapi import APIRouter

from contentops.api.v1.n8n_jobs import router as n8n_jobs_router
from contentops.api.v1.n8n_schedules import router as n8n_schedules_router
from contentops.api.v1.n8n_sites import router as n8n_sites_router
from contentops.api.v1.sites import router as sites_router
from contentops.api.v1.site_jobs import router as site_jobs_router
from contentops.api.v1.site_keywords import router as site_keywords_router
from contentops.api.v1.site_schedule import router as site_schedule_router
from contentops.api.v1.site_wordpress import router as site_wordpress_router
from contentops.api.v1.articles import router as articles_router
from contentops.api.v1.admin import router as admin_router

router = APIRouter(prefix="/api/v1")

# Machine routes (x-api-key)
router.include_router(n8n_jobs_router)
router.include_router(n8n_schedules_router)
router.include_router(n8n_sites_router)

# Dashboard routes (signed-in user)
router.include_router(sites_router)
router.include_router(site_jobs_router)
router.include_router(site_keywords_router)
router.include_router(site_schedule_router)
router.include_router(site_wordpress_router)
router.include_router(articles_router)

router.include_router(admin_router)
