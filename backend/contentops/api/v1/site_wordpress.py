"""WordPress proxy and n8n regeneration trigger for a site."""

import logging
from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Depends, Query

from contentops.dependencies.auth import SiteAccess, require_site_access
from contentops.dependencies.common import (
    WordPressClientFactory,
    get_n8n_client,
    get_now,
    get_wordpress_factory,
)
from contentops.errors import ValidationError
from contentops.schemas.site import SiteRead, WebhookTriggerRequest
from contentops.services.n8n import N8nClient
from contentops.services.wordpress import WordPressClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sites/{site_id}", tags=["wordpress"])


def _wordpress(site: SiteRead, factory: WordPressClientFactory) -> WordPressClient:
    if not site.wp_url:
        raise ValidationError("WordPress URL not configured for this site")
    return factory(site)


@router.get("/posts")
async def list_posts(
    access: SiteAccess = Depends(require_site_access),
    factory: WordPressClientFactory = Depends(get_wordpress_factory),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    post_status: str = Query("any", alias="status"),
    search: str | None = Query(None),
    orderby: Literal["date", "modified", "title"] = Query("modified"),
    order: Literal["asc", "desc"] = Query("desc"),
):
    """One page of the site's WordPress posts."""
    client = _wordpress(access.site, factory)
    result = await client.fetch_posts(
        page=page,
        per_page=per_page,
        status=post_status,
        search=search,
        orderby=orderby,
        order=order,
    )
    return {"posts": result.posts, "total": result.total, "totalPages": result.total_pages}


@router.get("/wordpress/categories")
async def list_categories(
    access: SiteAccess = Depends(require_site_access),
    factory: WordPressClientFactory = Depends(get_wordpress_factory),
):
    categories = await _wordpress(access.site, factory).fetch_categories()
    return {"categories": categories}


@router.get("/wordpress/tags")
async def list_tags(
    access: SiteAccess = Depends(require_site_access),
    factory: WordPressClientFactory = Depends(get_wordpress_factory),
):
    tags = await _wordpress(access.site, factory).fetch_tags()
    return {"tags": tags}


@router.post("/wordpress/test")
async def test_wordpress_connection(
    access: SiteAccess = Depends(require_site_access),
    factory: WordPressClientFactory = Depends(get_wordpress_factory),
):
    """Check the saved WordPress URL and credentials."""
    return await _wordpress(access.site, factory).test_connection()


@router.post("/webhook")
async def trigger_webhook(
    body: WebhookTriggerRequest,
    access: SiteAccess = Depends(require_site_access),
    n8n: N8nClient = Depends(get_n8n_client),
    now: datetime = Depends(get_now),
):
    """Ask the site's n8n workflow to regenerate the given posts."""
    return await n8n.trigger_site_regeneration(access.site, body.post_ids, triggered_at=now)
