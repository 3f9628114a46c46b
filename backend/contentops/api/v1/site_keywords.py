"""Keyword list management for a site."""

import logging

from fastapi import APIRouter, Depends, status

from contentops.dependencies.auth import SiteAccess, require_site_access
from contentops.dependencies.common import get_store
from contentops.errors import ValidationError
from contentops.repositories.base import Store
from contentops.schemas.keyword import KeywordCreate, KeywordInput, KeywordReplaceRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sites/{site_id}/keywords", tags=["keywords"])


@router.get("")
async def list_keywords(
    access: SiteAccess = Depends(require_site_access),
    store: Store = Depends(get_store),
):
    """All keywords, highest priority first."""
    keywords = await store.keywords.list(access.site.id)
    return {"keywords": keywords, "siteName": access.site.name}


@router.put("")
async def replace_keywords(
    body: KeywordReplaceRequest,
    access: SiteAccess = Depends(require_site_access),
    store: Store = Depends(get_store),
):
    """Replace the whole list. Missing priorities follow list order, first highest."""
    total = len(body.keywords)
    keywords = [
        KeywordInput(
            keyword=kw.keyword.strip(),
            priority=kw.priority or total - index,
            is_active=kw.is_active,
            use_count=kw.use_count,
            last_used_at=kw.last_used_at,
        )
        for index, kw in enumerate(body.keywords)
    ]
    await store.keywords.replace_all(access.site.id, keywords)
    logger.info("Replaced keywords for site %s (%d entries)", access.site.id, total)
    return {"success": True}


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_keyword(
    body: KeywordCreate,
    access: SiteAccess = Depends(require_site_access),
    store: Store = Depends(get_store),
):
    """Add one keyword; without a priority it goes to the top of the list."""
    text = body.keyword.strip()
    if not text:
        raise ValidationError("Keyword is required")

    priority = body.priority
    if priority is None:
        priority = await store.keywords.max_priority(access.site.id) + 1

    keyword = await store.keywords.add(access.site.id, text, priority)
    return {"success": True, "keyword": keyword}
