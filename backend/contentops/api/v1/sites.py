"""Dashboard site listing and per-site settings."""

import logging

from fastapi import APIRouter, Depends

from contentops.dependencies.auth import (
    CurrentUser,
    SiteAccess,
    get_current_user,
    require_site_access,
    require_site_admin,
)
from contentops.dependencies.common import get_store
from contentops.errors import ConflictError, ValidationError, UniqueConstraintViolation
from contentops.repositories.base import Store
from contentops.schemas.site import SiteRead, SiteUpdate, SiteWithPermission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sites", tags=["sites"])


@router.get("", response_model=list[SiteWithPermission])
async def list_my_sites(
    user: CurrentUser = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    """Sites the current user can open. Super admins see every site as admin."""
    if user.is_super_admin:
        sites = await store.sites.list()
        return [
            SiteWithPermission(id=s.id, name=s.name, slug=s.slug, description=s.description, role="admin")
            for s in sites
        ]
    return await store.sites.list_for_user(user.uid)


@router.get("/{site_id}/settings", response_model=SiteRead)
async def get_site_settings(access: SiteAccess = Depends(require_site_access)):
    """Full site record including WordPress credentials."""
    return access.site


@router.patch("/{site_id}/settings", response_model=SiteRead)
async def update_site_settings(
    body: SiteUpdate,
    access: SiteAccess = Depends(require_site_admin),
    store: Store = Depends(get_store),
):
    """Partial update. Only the fields present in the body change."""
    changes = body.model_dump(exclude_unset=True)

    for field, label in (("name", "Site name"), ("slug", "Slug")):
        if field in changes:
            if changes[field] is None or not changes[field].strip():
                raise ValidationError(f"{label} is required")
            changes[field] = changes[field].strip()
    if changes.get("is_active") is None:
        changes.pop("is_active", None)

    site_id = access.site.id
    if "slug" in changes and await store.sites.slug_taken(changes["slug"], exclude_site_id=site_id):
        raise ConflictError("This slug is already in use")

    try:
        site = await store.sites.update(site_id, changes)
    except UniqueConstraintViolation:
        raise ConflictError("This slug is already in use")
    logger.info("Updated site %s settings: %s", site_id, sorted(changes))
    return site


@router.delete("/{site_id}/settings")
async def delete_site(
    access: SiteAccess = Depends(require_site_admin),
    store: Store = Depends(get_store),
):
    """Delete the site and everything that belongs to it."""
    await store.sites.delete(access.site.id)
    logger.info("Deleted site %s (%s)", access.site.id, access.site.slug)
    return {"success": True}
