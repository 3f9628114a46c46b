"""Super admin endpoints: sites, platform users, permissions and API keys."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status

from contentops.dependencies.auth import CurrentUser, generate_api_key, require_super_admin
from contentops.dependencies.common import get_store
from contentops.errors import ConflictError, NotFoundError, UniqueConstraintViolation, ValidationError
from contentops.repositories.base import Store
from contentops.schemas.platform_user import (
    PermissionGrant,
    PlatformRoleUpdate,
    PlatformUserRead,
    PlatformUserUpsert,
    UserPermissionRead,
)
from contentops.schemas.site import SiteActiveUpdate, SiteCreate, SiteRead

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/sites", response_model=list[SiteRead])
async def list_all_sites(
    _: CurrentUser = Depends(require_super_admin),
    store: Store = Depends(get_store),
):
    """Every site on the platform, newest first."""
    return await store.sites.list()


@router.post("/sites", response_model=SiteRead, status_code=status.HTTP_201_CREATED)
async def create_site(
    body: SiteCreate,
    admin: CurrentUser = Depends(require_super_admin),
    store: Store = Depends(get_store),
):
    data = body.model_copy(update={"name": body.name.strip(), "slug": body.slug.strip()})
    if not data.name or not data.slug:
        raise ValidationError("Site name and slug are required")
    if await store.sites.slug_taken(data.slug):
        raise ConflictError("This slug is already in use")
    try:
        site = await store.sites.add(data)
    except UniqueConstraintViolation:
        raise ConflictError("This slug is already in use")
    logger.info("Super admin %s created site %s (%s)", admin.uid, site.id, site.slug)
    return site


@router.patch("/sites/{site_id}/active", response_model=SiteRead)
async def set_site_active(
    site_id: UUID,
    body: SiteActiveUpdate,
    _: CurrentUser = Depends(require_super_admin),
    store: Store = Depends(get_store),
):
    """Inactive sites drop out of the due-schedule feed."""
    site = await store.sites.update(site_id, {"is_active": body.is_active})
    if not site:
        raise NotFoundError("Site not found")
    return site


@router.get("/users", response_model=list[PlatformUserRead])
async def list_platform_users(
    _: CurrentUser = Depends(require_super_admin),
    store: Store = Depends(get_store),
):
    return await store.users.list()


@router.put("/users", response_model=PlatformUserRead)
async def upsert_platform_user(
    body: PlatformUserUpsert,
    _: CurrentUser = Depends(require_super_admin),
    store: Store = Depends(get_store),
):
    """Create or update a platform user by auth-provider uid."""
    return await store.users.upsert(body)


@router.patch("/users/{user_id}/role", response_model=PlatformUserRead)
async def update_platform_user_role(
    user_id: UUID,
    body: PlatformRoleUpdate,
    admin: CurrentUser = Depends(require_super_admin),
    store: Store = Depends(get_store),
):
    user = await store.users.update_role(user_id, body.role)
    if not user:
        raise NotFoundError("User not found")
    logger.info("Super admin %s set %s role to %s", admin.uid, user.firebase_uid, body.role)
    return user


@router.delete("/users/{user_id}")
async def delete_platform_user(
    user_id: UUID,
    admin: CurrentUser = Depends(require_super_admin),
    store: Store = Depends(get_store),
):
    target = await store.users.get(user_id)
    if not target:
        raise NotFoundError("User not found")
    if target.firebase_uid == admin.uid:
        raise ConflictError("You cannot delete your own account")
    await store.users.delete(user_id)
    return {"success": True}


@router.put("/sites/{site_id}/permissions", response_model=UserPermissionRead)
async def grant_site_permission(
    site_id: UUID,
    body: PermissionGrant,
    _: CurrentUser = Depends(require_super_admin),
    store: Store = Depends(get_store),
):
    """Give a user a role on a site, replacing any existing role."""
    if not await store.sites.get(site_id):
        raise NotFoundError("Site not found")
    return await store.users.grant(body.firebase_uid, site_id, body.role)


@router.delete("/sites/{site_id}/permissions/{firebase_uid}")
async def revoke_site_permission(
    site_id: UUID,
    firebase_uid: str,
    _: CurrentUser = Depends(require_super_admin),
    store: Store = Depends(get_store),
):
    if not await store.users.revoke(firebase_uid, site_id):
        raise NotFoundError("Permission not found")
    return {"success": True}


@router.post("/api-keys")
async def create_api_key(admin: CurrentUser = Depends(require_super_admin)):
    """Generate a key to install as N8N_API_KEY. Nothing is stored server-side."""
    logger.info("Super admin %s generated a new n8n API key", admin.uid)
    return {"apiKey": generate_api_key()}
