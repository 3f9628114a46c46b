"""Authentication and authorization dependencies for FastAPI routes.

Two kinds of callers:

* n8n sends the shared secret in ``x-api-key``.
* Dashboard users arrive through the upstream auth provider, which sets the
  signed-in uid in ``Settings.user_header``. Platform role comes from
  ``platform_users`` (no row means ``user``); site access from
  ``user_permissions``.
"""

import logging
import secrets
import string
from dataclasses import dataclass
from uuid import UUID

from fastapi import Depends, Header, Request

from contentops.config import Settings, get_settings
from contentops.dependencies.common import get_store
from contentops.errors import AuthenticationError, ConfigurationError, NotFoundError, PermissionDenied
from contentops.repositories.base import Store
from contentops.schemas.platform_user import PlatformRole, PlatformUserRead, SiteRole
from contentops.schemas.site import SiteRead

logger = logging.getLogger(__name__)

API_KEY_PREFIX = "n8n_"
API_KEY_LENGTH = 32
_API_KEY_ALPHABET = string.ascii_letters + string.digits


def generate_api_key() -> str:
    """New shared secret for ``N8N_API_KEY``: ``n8n_`` plus 32 letters/digits."""
    return API_KEY_PREFIX + "".join(secrets.choice(_API_KEY_ALPHABET) for _ in range(API_KEY_LENGTH))


async def require_n8n_api_key(
    x_api_key: str | None = Header(None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Reject machine requests without the configured shared secret."""
    if not settings.n8n_api_key:
        logger.error("N8N_API_KEY is not configured; rejecting n8n request")
        raise ConfigurationError("N8N_API_KEY is not configured on server")
    if not x_api_key:
        raise AuthenticationError("Missing x-api-key header")
    if not secrets.compare_digest(x_api_key, settings.n8n_api_key):
        raise AuthenticationError("Invalid API key")


@dataclass
class CurrentUser:
    uid: str
    role: PlatformRole
    profile: PlatformUserRead | None = None

    @property
    def is_super_admin(self) -> bool:
        return self.role == "super_admin"


@dataclass
class SiteAccess:
    site: SiteRead
    role: SiteRole
    user: CurrentUser


async def get_current_user(
    request: Request,
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> CurrentUser:
    """Return the signed-in user or raise 401."""
    uid = request.headers.get(settings.user_header)
    if not uid:
        raise AuthenticationError("Login required")
    profile = await store.users.get_by_uid(uid)
    return CurrentUser(uid=uid, role=profile.role if profile else "user", profile=profile)


async def require_super_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not user.is_super_admin:
        raise PermissionDenied("Super admin access required")
    return user


async def require_site_access(
    site_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> SiteAccess:
    """Resolve the path's site and the caller's role on it.

    Super admins act as ``admin`` everywhere. Other users need a grant on the
    site; without one they get 403 whether or not the site exists.
    """
    if user.is_super_admin:
        role: SiteRole | None = "admin"
    else:
        role = await store.users.get_site_role(user.uid, site_id)
        if role is None:
            raise PermissionDenied("You do not have access to this site")

    site = await store.sites.get(site_id)
    if site is None:
        raise NotFoundError("Site not found")
    return SiteAccess(site=site, role=role, user=user)


async def require_site_admin(access: SiteAccess = Depends(require_site_access)) -> SiteAccess:
    """Site settings and deletion are limited to site admins."""
    if access.role != "admin":
        raise PermissionDenied("Site admin access required")
    return access
