"""Request-scoped dependencies: store, clock and outbound clients."""

from datetime import datetime
from typing import AsyncIterator

import httpx
from fastapi import Depends, Request

from contentops.config import Settings, get_settings
from contentops.repositories.base import Store
from contentops.schemas.site import SiteRead
from contentops.services.n8n import N8nClient
from contentops.services.scheduling import schedule_now
from contentops.services.wordpress import WordPressClient, WordPressCredentials


async def get_store(request: Request) -> AsyncIterator[Store]:
    """Open the app's store for the duration of one request."""
    async with request.app.state.store_factory() as store:
        yield store


def get_now(settings: Settings = Depends(get_settings)) -> datetime:
    return schedule_now(settings.schedule_timezone)


def get_http_transport() -> httpx.AsyncBaseTransport | None:
    """Transport for outbound calls; None means httpx's default network transport."""
    return None


def get_n8n_client(
    settings: Settings = Depends(get_settings),
    transport: httpx.AsyncBaseTransport | None = Depends(get_http_transport),
) -> N8nClient:
    return N8nClient(settings.n8n_webhook_base_url, timeout=settings.webhook_timeout, transport=transport)


class WordPressClientFactory:
    def __init__(self, timeout: float, transport: httpx.AsyncBaseTransport | None):
        self.timeout = timeout
        self.transport = transport

    def __call__(self, site: SiteRead) -> WordPressClient:
        return WordPressClient(WordPressCredentials.from_site(site), timeout=self.timeout, transport=self.transport)


def get_wordpress_factory(
    settings: Settings = Depends(get_settings),
    transport: httpx.AsyncBaseTransport | None = Depends(get_http_transport),
) -> WordPressClientFactory:
    return WordPressClientFactory(settings.wordpress_timeout, transport)
