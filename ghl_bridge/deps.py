"""Service container and FastAPI dependencies."""

from __future__ import annotations

from dataclasses import dataclass

import httpx
from fastapi import Request

from .auth.client import ClientFactory, TokenRefresher
from .auth.manager import TokenManager
from .auth.oauth import OAuthClient
from .auth.resolver import ResourceResolver
from .config import BridgeSettings
from .database import TokenStore
from .services.forwarder import ZenexaForwarder
from .services.webhook_svc import WebhookContext


@dataclass
class BridgeServices:
    """Everything a request handler needs, built once per process."""

    settings: BridgeSettings
    store: TokenStore
    manager: TokenManager
    oauth: OAuthClient
    resolver: ResourceResolver
    forwarder: ZenexaForwarder

    @property
    def webhook_context(self) -> WebhookContext:
        return WebhookContext(
            resolver=self.resolver,
            forwarder=self.forwarder,
            settings=self.settings,
        )


def build_services(
    settings: BridgeSettings,
    store: TokenStore | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> BridgeServices:
    """Wire the token layer together.

    ``transport`` replaces the network for every outbound client (CRM API,
    token endpoint and Zenexa); tests pass an ``httpx.MockTransport``.
    """
    store = store or TokenStore(settings.database_url, echo=settings.echo_sql)
    manager = TokenManager(store)
    oauth = OAuthClient.from_settings(settings, transport=transport)
    factory = ClientFactory(
        manager,
        TokenRefresher(manager, oauth),
        settings=settings,
        transport=transport,
    )
    return BridgeServices(
        settings=settings,
        store=store,
        manager=manager,
        oauth=oauth,
        resolver=ResourceResolver(factory),
        forwarder=ZenexaForwarder(settings, transport=transport),
    )


def get_services(request: Request) -> BridgeServices:
    """FastAPI dependency returning the app's service container."""
    return request.app.state.services
