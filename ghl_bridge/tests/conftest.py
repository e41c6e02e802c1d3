"""Async test fixtures for bridge tests using a temporary SQLite file and a fake upstream."""

from __future__ import annotations

import json
from typing import Any, Callable, Union
from urllib.parse import parse_qs

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from ghl_bridge.auth.manager import TokenManager
from ghl_bridge.config import BridgeSettings
from ghl_bridge.database import TokenStore
from ghl_bridge.deps import build_services
from ghl_bridge.models.token import AppUserType
from ghl_bridge.schemas.token import InstallationDetails

SAMPLE_COMPANY_ID = "comp_test456"
SAMPLE_LOCATION_ID = "loc_test123"
SAMPLE_CONTACT_ID = "contact_jkl012"

GHL_DOMAIN = "https://ghl.test"
ZENEXA_URL = "https://zenexa.test"

Responder = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


class FakeUpstream:
    """Routes requests from every outbound client to queued responses.

    Each route holds a queue; the last response repeats once the queue drains.
    Unrouted requests get a 404.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], list[Responder]] = {}

    def add(self, method: str, path: str, *responses: Responder) -> None:
        self._routes.setdefault((method.upper(), path), []).extend(responses)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method.upper() and r.url.path == path
        ]

    def handler(self, request: httpx.Request) -> httpx.Response:
        # Snapshot: auth flows resend the same Request object with new headers.
        self.requests.append(
            httpx.Request(
                request.method,
                request.url,
                headers=dict(request.headers),
                content=request.content,
            )
        )
        queue = self._routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"message": "Not found"})
        responder = queue.pop(0) if len(queue) > 1 else queue[0]
        if callable(responder):
            return responder(request)
        return responder


def form_data(request: httpx.Request) -> dict[str, str]:
    """Decode an application/x-www-form-urlencoded request body."""
    return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}


def json_body(request: httpx.Request) -> Any:
    return json.loads(request.content.decode())


def token_response(
    access_token: str,
    refresh_token: str,
    user_type: str = "Location",
    company_id: str | None = SAMPLE_COMPANY_ID,
    location_id: str | None = SAMPLE_LOCATION_ID,
) -> httpx.Response:
    data: dict[str, Any] = {
        "access_token": access_token,
        "token_type": "Bearer",
        "expires_in": 86399,
        "refresh_token": refresh_token,
        "scope": "contacts.readonly contacts.write",
        "userType": user_type,
    }
    if company_id:
        data["companyId"] = company_id
    if location_id:
        data["locationId"] = location_id
    return httpx.Response(200, json=data)


@pytest.fixture
def settings(tmp_path):
    return BridgeSettings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'tokens.db'}",
        ghl_api_domain=GHL_DOMAIN,
        ghl_app_client_id="test_client_id",
        ghl_app_client_secret="test_client_secret",
        ghl_app_sso_key="test_sso_secret",
        zenexa_backend_url=ZENEXA_URL,
        webhook_retry_attempts=3,
        webhook_retry_delay_seconds=0.0,
        default_location_id="loc_default",
    )


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def transport(upstream: FakeUpstream):
    return httpx.MockTransport(upstream.handler)


@pytest_asyncio.fixture
async def store(settings: BridgeSettings):
    token_store = TokenStore(settings.database_url)
    await token_store.connect()
    yield token_store
    await token_store.disconnect()


@pytest.fixture
def manager(store: TokenStore):
    return TokenManager(store)


@pytest.fixture
def services(settings, store, transport):
    return build_services(settings, store=store, transport=transport)


@pytest.fixture
def install(manager: TokenManager):
    """Factory fixture that stores an installation record."""

    async def _install(
        user_type: AppUserType = AppUserType.LOCATION,
        company_id: str | None = SAMPLE_COMPANY_ID,
        location_id: str | None = SAMPLE_LOCATION_ID,
        access_token: str = "access_1",
        refresh_token: str = "refresh_1",
    ):
        return await manager.save_installation(
            InstallationDetails(
                access_token=access_token,
                refresh_token=refresh_token,
                expires_in=86399,
                scope="contacts.readonly",
                userType=user_type,
                companyId=company_id,
                locationId=location_id,
            )
        )

    return _install


@pytest_asyncio.fixture
async def client(settings, services):
    """HTTPX async test client against the bridge app."""
    from ghl_bridge.app import create_app

    app = create_app(settings, services)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
