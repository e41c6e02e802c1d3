"""Authenticated HighLevel API client bound to one company or location.

The bearer token is never captured at construction: ``TokenAuth`` re-reads it
from the TokenManager for every request, and on a 401 runs one refresh cycle
and replays the request once with whatever token is stored afterwards.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncGenerator

import httpx
from sqlalchemy.exc import SQLAlchemyError

from ..config import BridgeSettings, settings as default_settings
from ..errors import (
    AuthenticationError,
    BridgeError,
    MissingRefreshTokenError,
    NoInstallationError,
    UpstreamError,
)
from .manager import TokenManager
from .oauth import OAuthClient

logger = logging.getLogger(__name__)


class TokenRefresher:
    """Runs the refresh_token grant for a resource and stores the rotated pair."""

    def __init__(self, manager: TokenManager, oauth: OAuthClient):
        self.manager = manager
        self.oauth = oauth

    async def refresh(self, resource_id: str) -> None:
        """Refresh the stored access token for a resource.

        Raises:
            MissingRefreshTokenError: If no refresh token is stored
            OAuthError: If the authorization server rejects the grant
        """
        refresh_token = await self.manager.get_refresh_token(resource_id)
        if not refresh_token:
            raise MissingRefreshTokenError(f"No refresh token found for resource: {resource_id}")

        tokens = await self.oauth.refresh_tokens(refresh_token)
        await self.manager.set_token_pair(
            resource_id,
            tokens.access_token,
            tokens.refresh_token,
            expires_in=tokens.expires_in,
        )
        logger.info("Refreshed access token for resource %s", resource_id)


class TokenAuth(httpx.Auth):
    """httpx auth flow: attach the stored bearer token, refresh once on 401."""

    def __init__(self, resource_id: str, manager: TokenManager, refresher: TokenRefresher):
        self.resource_id = resource_id
        self.manager = manager
        self.refresher = refresher

    def sync_auth_flow(self, request):
        raise RuntimeError("TokenAuth only supports httpx.AsyncClient")

    async def async_auth_flow(
        self, request: httpx.Request
    ) -> AsyncGenerator[httpx.Request, httpx.Response]:
        await self._attach_token(request)
        response = yield request

        if response.status_code != 401:
            return

        logger.info("Got 401 for resource %s, refreshing token", self.resource_id)
        try:
            await self.refresher.refresh(self.resource_id)
        except (BridgeError, SQLAlchemyError) as e:
            # Old tokens stay in place; the replay below surfaces the failure.
            logger.error("Token refresh failed for resource %s: %s", self.resource_id, e)

        await self._attach_token(request)
        yield request

    async def _attach_token(self, request: httpx.Request) -> None:
        try:
            token = await self.manager.get_access_token(self.resource_id)
        except (BridgeError, SQLAlchemyError):
            logger.exception("Could not load access token for resource %s", self.resource_id)
            return

        if token:
            request.headers["Authorization"] = f"Bearer {token}"
        else:
            logger.warning("No access token stored for resource %s", self.resource_id)


def _response_payload(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text[:1000]


class AuthenticatedClient:
    """HighLevel API client bound to one resource id.

    Usage:
        async with await factory.bind("loc_123") as ghl:
            contact = await ghl.get("/contacts/abc")
    """

    def __init__(self, resource_id: str, http_client: httpx.AsyncClient):
        self.resource_id = resource_id
        self._client = http_client

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        json: Any = None,
        data: dict | None = None,
        headers: dict | None = None,
    ) -> Any:
        """Make an API request with error handling.

        Raises:
            AuthenticationError: On a 401 that survived one refresh cycle
            UpstreamError: On any other error status, a non-JSON body or transport failure
        """
        try:
            response = await self._client.request(
                method=method,
                url=path,
                params=params,
                json=json,
                data=data,
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise UpstreamError(f"Request to {path} failed: {e.__class__.__name__}") from e

        if response.status_code == 401:
            raise AuthenticationError(
                "Access token rejected after refresh",
                401,
                _response_payload(response),
            )

        if response.is_error:
            raise UpstreamError(
                f"API error: {response.status_code}",
                response.status_code,
                _response_payload(response),
            )

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(
                f"API returned a non-JSON body for {path}",
                response.status_code,
                response.text[:1000],
            ) from e

    async def get(self, path: str, params: dict | None = None, **kwargs) -> Any:
        return await self.request("GET", path, params=params, **kwargs)

    async def post(self, path: str, json: Any = None, **kwargs) -> Any:
        return await self.request("POST", path, json=json, **kwargs)

    async def put(self, path: str, json: Any = None, **kwargs) -> Any:
        return await self.request("PUT", path, json=json, **kwargs)

    async def delete(self, path: str, **kwargs) -> Any:
        return await self.request("DELETE", path, **kwargs)


class ClientFactory:
    """Builds AuthenticatedClients that share one manager and refresher."""

    def __init__(
        self,
        manager: TokenManager,
        refresher: TokenRefresher,
        settings: BridgeSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.manager = manager
        self.refresher = refresher
        self.settings = settings or default_settings
        self._transport = transport

    async def bind(self, resource_id: str) -> AuthenticatedClient:
        """Create a client for a company or location id.

        Raises:
            NoInstallationError: If no access token is stored for the resource
        """
        if not await self.manager.get_access_token(resource_id):
            raise NoInstallationError(resource_id)

        http_client = httpx.AsyncClient(
            base_url=self.settings.ghl_api_domain,
            headers={
                "Accept": "application/json",
                "Version": self.settings.ghl_api_version,
            },
            timeout=self.settings.ghl_timeout_seconds,
            auth=TokenAuth(resource_id, self.manager, self.refresher),
            transport=self._transport,
        )
        return AuthenticatedClient(resource_id, http_client)
