"""OAuth 2.0 token grants for the HighLevel marketplace app.

Handles the two grants the bridge needs:
1. authorization_code - first install, from the /authorize-handler redirect
2. refresh_token - reactive refresh after a 401
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from ..config import BridgeSettings, settings as default_settings
from ..errors import ConfigurationError, OAuthError
from ..schemas.token import InstallationDetails


@dataclass
class OAuthTokens:
    """Tokens returned from the authorization server."""

    access_token: str
    refresh_token: str
    expires_in: int  # seconds
    token_type: str = "Bearer"
    scope: str = ""
    user_type: str | None = None  # "Company" or "Location"
    company_id: str | None = None
    location_id: str | None = None

    def to_installation(self) -> InstallationDetails:
        """Convert to the persisted installation shape.

        Raises:
            OAuthError: If the grant did not say who the token belongs to
        """
        try:
            return InstallationDetails(
                access_token=self.access_token,
                refresh_token=self.refresh_token,
                expires_in=self.expires_in,
                token_type=self.token_type,
                scope=self.scope,
                userType=self.user_type,
                companyId=self.company_id,
                locationId=self.location_id,
            )
        except PydanticValidationError as e:
            raise OAuthError(
                "Token response does not identify an installation",
                error_code="invalid_response",
                details={"errors": e.errors(include_url=False)},
            ) from e


class OAuthClient:
    """Client-credential token grants against {GHL_API_DOMAIN}/oauth/token.

    Usage:
        client = OAuthClient.from_settings()
        tokens = await client.exchange_code(code)
        tokens = await client.refresh_tokens(tokens.refresh_token)
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        token_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_url = token_url
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: BridgeSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "OAuthClient":
        """Create client from process configuration."""
        settings = settings or default_settings
        return cls(
            client_id=settings.ghl_app_client_id,
            client_secret=settings.ghl_app_client_secret,
            token_url=settings.token_url,
            timeout=settings.ghl_timeout_seconds,
            transport=transport,
        )

    async def exchange_code(self, code: str) -> OAuthTokens:
        """Exchange authorization code for access tokens.

        Raises:
            ConfigurationError: If client credentials are not set
            OAuthError: If exchange fails
        """
        return await self._grant(
            {"grant_type": "authorization_code", "code": code},
            failure="exchange",
        )

    async def refresh_tokens(self, refresh_token: str) -> OAuthTokens:
        """Refresh access token using refresh token.

        Raises:
            OAuthError: If refresh fails
        """
        return await self._grant(
            {"grant_type": "refresh_token", "refresh_token": refresh_token},
            failure="refresh",
        )

    async def _grant(self, params: dict[str, str], failure: str) -> OAuthTokens:
        if not self.client_id or not self.client_secret:
            raise ConfigurationError(
                "GHL_APP_CLIENT_ID and GHL_APP_CLIENT_SECRET must be configured"
            )

        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            **params,
        }
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.post(
                    self.token_url,
                    data=data,
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
            except httpx.HTTPError as e:
                raise OAuthError(
                    f"Token {failure} request failed: {e.__class__.__name__}",
                    error_code=f"{failure}_failed",
                ) from e

            if response.status_code != 200:
                try:
                    error_data = response.json() if response.content else {}
                except ValueError:
                    error_data = {"raw_response": response.text[:500]}
                if not isinstance(error_data, dict):
                    error_data = {"raw_response": str(error_data)[:500]}
                raise OAuthError(
                    f"Token {failure} failed: {response.status_code}",
                    error_code=error_data.get("error", f"{failure}_failed"),
                    details=error_data,
                    status_code=response.status_code,
                )

            try:
                body = response.json()
            except ValueError as e:
                raise OAuthError(
                    f"Token {failure} returned a non-JSON body",
                    error_code="invalid_response",
                    details={"raw_response": response.text[:500]},
                ) from e
            if not isinstance(body, dict):
                raise OAuthError(
                    f"Token {failure} returned an unexpected body",
                    error_code="invalid_response",
                    details={"raw_response": str(body)[:500]},
                )
            return self._parse_token_response(body)

    def _parse_token_response(self, data: dict[str, Any]) -> OAuthTokens:
        """Parse token response.

        Raises:
            OAuthError: If required fields are missing
        """
        try:
            return OAuthTokens(
                access_token=data["access_token"],
                refresh_token=data["refresh_token"],
                expires_in=data.get("expires_in", 86400),
                token_type=data.get("token_type", "Bearer"),
                scope=data.get("scope", ""),
                user_type=data.get("userType"),
                company_id=data.get("companyId"),
                location_id=data.get("locationId"),
            )
        except KeyError as e:
            raise OAuthError(
                f"Invalid token response: missing {e}",
                error_code="invalid_response",
                details={"missing_field": str(e), "response_keys": list(data.keys())},
            )
