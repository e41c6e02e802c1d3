"""Exception hierarchy shared by the token layer, services and routers."""

from __future__ import annotations

from typing import Any


class BridgeError(Exception):
    """Base exception for bridge errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response: Any = None,
    ):
        self.message = message
        self.status_code = status_code
        self.response = response
        super().__init__(self.message)


class ValidationError(BridgeError):
    """Malformed inbound payload."""

    def __init__(self, message: str, response: Any = None):
        super().__init__(message, 400, response)


class AuthenticationError(BridgeError):
    """Upstream rejected our credentials, or none could be produced."""

    def __init__(self, message: str, status_code: int | None = 401, response: Any = None):
        super().__init__(message, status_code, response)


class MissingRefreshTokenError(AuthenticationError):
    """No refresh token is stored for the resource."""


class OAuthError(AuthenticationError):
    """Authorization server returned an error for a token grant."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message, status_code, details)
        self.error_code = error_code
        self.details = details or {}


class NotFoundError(BridgeError):
    """A record the caller relies on does not exist."""


class NoInstallationError(NotFoundError):
    """No installation (access token) exists for the resource."""

    def __init__(self, resource_id: str):
        super().__init__(f"Installation not found for resource: {resource_id}")
        self.resource_id = resource_id


class UpstreamError(BridgeError):
    """Non-auth HTTP failure from the CRM API or the downstream backend."""


class ConfigurationError(BridgeError):
    """A required configuration value is missing or invalid."""


class SSODecryptionError(BridgeError):
    """SSO payload could not be decrypted or parsed."""
