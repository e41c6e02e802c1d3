"""Token lifecycle: storage access, OAuth grants, authenticated requests.

Usage:
    from ghl_bridge.auth import TokenManager, ResourceResolver

    manager = TokenManager(store)
    refresher = TokenRefresher(manager, OAuthClient.from_settings())
    resolver = ResourceResolver(ClientFactory(manager, refresher))

    async with await resolver.ensure_client(company_id, location_id) as ghl:
        contact = await ghl.get(f"/contacts/{contact_id}")
"""

from .client import AuthenticatedClient, ClientFactory, TokenAuth, TokenRefresher
from .manager import TokenManager
from .oauth import OAuthClient, OAuthTokens
from .resolver import ResourceResolver
from .sso import decrypt_sso

__all__ = [
    "AuthenticatedClient",
    "ClientFactory",
    "TokenAuth",
    "TokenRefresher",
    "TokenManager",
    "OAuthClient",
    "OAuthTokens",
    "ResourceResolver",
    "decrypt_sso",
]
