"""Authorization handler - app installation and SSO decryption."""

from __future__ import annotations

import logging
from typing import Any

from ..auth.manager import TokenManager
from ..auth.oauth import OAuthClient
from ..auth.sso import decrypt_sso
from ..config import BridgeSettings
from ..errors import ValidationError
from ..models.token import InstallationToken

logger = logging.getLogger(__name__)


async def handle_authorization_code(
    code: str | None,
    oauth: OAuthClient,
    manager: TokenManager,
) -> InstallationToken:
    """Exchange an authorization code and persist the installation.

    Raises:
        ValidationError: If no code was supplied
        OAuthError: If the authorization server rejects the code
    """
    if not code:
        raise ValidationError("code is required")

    try:
        tokens = await oauth.exchange_code(code)
        record = await manager.save_installation(tokens.to_installation())
    except Exception:
        logger.exception("Authorization code exchange failed")
        raise

    logger.info("Installed app for %s %s", record.user_type.value, record.resource_id)
    return record


def decrypt_sso_payload(key: str | None, settings: BridgeSettings) -> Any:
    """Decrypt the SSO key posted by a custom page.

    Raises:
        ValidationError: If no key was supplied
        SSODecryptionError: If the key cannot be decrypted
    """
    if not key:
        raise ValidationError("Please send valid key")
    return decrypt_sso(key, settings.ghl_app_sso_key)
