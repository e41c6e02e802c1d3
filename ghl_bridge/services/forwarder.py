"""Forwarding of enriched contact events to the Zenexa backend."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config import BridgeSettings
from ..errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)


class ZenexaForwarder:
    """POSTs ``{"type": ..., "data": ...}`` to {ZENEXA_BACKEND_URL}/api/webhook/ghl."""

    def __init__(
        self,
        settings: BridgeSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self._transport = transport

    async def forward(self, webhook_type: str, data: Any) -> None:
        """Send one event downstream.

        Raises:
            ConfigurationError: If ZENEXA_BACKEND_URL is not set
            UpstreamError: If the backend is unreachable or answers with an error
        """
        url = self.settings.zenexa_webhook_url
        if not url:
            raise ConfigurationError("ZENEXA_BACKEND_URL environment variable is not configured")

        logger.info("Forwarding %s to Zenexa backend at %s", webhook_type, url)
        async with httpx.AsyncClient(
            timeout=self.settings.zenexa_timeout_seconds,
            transport=self._transport,
        ) as client:
            try:
                response = await client.post(url, json={"type": webhook_type, "data": data})
            except httpx.HTTPError as e:
                raise UpstreamError(
                    f"Zenexa call for {webhook_type} failed: {e.__class__.__name__}"
                ) from e

        if response.is_error:
            raise UpstreamError(
                f"Zenexa call for {webhook_type} failed: {response.status_code}",
                response.status_code,
                response.text[:1000],
            )
        logger.info("Zenexa accepted %s (status %s)", webhook_type, response.status_code)
