"""Resource resolver - hands out location-scoped clients, minting tokens as needed."""

from __future__ import annotations

import asyncio
import logging
import weakref

from ..errors import UpstreamError
from ..models.token import AppUserType
from ..schemas.token import InstallationDetails
from .client import AuthenticatedClient, ClientFactory
from .manager import TokenManager

logger = logging.getLogger(__name__)

LOCATION_TOKEN_PATH = "/oauth/locationToken"


class ResourceResolver:
    """Ensures a usable client exists for a location.

    A location that never installed the app directly gets its token minted
    from the company installation via /oauth/locationToken. Mints for the
    same location are serialized so concurrent first requests exchange once.
    """

    def __init__(self, factory: ClientFactory):
        self.factory = factory
        # Entries drop out once no caller holds the lock.
        self._mint_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    @property
    def manager(self) -> TokenManager:
        return self.factory.manager

    def _mint_lock(self, location_id: str) -> asyncio.Lock:
        lock = self._mint_locks.get(location_id)
        if lock is None:
            lock = self._mint_locks[location_id] = asyncio.Lock()
        return lock

    async def ensure_client(self, company_id: str, location_id: str) -> AuthenticatedClient:
        if not await self.manager.check_exists(location_id):
            async with self._mint_lock(location_id):
                if not await self.manager.check_exists(location_id):
                    await self.mint_location_token(company_id, location_id)
        return await self.factory.bind(location_id)

    async def mint_location_token(self, company_id: str, location_id: str) -> InstallationDetails:
        """Exchange the company token for a location token and store it.

        Raises:
            NoInstallationError: If the company has no installation
            AuthenticationError / UpstreamError: If the exchange is rejected
        """
        async with await self.factory.bind(company_id) as company_client:
            data = await company_client.post(
                LOCATION_TOKEN_PATH,
                data={"companyId": company_id, "locationId": location_id},
            )

        if not isinstance(data, dict):
            raise UpstreamError("Unexpected location token response", response=data)

        data.setdefault("userType", AppUserType.LOCATION.value)
        data.setdefault("companyId", company_id)
        data.setdefault("locationId", location_id)
        try:
            details = InstallationDetails.model_validate(data)
        except ValueError as e:
            raise UpstreamError("Invalid location token response", response=data) from e

        await self.manager.save_installation(details)
        logger.info("Minted location token for %s from company %s", location_id, company_id)
        return details
