"""Contact reads through location-scoped clients."""

from __future__ import annotations

import logging
from typing import Any

from ..auth.resolver import ResourceResolver
from ..errors import AuthenticationError

logger = logging.getLogger(__name__)


def _search_body(location_id: str) -> dict[str, Any]:
    return {
        "filters": [],
        "locationId": location_id,
        "query": "",
        "page": 1,
        "pageLimit": 10,
    }


async def search_contacts(
    resolver: ResourceResolver,
    company_id: str,
    location_id: str,
) -> Any:
    """Search the first page of a location's contacts.

    A 401 that survives the client's own refresh usually means the location
    token was revoked or rotated elsewhere, so mint a fresh one from the
    company token and try once more.
    """
    body = _search_body(location_id)
    async with await resolver.ensure_client(company_id, location_id) as ghl:
        try:
            return await ghl.post("/contacts/search", json=body)
        except AuthenticationError:
            logger.warning(
                "Contact search unauthorized for %s, re-minting location token", location_id
            )

    await resolver.mint_location_token(company_id, location_id)
    async with await resolver.ensure_client(company_id, location_id) as ghl:
        return await ghl.post("/contacts/search", json=body)


async def list_location_contacts(
    resolver: ResourceResolver,
    company_id: str,
    location_id: str,
) -> Any:
    """List contacts for a location, minting its token from the company if needed."""
    async with await resolver.ensure_client(company_id, location_id) as ghl:
        return await ghl.get("/contacts/", params={"locationId": location_id})
