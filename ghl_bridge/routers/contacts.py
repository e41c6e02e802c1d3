"""Contact read routes backed by location-scoped clients."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from ..deps import BridgeServices, get_services
from ..errors import BridgeError, NotFoundError
from ..services.contacts_svc import list_location_contacts, search_contacts
from .responses import error_response

logger = logging.getLogger(__name__)

router = APIRouter(tags=["contacts"])


@router.get("/get-contacts")
async def get_contacts(
    location_id: str = Query("", alias="locationId"),
    company_id: str = Query("", alias="companyId"),
    services: BridgeServices = Depends(get_services),
):
    if not location_id:
        return JSONResponse({"error": "locationId is required"}, status_code=400)
    if not company_id:
        return JSONResponse({"error": "companyId is required"}, status_code=400)

    try:
        data = await search_contacts(services.resolver, company_id, location_id)
    except NotFoundError as e:
        return error_response("Error fetching contacts", e, status_code=400)
    except BridgeError as e:
        return error_response("Error fetching contacts", e)
    except Exception as e:
        logger.exception("Unexpected error fetching contacts for %s", location_id)
        return error_response("Unexpected server error", e, status_code=500)
    return JSONResponse(data)


@router.get("/example-api-call-location/{location_id}")
async def example_api_call_location(
    location_id: str,
    query_location_id: str = Query("", alias="locationId"),
    company_id: str = Query("", alias="companyId"),
    services: BridgeServices = Depends(get_services),
):
    """Demo read path: list a location's contacts, minting its token if needed.

    Minting only works when the app is distributed to both agencies and
    sub-accounts with the OAuth read-write scopes configured.
    """
    target_location = query_location_id or location_id
    try:
        if not company_id and not await services.manager.check_exists(target_location):
            return JSONResponse({"error": "companyId is required"}, status_code=400)
        data = await list_location_contacts(services.resolver, company_id, target_location)
    except Exception as e:
        logger.exception("Location contacts error for %s", target_location)
        return error_response("Error fetching location contacts", e, status_code=400)
    return JSONResponse(data)
