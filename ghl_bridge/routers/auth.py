"""App installation callback and SSO decryption."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse

from ..deps import BridgeServices, get_services
from ..errors import ConfigurationError, SSODecryptionError, ValidationError
from ..services.auth_svc import decrypt_sso_payload, handle_authorization_code
from .responses import error_response

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.get("/authorize-handler")
async def authorize_handler(
    code: str | None = None,
    services: BridgeServices = Depends(get_services),
):
    try:
        await handle_authorization_code(code, services.oauth, services.manager)
    except ValidationError as e:
        return error_response("Authorization failed", e, status_code=400)
    except Exception as e:
        return error_response("Authorization failed", e, status_code=500)
    return RedirectResponse(services.settings.authorize_redirect_url, status_code=302)


@router.post("/decrypt-sso")
async def decrypt_sso_route(
    request: Request,
    services: BridgeServices = Depends(get_services),
):
    try:
        body = await request.json()
    except ValueError:
        body = None
    key = body.get("key") if isinstance(body, dict) else None

    try:
        data = decrypt_sso_payload(key, services.settings)
    except ValidationError:
        return PlainTextResponse("Please send valid key", status_code=400)
    except SSODecryptionError as e:
        logger.warning("SSO decryption error: %s", e)
        return PlainTextResponse("Invalid Key", status_code=400)
    except ConfigurationError as e:
        logger.error("SSO decryption unavailable: %s", e)
        return error_response("SSO is not configured", e, status_code=500)
    return JSONResponse(data)
