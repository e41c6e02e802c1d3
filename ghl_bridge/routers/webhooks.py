"""Inbound webhooks from HighLevel and from the Zenexa backend."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..deps import BridgeServices, get_services
from ..errors import ValidationError
from ..services.webhook_svc import process_webhook, validate_webhook_data
from ..services.zenexa_svc import (
    build_zenexa_response,
    process_zenexa_webhook,
    validate_zenexa_webhook_data,
)
from .responses import error_response

logger = logging.getLogger(__name__)

router = APIRouter(tags=["webhooks"])


async def _json_body(request: Request):
    try:
        return await request.json()
    except ValueError:
        return None


@router.post("/webhook-handler")
async def webhook_handler(
    request: Request,
    services: BridgeServices = Depends(get_services),
):
    body = await _json_body(request)
    logger.info("Webhook received: type=%s", body.get("type") if isinstance(body, dict) else None)

    try:
        event = validate_webhook_data(body)
    except ValidationError as e:
        logger.info("Invalid webhook data format")
        return JSONResponse({"error": e.message}, status_code=400)

    try:
        await process_webhook(event, services.webhook_context)
    except Exception as e:
        logger.exception("Webhook processing error")
        return error_response(
            "Webhook processing failed",
            e,
            status_code=500,
            webhookType=event.type,
            contactId=event.id,
        )

    return {
        "message": "Webhook processed successfully",
        "webhookType": event.type,
        "contactId": event.id,
    }


@router.post("/zenexa-webhook")
async def zenexa_webhook(
    request: Request,
    services: BridgeServices = Depends(get_services),
):
    body = await _json_body(request)

    try:
        event = validate_zenexa_webhook_data(body)
    except ValidationError as e:
        return JSONResponse({"error": e.message}, status_code=400)

    try:
        await process_zenexa_webhook(event)
    except Exception as e:
        logger.exception("Zenexa webhook processing error")
        return error_response(
            "Zenexa webhook processing failed",
            e,
            status_code=500,
            webhookType=event.type,
        )

    return build_zenexa_response(event, services.settings)
