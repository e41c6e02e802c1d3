"""Events pushed to us by the Zenexa backend."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from pydantic import ValidationError as PydanticValidationError

from ..config import BridgeSettings
from ..errors import ValidationError
from ..schemas.webhook import ZenexaWebhook

logger = logging.getLogger(__name__)


def _log_event(event_type: str, payload: Any) -> None:
    logger.info("Zenexa webhook event: %s", event_type)
    logger.debug("Zenexa %s payload: %s", event_type, json.dumps(payload, indent=2, default=str))


async def handle_zenexa_contact_create(payload: Any) -> None:
    _log_event("ContactCreate", payload)


async def handle_zenexa_contact_update(payload: Any) -> None:
    _log_event("ContactUpdate", payload)


async def handle_zenexa_contact_delete(payload: Any) -> None:
    _log_event("ContactDelete", payload)


ZENEXA_WEBHOOK_HANDLERS: dict[str, Callable[[Any], Awaitable[None]]] = {
    "ContactCreate": handle_zenexa_contact_create,
    "ContactUpdate": handle_zenexa_contact_update,
    "ContactDelete": handle_zenexa_contact_delete,
}


def validate_zenexa_webhook_data(data: Any) -> ZenexaWebhook:
    """Parse an inbound Zenexa webhook body.

    Raises:
        ValidationError: If type is unsupported or payload is missing
    """
    if not isinstance(data, dict):
        raise ValidationError("Invalid Zenexa webhook data format")
    try:
        return ZenexaWebhook.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError("Invalid Zenexa webhook data format") from e


async def process_zenexa_webhook(event: ZenexaWebhook) -> None:
    handler = ZENEXA_WEBHOOK_HANDLERS.get(event.type)
    if handler is None:
        raise ValidationError(f"Unsupported Zenexa webhook type: {event.type}")
    await handler(event.payload)


def _contact_fields(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        return {}
    contact = payload.get("contact")
    if isinstance(contact, dict):
        return contact
    return payload


def build_zenexa_response(event: ZenexaWebhook, settings: BridgeSettings) -> dict[str, Any]:
    """Acknowledgment body: message, webhookType, timestamp plus contact fields."""
    contact = _contact_fields(event.payload)
    body: dict[str, Any] = {
        "message": "Zenexa webhook processed successfully",
        "webhookType": event.type,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "contactId": contact.get("id"),
        "locationId": contact.get("locationId") or settings.default_location_id,
    }
    if event.type == "ContactDelete":
        body["deleted"] = True
    return body
