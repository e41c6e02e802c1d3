"""Contact webhook processing - enrich from HighLevel, forward to Zenexa.

Handlers never raise: enrichment and forwarding failures are logged so the
inbound webhook is always acknowledged.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

from pydantic import ValidationError as PydanticValidationError

from ..auth.resolver import ResourceResolver
from ..config import BridgeSettings
from ..errors import ValidationError
from ..schemas.webhook import ContactWebhook
from .forwarder import ZenexaForwarder

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class WebhookContext:
    """Collaborators shared by the per-type handlers."""

    resolver: ResourceResolver
    forwarder: ZenexaForwarder
    settings: BridgeSettings


async def retry_with_delay(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int,
    delay: float,
) -> T:
    """Run operation up to max_attempts times (at least once), sleeping attempt * delay in between."""
    max_attempts = max(max_attempts, 1)
    attempt = 1
    while True:
        try:
            return await operation()
        except Exception as e:
            if attempt >= max_attempts:
                raise
            logger.warning("Attempt %d/%d failed: %s", attempt, max_attempts, e)
            await asyncio.sleep(delay * attempt)
            attempt += 1


async def _retry(ctx: WebhookContext, operation: Callable[[], Awaitable[T]]) -> T:
    return await retry_with_delay(
        operation,
        ctx.settings.webhook_retry_attempts,
        ctx.settings.webhook_retry_delay_seconds,
    )


async def get_contact_from_ghl(ctx: WebhookContext, location_id: str, contact_id: str) -> Any:
    """Fetch a contact through a location-scoped client, with retry."""

    async def operation() -> Any:
        company_id = await ctx.resolver.manager.get_company_id_for_location(location_id)
        async with await ctx.resolver.ensure_client(company_id, location_id) as ghl:
            return await ghl.get(f"/contacts/{contact_id}")

    return await _retry(ctx, operation)


async def _forward(ctx: WebhookContext, webhook_type: str, data: Any) -> None:
    await _retry(ctx, lambda: ctx.forwarder.forward(webhook_type, data))


async def _enrich_and_forward(event: ContactWebhook, ctx: WebhookContext) -> None:
    logger.info("Processing %s webhook for contact %s", event.type, event.id)
    try:
        contact = await get_contact_from_ghl(ctx, event.location_id, event.id)
        await _forward(ctx, event.type, contact)
    except Exception:
        logger.exception("%s handler failed for contact %s", event.type, event.id)


async def handle_contact_create(event: ContactWebhook, ctx: WebhookContext) -> None:
    await _enrich_and_forward(event, ctx)


async def handle_contact_update(event: ContactWebhook, ctx: WebhookContext) -> None:
    await _enrich_and_forward(event, ctx)


async def handle_contact_delete(event: ContactWebhook, ctx: WebhookContext) -> None:
    # Deleted contacts can't be fetched; send what the event carries.
    logger.info("Processing ContactDelete webhook for contact %s", event.id)
    data = {
        "contact": {
            "id": event.id,
            "locationId": event.location_id,
            "firstName": event.first_name,
            "lastName": event.last_name,
            "email": event.email,
        }
    }
    try:
        await _forward(ctx, "ContactDelete", data)
    except Exception:
        logger.exception("ContactDelete handler failed for contact %s", event.id)


WebhookHandler = Callable[[ContactWebhook, WebhookContext], Awaitable[None]]

WEBHOOK_HANDLERS: dict[str, WebhookHandler] = {
    "ContactCreate": handle_contact_create,
    "ContactUpdate": handle_contact_update,
    "ContactDelete": handle_contact_delete,
}


def validate_webhook_data(data: Any) -> ContactWebhook:
    """Parse an inbound contact webhook body.

    Raises:
        ValidationError: If type is unsupported or locationId/id are missing
    """
    if not isinstance(data, dict):
        raise ValidationError("Invalid webhook data format")
    try:
        return ContactWebhook.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid webhook data format",
            response=e.errors(include_url=False),
        ) from e


async def process_webhook(event: ContactWebhook, ctx: WebhookContext) -> None:
    handler = WEBHOOK_HANDLERS.get(event.type)
    if handler is None:
        raise ValidationError(f"Unsupported webhook type: {event.type}")
    await handler(event, ctx)
