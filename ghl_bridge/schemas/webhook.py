"""Inbound webhook payload schemas."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

ContactEventType = Literal["ContactCreate", "ContactUpdate", "ContactDelete"]

SUPPORTED_WEBHOOK_TYPES: tuple[str, ...] = ("ContactCreate", "ContactUpdate", "ContactDelete")


class ContactWebhook(BaseModel):
    """HighLevel contact lifecycle event."""

    type: ContactEventType
    location_id: str = Field(alias="locationId", min_length=1)
    id: str = Field(min_length=1)
    first_name: Any = Field(default=None, alias="firstName")
    last_name: Any = Field(default=None, alias="lastName")
    email: Any = None

    model_config = {"populate_by_name": True, "extra": "allow"}


class ZenexaWebhook(BaseModel):
    """Event pushed back to us by the Zenexa backend."""

    type: ContactEventType
    payload: Any
    timestamp: str | None = None
    source: str | None = None

    model_config = {"extra": "allow"}
