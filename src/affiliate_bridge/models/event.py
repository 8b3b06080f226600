"""Transient webhook event models."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class Platform(str, Enum):
    """Platforms that deliver webhooks to the bridge."""

    NUVEMSHOP = "nuvemshop"
    GOAFFPRO = "goaffpro"


class OrderEventKind(str, Enum):
    """Nuvemshop order events the bridge acts on."""

    PAID = "order/paid"
    CREATED = "order/created"
    UPDATED = "order/updated"


class AffiliateEventKind(str, Enum):
    """GoAffPro events as classified by the bridge."""

    UPSERT = "affiliate_upsert"
    OTHER = "other"


class WebhookEvent(BaseModel):
    """A decoded webhook delivery. Constructed per request, never persisted."""

    platform: Platform
    kind: str = Field(description="Event identifier as delivered (e.g. order/paid)")
    store_id: str | None = Field(
        default=None,
        description="Nuvemshop store ID or GoAffPro account identifier",
    )
    subject_id: str | None = Field(
        default=None,
        description="ID of the order or affiliate the event is about",
    )
    raw_payload: dict[str, Any] = Field(default_factory=dict)
