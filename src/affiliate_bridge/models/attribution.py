"""Marketing attribution captured from storefront sessions."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, field_validator

# Tags harvested by the storefront capture script
ATTRIBUTION_TAGS: tuple[str, ...] = (
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_content",
    "utm_term",
    "gclid",
    "fbclid",
    "ref",
)


def normalize_customer_key(email: str) -> str:
    """Normalize an email into the key attribution is stored under."""
    return email.strip().lower()


class AttributionRecord(BaseModel):
    """Most recent attribution tags observed for a customer email."""

    customer_key: str = Field(description="Normalized lowercase email")
    tags: dict[str, str] = Field(
        default_factory=dict,
        description="Attribution field name -> value (utm_source, utm_medium, ...)",
    )
    captured_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def tag(self, name: str) -> str | None:
        value = self.tags.get(name)
        return value or None


class AttributionCapture(BaseModel):
    """Body posted by the storefront capture script.

    Only ``email`` is declared; every other key is kept as an attribution tag.
    """

    model_config = {"extra": "allow"}

    email: str | None = None

    @field_validator("email", mode="before")
    @classmethod
    def _email_text_only(cls, value: Any) -> str | None:
        # Anything but a string is handled as a missing email (400, not 422)
        return value if isinstance(value, str) else None

    def tags(self) -> dict[str, str]:
        """Extra fields as string tags, dropping empty values."""
        extra = self.model_extra or {}
        return {
            str(key): str(value)
            for key, value in extra.items()
            if value is not None and value != ""
        }
