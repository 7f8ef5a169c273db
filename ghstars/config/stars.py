"""User-facing star display settings.

These are persisted in the state blob next to the star cache, using the
camelCase keys of the stored JSON object:

- cacheExpiry: minutes before a cached star count is considered stale
- displayFormat: badge template, must contain the {stars} placeholder
- apiToken: optional GitHub token for higher rate limits
- numberFormat: "full" (1,234) or "abbreviated" (1.2k)
"""

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

STARS_PLACEHOLDER = "{stars}"
DEFAULT_DISPLAY_FORMAT = "⭐ {stars}"
DEFAULT_CACHE_EXPIRY_MINUTES = 60


class NumberFormat(str, Enum):
    """How star counts are rendered."""

    FULL = "full"
    ABBREVIATED = "abbreviated"


class StarsSettings(BaseModel):
    """Settings that drive caching and formatting of star counts."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        validate_assignment=True,
    )

    cache_expiry: int = Field(DEFAULT_CACHE_EXPIRY_MINUTES, alias="cacheExpiry", gt=0)
    display_format: str = Field(DEFAULT_DISPLAY_FORMAT, alias="displayFormat")
    api_token: str = Field("", alias="apiToken")
    number_format: NumberFormat = Field(NumberFormat.ABBREVIATED, alias="numberFormat")

    @field_validator("display_format")
    @classmethod
    def require_placeholder(cls, value: str) -> str:
        if STARS_PLACEHOLDER not in value:
            raise ValueError(f"Display format must include {STARS_PLACEHOLDER} placeholder")
        return value

    @property
    def expiry_window_ms(self) -> int:
        """Cache expiry window in milliseconds."""
        return self.cache_expiry * 60 * 1000

    @property
    def token(self) -> str | None:
        """Trimmed API token, or None when unset or blank."""
        token = self.api_token.strip()
        return token or None

    def to_blob(self) -> dict[str, Any]:
        """Serialize using the persisted camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")

    @classmethod
    def from_blob(cls, data: Mapping[str, Any] | None) -> "StarsSettings":
        """
        Build settings from a persisted blob.

        Missing and unknown keys are ignored. A key whose stored value fails
        validation falls back to its default instead of discarding the other
        settings.
        """
        if not data:
            return cls()

        values: dict[str, Any] = {}
        for name, field in cls.model_fields.items():
            key = field.alias or name
            if key not in data:
                continue
            try:
                cls.model_validate({key: data[key]})
            except ValidationError:
                logger.warning(f"Ignoring invalid stored setting {key}={data[key]!r}, using default")
                continue
            values[key] = data[key]

        return cls.model_validate(values)
