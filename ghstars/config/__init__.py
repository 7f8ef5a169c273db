"""Configuration package."""

from ghstars.config.settings import Settings, settings
from ghstars.config.stars import (
    DEFAULT_DISPLAY_FORMAT,
    STARS_PLACEHOLDER,
    NumberFormat,
    StarsSettings,
)

__all__ = [
    "DEFAULT_DISPLAY_FORMAT",
    "NumberFormat",
    "STARS_PLACEHOLDER",
    "Settings",
    "StarsSettings",
    "settings",
]
