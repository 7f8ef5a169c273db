"""
Process-wide star state: user settings plus the star cache.

Both are stored together in one blob (settings flattened next to a "cache"
key), loaded once at startup and written back after every mutation.
"""

import logging
from collections.abc import Mapping
from typing import Any

from ghstars.config.stars import StarsSettings
from ghstars.services.cache.persistence import PersistencePort
from ghstars.services.cache.store import StarCache

logger = logging.getLogger(__name__)

CACHE_KEY = "cache"


class StarsState:
    """Owns the settings and cache, and flushes them through a persistence port."""

    def __init__(
        self,
        persistence: PersistencePort,
        settings: StarsSettings | None = None,
        cache: StarCache | None = None,
    ) -> None:
        self.persistence = persistence
        self.settings = settings or StarsSettings()
        self.cache = cache or StarCache()

    @classmethod
    async def load(cls, persistence: PersistencePort) -> "StarsState":
        """Load the stored blob, falling back to defaults for anything unusable."""
        try:
            data = await persistence.load()
        except Exception:
            logger.exception("Error loading stored state, starting with defaults")
            data = None

        data = data or {}
        state = cls(
            persistence,
            settings=StarsSettings.from_blob(data),
            cache=StarCache.from_blob(data.get(CACHE_KEY)),
        )
        logger.info(f"Loaded star state with {len(state.cache)} cached repositories")
        return state

    def to_blob(self) -> dict[str, Any]:
        return {**self.settings.to_blob(), CACHE_KEY: self.cache.to_blob()}

    async def save(self) -> bool:
        """
        Persist settings and cache.

        Failures are logged, not raised: the in-memory state stays
        authoritative until the next successful save.
        """
        try:
            await self.persistence.save(self.to_blob())
        except Exception:
            logger.exception("Failed to persist star state")
            return False
        return True

    async def clear_cache(self) -> int:
        """Empty the cache and persist. Returns the number of entries dropped."""
        cleared = self.cache.clear()
        await self.save()
        logger.info(f"Cleared star cache ({cleared} entries)")
        return cleared

    async def update_settings(self, changes: Mapping[str, Any]) -> StarsSettings:
        """
        Apply a partial settings update keyed by the persisted camelCase names.

        Raises pydantic.ValidationError and leaves the current settings in
        place when any value is invalid.
        """
        merged = {**self.settings.to_blob(), **changes}
        self.settings = StarsSettings.model_validate(merged)
        await self.save()
        return self.settings
