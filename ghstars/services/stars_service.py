"""
Star service facade used by the host surface (API routes, lifespan).

Bundles the shared state, the fetcher and the document renderer, and exposes
the operator commands: refresh a document and clear the cache.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ghstars.config.stars import StarsSettings
from ghstars.services.cache.persistence import PersistencePort
from ghstars.services.formatter import format_star_count
from ghstars.services.github.star_fetcher import StarCountFetcher
from ghstars.services.github.types import RepositoryIdentifier
from ghstars.services.github.url_parser import extract_repo_info
from ghstars.services.renderer import (
    UNKNOWN_TEXT,
    AnnotationCallback,
    DocumentRenderer,
    RenderedDocument,
)
from ghstars.services.state import StarsState

logger = logging.getLogger(__name__)


@dataclass
class StarLookup:
    """Star count and badge text for one repository."""

    owner: str
    repo: str
    stars: int | None
    display: str


@dataclass
class CacheSummary:
    entries: int
    fresh: int
    keys: list[str]


class StarsService:
    """Entry point for star lookups, document rendering and operator commands."""

    def __init__(self, state: StarsState, fetcher: StarCountFetcher | None = None):
        self.state = state
        self.fetcher = fetcher or StarCountFetcher(state)
        self.renderer = DocumentRenderer(self.fetcher, state)

    @classmethod
    async def create(cls, persistence: PersistencePort) -> "StarsService":
        """Load stored state and build the service around it."""
        state = await StarsState.load(persistence)
        return cls(state)

    @property
    def settings(self) -> StarsSettings:
        return self.state.settings

    async def lookup(self, owner: str, repo: str) -> StarLookup:
        stars = await self.fetcher.get_star_count(owner, repo)
        if stars is None:
            display = UNKNOWN_TEXT
        else:
            display = format_star_count(
                stars, self.settings.number_format, self.settings.display_format
            )
        return StarLookup(owner=owner, repo=repo, stars=stars, display=display)

    async def lookup_url(self, url: str) -> StarLookup | None:
        """Lookup for a link target, or None when it is not a repository link."""
        repo_info: RepositoryIdentifier | None = extract_repo_info(url)
        if repo_info is None:
            return None
        return await self.lookup(repo_info.owner, repo_info.repo)

    async def render_document(
        self,
        content: str,
        on_update: AnnotationCallback | None = None,
    ) -> RenderedDocument:
        return await self.renderer.render(content, on_update)

    async def refresh_document(
        self,
        content: str,
        on_update: AnnotationCallback | None = None,
    ) -> RenderedDocument:
        """Re-run extraction and lookups for every link in the document."""
        logger.info("Refreshing GitHub star counts for document")
        return await self.renderer.render(content, on_update)

    async def clear_cache(self) -> int:
        return await self.state.clear_cache()

    def cache_summary(self) -> CacheSummary:
        cache = self.state.cache
        return CacheSummary(
            entries=len(cache),
            fresh=cache.count_fresh(self.fetcher.clock(), self.settings.expiry_window_ms),
            keys=sorted(cache),
        )

    async def update_settings(self, changes: Mapping[str, Any]) -> StarsSettings:
        """Validate and persist settings changes (camelCase keys)."""
        updated = await self.state.update_settings(changes)
        logger.info(f"Updated star settings: {sorted(changes)}")
        return updated

    async def shutdown(self) -> None:
        """Final flush of settings and cache."""
        await self.state.save()
