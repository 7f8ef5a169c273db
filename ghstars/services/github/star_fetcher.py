"""
Star count lookups backed by the star cache.

A fresh cache entry is returned without touching the network. Otherwise the
repository is fetched from the GitHub REST API and the cache is refreshed.
When GitHub cannot answer (rate limit, server error, network failure) the last
known count is returned even if stale; a 404 or an unusable body yields None.
Nothing here raises to the caller.

Concurrent lookups for the same repository are not deduplicated: each checks
the cache on its own and, on a miss, issues its own request. Both end up
writing the same entry.
"""

import logging
from collections.abc import Callable

import httpx

from ghstars.config import settings as app_settings
from ghstars.services.cache.store import current_time_ms
from ghstars.services.github.constants import STARGAZERS_FIELD
from ghstars.services.github.exceptions import (
    GitHubAPIError,
    MalformedResponse,
    RateLimitExceeded,
    RepositoryNotFound,
)
from ghstars.services.github.helpers import (
    build_headers,
    handle_error_response,
    minutes_until_reset,
)
from ghstars.services.github.http_client import get_github_client
from ghstars.services.state import StarsState

logger = logging.getLogger(__name__)


class StarCountFetcher:
    """Resolves star counts for repositories through the shared StarsState."""

    def __init__(
        self,
        state: StarsState,
        base_url: str | None = None,
        user_agent: str | None = None,
        clock: Callable[[], int] = current_time_ms,
    ):
        self.state = state
        self.base_url = (base_url or app_settings.github_api_url).rstrip("/")
        self.user_agent = user_agent or app_settings.user_agent
        self.clock = clock

    async def get_star_count(self, owner: str, repo: str) -> int | None:
        """
        Get the star count for owner/repo.

        Returns:
            The star count, or None when it is unknown (repository not found,
            or GitHub failed and nothing is cached).
        """
        cache_key = f"{owner}/{repo}"
        stars_settings = self.state.settings

        entry = self.state.cache.get_fresh(
            cache_key, self.clock(), stars_settings.expiry_window_ms
        )
        if entry is not None:
            logger.debug(f"Cache HIT: {cache_key}")
            return entry.stars
        logger.debug(f"Cache MISS: {cache_key}")

        try:
            stars = await self._fetch_star_count(owner, repo, stars_settings.token)
        except RateLimitExceeded as e:
            minutes = minutes_until_reset(e.rate_limit_reset, self.clock())
            logger.warning(f"GitHub API rate limit exceeded. Resets in {minutes} minutes.")
            return self._stale_stars(cache_key)
        except RepositoryNotFound:
            logger.warning(f"Repository {cache_key} not found")
            return None
        except MalformedResponse as e:
            logger.error(e.message)
            return None
        except GitHubAPIError as e:
            logger.error(f"Failed to fetch star count for {cache_key}: {e.status_code}")
            return self._stale_stars(cache_key)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Error fetching star count for {cache_key}: {e!r}")
            return self._stale_stars(cache_key)

        self.state.cache.put(cache_key, stars, self.clock())
        await self.state.save()
        return stars

    async def _fetch_star_count(self, owner: str, repo: str, token: str | None) -> int:
        """
        Request /repos/{owner}/{repo} and return its stargazers_count.

        Raises:
            RateLimitExceeded, RepositoryNotFound, GitHubAPIError: per response status
            MalformedResponse: if the body has no non-negative integer star count
            httpx.HTTPError: on transport failures
            httpx.InvalidURL: if owner or repo cannot be placed in a URL
        """
        full_name = f"{owner}/{repo}"
        client = get_github_client()
        response = await client.get(
            f"{self.base_url}/repos/{owner}/{repo}",
            headers=build_headers(self.user_agent, token),
            follow_redirects=True,
        )
        if response.history:
            # Renamed or transferred repository; the count is kept under the requested key
            logger.info(f"Repository {full_name} moved, served from {response.url}")

        handle_error_response(response, full_name)

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponse(full_name, "body is not JSON") from e

        stars = data.get(STARGAZERS_FIELD) if isinstance(data, dict) else None
        if isinstance(stars, bool) or not isinstance(stars, int) or stars < 0:
            raise MalformedResponse(full_name, f"{STARGAZERS_FIELD}={stars!r}")
        return stars

    def _stale_stars(self, cache_key: str) -> int | None:
        """Last known count for cache_key regardless of age, if any."""
        entry = self.state.cache.get(cache_key)
        if entry is None:
            return None
        logger.info(f"Using cached star count for {cache_key}")
        return entry.stars
