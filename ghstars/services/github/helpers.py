"""
GitHub API helper utilities.

Rate limit header parsing, request header construction, and mapping of
GitHub responses onto the typed exceptions in exceptions.py.
"""

import logging
import math
import time

import httpx

from ghstars.services.github.constants import (
    GITHUB_ACCEPT,
    RATE_LIMIT_REMAINING_HEADER,
    RATE_LIMIT_RESET_HEADER,
)
from ghstars.services.github.exceptions import (
    GitHubAPIError,
    RateLimitExceeded,
    RepositoryNotFound,
)

logger = logging.getLogger(__name__)


class RateLimitInfo:
    """Rate limit information from GitHub API response."""

    def __init__(self, response: httpx.Response) -> None:
        self.remaining = response.headers.get(RATE_LIMIT_REMAINING_HEADER)
        self.reset = response.headers.get(RATE_LIMIT_RESET_HEADER)

    @property
    def reset_timestamp(self) -> int | None:
        """Get reset timestamp as integer, or None if not available."""
        if not self.reset:
            return None
        try:
            return int(self.reset)
        except ValueError:
            return None

    @property
    def is_exhausted(self) -> bool:
        """Quota is exhausted only when GitHub reports exactly "0" and a reset time."""
        return self.remaining == "0" and bool(self.reset)


def minutes_until_reset(reset_timestamp: int | None, now_ms: int | None = None) -> int | None:
    """Whole minutes (rounded up) from now_ms until an epoch-seconds reset time."""
    if reset_timestamp is None:
        return None
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return math.ceil((reset_timestamp * 1000 - now_ms) / 60_000)


def build_headers(user_agent: str, token: str | None = None) -> dict[str, str]:
    """Request headers for the GitHub REST API, with auth when a token is set."""
    headers = {
        "Accept": GITHUB_ACCEPT,
        "User-Agent": user_agent,
    }
    if token:
        headers["Authorization"] = f"token {token}"
    return headers


def handle_error_response(response: httpx.Response, repo_name: str) -> None:
    """
    Map a GitHub API response onto the exception for its failure mode.

    Rate limiting is checked before the status code: an exhausted quota is
    reported the same way whether GitHub answered 403 or 429.

    Args:
        response: The HTTP response from GitHub API
        repo_name: Repository name for error context (format: "owner/repo")

    Raises:
        RateLimitExceeded: If the remaining quota is "0" and a reset time is given
        RepositoryNotFound: If the repository does not exist (404)
        GitHubAPIError: For any other non-200 status
    """
    rate_info = RateLimitInfo(response)

    if rate_info.is_exhausted:
        raise RateLimitExceeded(rate_info.reset_timestamp, status_code=response.status_code)
    if response.status_code == 404:
        raise RepositoryNotFound(repo_name)
    if response.status_code != 200:
        raise GitHubAPIError(
            f"GitHub API error: {response.status_code}", response.status_code
        )
