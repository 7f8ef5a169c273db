"""
GitHub star lookup package.

Usage: `from ghstars.services.github import StarCountFetcher, extract_repo_info`

Module structure:
- star_fetcher.py: Cached star count lookups with stale fallback
- url_parser.py: Repository identifier extraction from links
- helpers.py: Rate limit handling, headers and error mapping
- http_client.py: Shared AsyncClient lifecycle
- types.py: Data types
- exceptions.py: Custom exceptions
- constants.py: API constants
"""

from ghstars.services.github.exceptions import (
    GitHubAPIError,
    MalformedResponse,
    RateLimitExceeded,
    RepositoryNotFound,
)
from ghstars.services.github.helpers import RateLimitInfo, handle_error_response
from ghstars.services.github.http_client import close_github_client
from ghstars.services.github.star_fetcher import StarCountFetcher
from ghstars.services.github.types import RepositoryIdentifier
from ghstars.services.github.url_parser import extract_repo_info

__all__ = [
    # Star lookups (main entry point)
    "StarCountFetcher",
    "extract_repo_info",
    # HTTP client lifecycle
    "close_github_client",
    # Utilities
    "handle_error_response",
    "RateLimitInfo",
    # Exceptions
    "GitHubAPIError",
    "MalformedResponse",
    "RateLimitExceeded",
    "RepositoryNotFound",
    # Types
    "RepositoryIdentifier",
]
