"""
Pooled HTTP client for star lookups.

Rendering one document fans out into one GitHub request per repository link,
all issued concurrently. They share a single AsyncClient so those requests
reuse a small pool of HTTP/2 connections instead of opening one each.
"""

import logging

import httpx

from ghstars.config import settings

logger = logging.getLogger(__name__)

_client: httpx.AsyncClient | None = None


def get_github_client() -> httpx.AsyncClient:
    """
    Return the shared client, creating it on first use or after a close.

    The client carries no default headers: the User-Agent and the optional
    API token are sent with each request, since the token is a user setting
    that can be changed while the service runs.
    """
    global _client
    if _client is None or _client.is_closed:
        _client = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.request_timeout, connect=settings.connect_timeout),
            limits=httpx.Limits(
                max_connections=settings.max_connections,
                max_keepalive_connections=settings.max_keepalive_connections,
            ),
            http2=True,
        )
        logger.debug(
            f"Created GitHub HTTP client (max {settings.max_connections} connections)"
        )
    return _client


async def close_github_client() -> None:
    """Close the shared client. Called from the app lifespan on shutdown."""
    global _client
    if _client is not None and not _client.is_closed:
        await _client.aclose()
        logger.debug("Closed GitHub HTTP client")
    _client = None
