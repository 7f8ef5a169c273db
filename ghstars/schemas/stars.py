"""Pydantic schemas for star endpoints."""

from typing import Literal

from pydantic import BaseModel, Field


class StarCountResponse(BaseModel):
    """Response for GET /stars/{owner}/{repo} and POST /stars/resolve."""

    owner: str
    repo: str
    stars: int | None  # None when the count is unknown
    display: str


class ResolveUrlRequest(BaseModel):
    """Request body for POST /stars/resolve."""

    url: str = Field(..., min_length=1)


class DocumentRequest(BaseModel):
    """Request body for document rendering and the refresh command."""

    content: str


class LinkAnnotationResponse(BaseModel):
    """A single repository link found in a document."""

    url: str
    owner: str
    repo: str
    kind: Literal["markdown", "reference", "autolink", "url", "html"]
    state: Literal["loading", "resolved", "error"]
    stars: int | None
    text: str


class RenderedDocumentResponse(BaseModel):
    """Document with star badges inserted after repository links."""

    content: str
    links: list[LinkAnnotationResponse]


class ClearCacheResponse(BaseModel):
    cleared: int


class CacheSummaryResponse(BaseModel):
    entries: int
    fresh: int
    keys: list[str]


class SettingsRead(BaseModel):
    """Star settings response."""

    cache_expiry: int
    display_format: str
    number_format: Literal["full", "abbreviated"]
    api_token_set: bool  # Don't expose actual token


class SettingsUpdate(BaseModel):
    """Star settings update request."""

    cache_expiry: int | None = None
    display_format: str | None = None
    number_format: Literal["full", "abbreviated"] | None = None
    api_token: str | None = None
