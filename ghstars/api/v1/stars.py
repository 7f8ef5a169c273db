"""
Star count endpoints: single repository lookups and document rendering.
"""

from dataclasses import asdict

from fastapi import APIRouter

from ghstars.api.deps import StarsServiceDep
from ghstars.core.exceptions import NotARepositoryLink
from ghstars.schemas.stars import (
    DocumentRequest,
    LinkAnnotationResponse,
    RenderedDocumentResponse,
    ResolveUrlRequest,
    StarCountResponse,
)
from ghstars.services.renderer import RenderedDocument

router = APIRouter(tags=["stars"])


def rendered_document_response(document: RenderedDocument) -> RenderedDocumentResponse:
    return RenderedDocumentResponse(
        content=document.content,
        links=[
            LinkAnnotationResponse(
                url=link.url,
                owner=link.owner,
                repo=link.repo,
                kind=link.kind.value,
                state=link.state.value,
                stars=link.stars,
                text=link.text,
            )
            for link in document.links
        ],
    )


@router.get("/stars/{owner}/{repo}", response_model=StarCountResponse)
async def get_star_count(owner: str, repo: str, service: StarsServiceDep):
    """Star count for one repository (cached, with stale fallback)."""
    lookup = await service.lookup(owner, repo)
    return StarCountResponse(**asdict(lookup))


@router.post("/stars/resolve", response_model=StarCountResponse)
async def resolve_url(data: ResolveUrlRequest, service: StarsServiceDep):
    """Star count for the repository a link points at."""
    lookup = await service.lookup_url(data.url)
    if lookup is None:
        raise NotARepositoryLink(data.url)
    return StarCountResponse(**asdict(lookup))


@router.post("/documents/render", response_model=RenderedDocumentResponse)
async def render_document(data: DocumentRequest, service: StarsServiceDep):
    """Insert star badges after every GitHub repository link in the document."""
    document = await service.render_document(data.content)
    return rendered_document_response(document)
