"""
Operator commands: refresh the current document and clear the star cache.
"""

from fastapi import APIRouter

from ghstars.api.deps import StarsServiceDep
from ghstars.api.v1.stars import rendered_document_response
from ghstars.schemas.stars import ClearCacheResponse, DocumentRequest, RenderedDocumentResponse

router = APIRouter(prefix="/commands", tags=["commands"])


@router.post("/refresh-document", response_model=RenderedDocumentResponse)
async def refresh_document(data: DocumentRequest, service: StarsServiceDep):
    """Re-run link extraction and star lookups for the whole document."""
    document = await service.refresh_document(data.content)
    return rendered_document_response(document)


@router.post("/clear-cache", response_model=ClearCacheResponse)
async def clear_cache(service: StarsServiceDep):
    """Empty the star cache and persist the change."""
    cleared = await service.clear_cache()
    return ClearCacheResponse(cleared=cleared)
