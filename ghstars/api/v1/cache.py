from dataclasses import asdict

from fastapi import APIRouter

from ghstars.api.deps import StarsServiceDep
from ghstars.schemas.stars import CacheSummaryResponse

router = APIRouter(prefix="/cache", tags=["cache"])


@router.get("", response_model=CacheSummaryResponse)
async def get_cache_summary(service: StarsServiceDep):
    """Number of cached repositories, how many are fresh, and their keys."""
    return CacheSummaryResponse(**asdict(service.cache_summary()))
