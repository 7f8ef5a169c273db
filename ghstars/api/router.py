from fastapi import APIRouter

from ghstars.api.v1 import cache, commands, settings, stars

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(stars.router)
api_router.include_router(commands.router)
api_router.include_router(cache.router)
api_router.include_router(settings.router)
