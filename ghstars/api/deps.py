"""API dependencies."""

from typing import Annotated

from fastapi import Depends, Request

from ghstars.services.stars_service import StarsService


def get_stars_service(request: Request) -> StarsService:
    """The StarsService created by the application lifespan."""
    return request.app.state.stars_service


StarsServiceDep = Annotated[StarsService, Depends(get_stars_service)]
