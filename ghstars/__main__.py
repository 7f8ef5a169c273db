"""Run the service with uvicorn: `python -m ghstars`."""

import uvicorn

from ghstars.config import settings

if __name__ == "__main__":
    uvicorn.run("ghstars.main:app", host=settings.host, port=settings.port, reload=settings.debug)
