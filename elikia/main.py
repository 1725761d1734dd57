"""
Elikia auth service - ASGI entry point.

    uvicorn elikia.main:app

Settings are read from the environment at import time; a missing or weak
JWT_SECRET_KEY stops the process here.
"""

from __future__ import annotations

import logging

import uvicorn

from elikia.api import create_app
from elikia.config import get_settings

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app(settings)


def main():
    """Main entry point."""
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    main()
