"""App factory and process entrypoint for the Image Redirector.

- Mounts the images root as static files under `/images`
- Registers routers for health and the `/random` / `/newest` redirects
- `run()` loads settings, configures logging and serves with uvicorn,
  which handles SIGINT/SIGTERM with a graceful shutdown
"""

import logging
import signal
import sys
from typing import Optional, Sequence

import uvicorn
from fastapi import FastAPI
from pydantic import ValidationError
from starlette.staticfiles import StaticFiles

from .core.config import Settings, load_settings, parse_args
from .core.log import setup_logging
from .routers import health, images

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()

    app = FastAPI(
        title="Image Redirector",
        version="1.0.0",
        description="Redirect to a random or the newest image under a directory tree",
    )
    # Handlers read this through the get_settings dependency
    app.state.settings = settings

    # Static images, no directory listing
    app.mount("/images", StaticFiles(directory=settings.images_path), name="images")

    app.include_router(health.router)
    app.include_router(images.router)

    return app


def run(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    setup_logging()
    try:
        settings = load_settings(args)
    except ValidationError as exc:
        logger.error("Invalid configuration:\n%s", exc)
        sys.exit(2)
    setup_logging(settings.log_level)

    logger.info(
        "Serving %s on %s (fast glob %r, final glob %r)",
        settings.images_path,
        settings.http_address,
        settings.fast_glob,
        settings.final_glob,
    )
    # uvicorn re-raises the caught signal after shutdown; make SIGTERM exit 0 like SIGINT
    signal.signal(signal.SIGTERM, lambda *_: sys.exit(0))
    # log_config=None keeps uvicorn on the root handler configured above
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


# ASGI factory is also usable directly: `uvicorn imgredirect.main:create_app --factory`
if __name__ == "__main__":
    run()
