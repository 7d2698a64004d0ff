"""Image redirect endpoints.

Exposes:
- GET /random: 307 to a random image matching the final glob
- GET /newest: 307 to the newest image matching the fast glob

Both answer a plain-text 404 when nothing matches.
"""

import logging
from pathlib import Path
from typing import Callable, Optional

from fastapi import APIRouter, Depends, HTTPException
from starlette.responses import PlainTextResponse, RedirectResponse, Response

from ..core.config import Settings, get_settings
from ..selection import finder

logger = logging.getLogger(__name__)

NOT_FOUND_BODY = "No image found"

router = APIRouter()


def _redirect_to(pick: Callable[[Path, str], Optional[Path]], root: Path, pattern: str) -> Response:
    try:
        image = pick(root, pattern)
        if image is None:
            logger.info(NOT_FOUND_BODY)
            return PlainTextResponse(NOT_FOUND_BODY, status_code=404)
        url = finder.relative_url(root, image)
    except finder.SelectionError:
        logger.exception("Image selection failed for pattern %r", pattern)
        raise HTTPException(status_code=500, detail="Image selection failed")
    logger.info("Image: %s", image)
    return RedirectResponse(url=url, status_code=307)


@router.get("/random")
def random_image(settings: Settings = Depends(get_settings)) -> Response:
    """Redirect to a uniformly random image from the full corpus."""
    return _redirect_to(finder.pick_random, settings.images_path, settings.final_glob)


@router.get("/newest")
def newest_image(settings: Settings = Depends(get_settings)) -> Response:
    """Redirect to the most recently created image."""
    return _redirect_to(finder.pick_newest, settings.images_path, settings.fast_glob)
