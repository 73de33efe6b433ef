from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse, JSONResponse

from app.config import Settings, get_settings
from app.core.logging import get_logger

logger = get_logger(module="og_image_router")

router = APIRouter(tags=["static"])

OG_IMAGE_CACHE_CONTROL = "public, max-age=31536000, immutable"


@router.get("/og-image")
async def og_image(settings: Settings = Depends(get_settings)):
    path = settings.OG_IMAGE_PATH
    if not path.is_file():
        logger.error("og_image_missing", path=str(path))
        return JSONResponse(status_code=404, content={"error": "Image not found"})
    return FileResponse(path, media_type="image/png", headers={"Cache-Control": OG_IMAGE_CACHE_CONTROL})
