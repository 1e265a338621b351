"""Player image upload."""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile

from teamsite.core.validation import require_valid, validate_image_upload
from teamsite.models.uploads import UploadResult
from teamsite.routes.helpers import get_images, ok, require_token
from teamsite.services.image_storage import safe_filename

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/upload", tags=["upload"])


@router.post("/image", dependencies=[Depends(require_token)])
async def upload_image(
    request: Request,
    player_id: str = Form(default="unknown", alias="playerId"),
    image: Optional[UploadFile] = File(default=None),
) -> dict:
    """Store an image under ``images/{playerId}/`` and return its path.

    The player does not have to exist yet; the admin form uploads before the
    player is first saved.
    """
    max_bytes = request.app.state.settings.max_upload_bytes
    # one byte past the limit is enough to report an oversized file
    data = await image.read(max_bytes + 1) if image is not None else b""
    filename = image.filename if image is not None else None
    content_type = image.content_type if image is not None else None

    require_valid(
        validate_image_upload(
            filename,
            content_type,
            len(data),
            max_bytes=max_bytes,
            player_id=player_id,
        )
    )

    images = get_images(request)
    path = await asyncio.to_thread(
        images.save, player_id, filename or "", data, content_type or "image/png"
    )
    logger.info(f"Stored {len(data)} byte image for player {player_id}")

    result = UploadResult(
        filename=safe_filename(filename or ""),
        original_name=filename or "",
        path=path,
        size=len(data),
        mimetype=content_type or "",
    )
    return ok(result.to_wire())
