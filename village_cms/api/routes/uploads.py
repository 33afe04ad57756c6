"""Image upload route handlers."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile

from village_cms.api.routes import limiter
from village_cms.services import upload_service
from village_cms.api.auth_dependencies import require_admin
from village_cms.models.schemas import UploadResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/api/upload", response_model=UploadResponse)
@limiter.limit("30/minute")
async def upload_image(
    request: Request,
    image: Optional[UploadFile] = File(None),
    user: dict = Depends(require_admin),
):
    """
    Upload one image (admin).

    The image is re-encoded as JPEG within 1920x1080 and stored locally or on
    S3 depending on ``STORAGE_BACKEND``. Max 5MB, ``image/*`` only.
    """
    try:
        if image is None:
            raise ValueError("No file uploaded")
        content = await image.read()
        return await upload_service.store_image(
            content, image.content_type or "", original_name=image.filename
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error uploading image: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error uploading file")
