"""Homepage slider route handlers."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from village_cms.database.db import get_db_session
from village_cms.services import slider_service, upload_service
from village_cms.api.auth_dependencies import require_admin
from village_cms.models.schemas import SlideCreate, SlideUpdate, SlideResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/homepage-slider", response_model=List[SlideResponse])
async def list_slides(session: AsyncSession = Depends(get_db_session)):
    """Active slides in display order (public)."""
    try:
        return await slider_service.list_active_slides(session)
    except Exception as e:
        logger.error(f"Error listing homepage slides: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error listing slides")


@router.get("/api/homepage-slider/{slide_id}", response_model=SlideResponse)
async def get_slide(slide_id: int, session: AsyncSession = Depends(get_db_session)):
    """Get a slide by ID (public)."""
    try:
        slide = await slider_service.get_slide(session, slide_id)
        if not slide:
            raise HTTPException(status_code=404, detail="Slide not found")
        return slide
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching slide {slide_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching slide")


@router.post("/api/homepage-slider", response_model=SlideResponse, status_code=201)
async def create_slide(
    payload: SlideCreate,
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Append an uploaded image to the slider (admin)."""
    try:
        return await slider_service.create_slide(
            session,
            image_url=payload.image_url,
            uploaded_by=user["id"],
            is_active=payload.is_active,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating slide: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error creating slide")


@router.patch("/api/homepage-slider/{slide_id}", response_model=SlideResponse)
async def update_slide(
    slide_id: int,
    payload: SlideUpdate,
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Update slide text, image, order or visibility (admin)."""
    try:
        slide = await slider_service.update_slide(
            session, slide_id, **payload.model_dump(exclude_unset=True)
        )
        if not slide:
            raise HTTPException(status_code=404, detail="Slide not found")
        return slide
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating slide {slide_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error updating slide")


@router.delete("/api/homepage-slider/{slide_id}")
async def delete_slide(
    slide_id: int,
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Remove a slide and its stored image (admin)."""
    try:
        slide = await slider_service.get_slide(session, slide_id)
        if not slide or not await slider_service.delete_slide(session, slide_id):
            raise HTTPException(status_code=404, detail="Slide not found")
        await upload_service.delete_stored_image(slide["image_url"])
        return {"success": True}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting slide {slide_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error deleting slide")
