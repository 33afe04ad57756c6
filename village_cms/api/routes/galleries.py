"""Gallery route handlers."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from village_cms.api.routes import SLUG_STORAGE_UNAVAILABLE
from village_cms.database.db import get_db_session
from village_cms.services import gallery_service
from village_cms.services.slug_service import SlugConflictError, SlugStorageError
from village_cms.api.auth_dependencies import require_admin
from village_cms.models.schemas import GalleryCreate, GalleryUpdate, GalleryResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/galleries", response_model=List[GalleryResponse])
async def list_galleries(
    category: Optional[str] = None,
    published: Optional[bool] = None,
    session: AsyncSession = Depends(get_db_session),
):
    """List gallery entries newest first (public). ``category=all`` disables the category filter."""
    try:
        return await gallery_service.list_galleries(
            session, category=category, published=published
        )
    except Exception as e:
        logger.error(f"Error listing galleries: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error listing galleries")


@router.get("/api/galleries/slug/{slug}", response_model=GalleryResponse)
async def get_gallery_by_slug(slug: str, session: AsyncSession = Depends(get_db_session)):
    """Get a gallery entry by its URL slug (public)."""
    try:
        gallery = await gallery_service.get_gallery_by_slug(session, slug)
        if not gallery:
            raise HTTPException(status_code=404, detail="Gallery not found")
        return gallery
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching gallery by slug {slug}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching gallery")


@router.get("/api/galleries/{gallery_id}", response_model=GalleryResponse)
async def get_gallery(gallery_id: int, session: AsyncSession = Depends(get_db_session)):
    """Get a gallery entry by ID (public)."""
    try:
        gallery = await gallery_service.get_gallery(session, gallery_id)
        if not gallery:
            raise HTTPException(status_code=404, detail="Gallery not found")
        return gallery
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching gallery {gallery_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching gallery")


@router.post("/api/galleries", response_model=GalleryResponse, status_code=201)
async def create_gallery(
    payload: GalleryCreate,
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Create a gallery entry (admin)."""
    try:
        return await gallery_service.create_gallery(
            session,
            uploaded_by=user["id"],
            title=payload.title,
            image_url=payload.image_url,
            description=payload.description,
            thumbnail_url=payload.thumbnail_url,
            category=payload.category,
            tags=payload.tags,
            published=payload.published,
            slug=payload.slug,
        )
    except SlugConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except SlugStorageError as e:
        logger.error(f"Slug lookup failed creating gallery: {e}", exc_info=True)
        raise HTTPException(status_code=503, detail=SLUG_STORAGE_UNAVAILABLE)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating gallery: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error creating gallery")


@router.patch("/api/galleries/{gallery_id}", response_model=GalleryResponse)
async def update_gallery(
    gallery_id: int,
    payload: GalleryUpdate,
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Update a gallery entry (admin). A new title regenerates the slug."""
    try:
        gallery = await gallery_service.update_gallery(
            session, gallery_id, **payload.model_dump(exclude_unset=True)
        )
        if not gallery:
            raise HTTPException(status_code=404, detail="Gallery not found")
        return gallery
    except HTTPException:
        raise
    except SlugConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except SlugStorageError as e:
        logger.error(f"Slug lookup failed updating gallery {gallery_id}: {e}", exc_info=True)
        raise HTTPException(status_code=503, detail=SLUG_STORAGE_UNAVAILABLE)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating gallery {gallery_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error updating gallery")


@router.delete("/api/galleries/{gallery_id}")
async def delete_gallery(
    gallery_id: int,
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Delete a gallery entry (admin)."""
    try:
        success = await gallery_service.delete_gallery(session, gallery_id)
        if not success:
            raise HTTPException(status_code=404, detail="Gallery not found")
        return {"success": True}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting gallery {gallery_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error deleting gallery")
