"""
Homepage slider service: ordered list of images on the homepage hero.
"""

import logging
import os
from typing import Dict, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from village_cms.database.models import HomepageSlide
from village_cms.utils.datetime_utils import isoformat_or_none

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = {"title", "description", "image_url", "sort_order", "is_active"}
_REQUIRED_FIELDS = {"title", "image_url", "sort_order", "is_active"}


def _site_name() -> str:
    """Read at call time so tests can override it."""
    return os.getenv("SITE_NAME", "Desa")


def slide_to_dict(slide: HomepageSlide) -> Dict:
    """Serialize a slide row."""
    return {
        "id": slide.id,
        "title": slide.title,
        "description": slide.description,
        "image_url": slide.image_url,
        "sort_order": slide.sort_order,
        "is_active": slide.is_active,
        "uploaded_by": slide.uploaded_by,
        "created_at": isoformat_or_none(slide.created_at),
        "updated_at": isoformat_or_none(slide.updated_at),
    }


async def list_active_slides(session: AsyncSession) -> List[Dict]:
    """Active slides in display order (sort_order ascending, newest first on ties)."""
    result = await session.execute(
        select(HomepageSlide)
        .where(HomepageSlide.is_active.is_(True))
        .order_by(
            HomepageSlide.sort_order.asc(),
            HomepageSlide.created_at.desc(),
            HomepageSlide.id.desc(),
        )
        .execution_options(populate_existing=True)
    )
    return [slide_to_dict(s) for s in result.scalars().all()]


async def get_slide(session: AsyncSession, slide_id: int) -> Optional[Dict]:
    """Get a slide by ID (active or not), or None."""
    result = await session.execute(
        select(HomepageSlide)
        .where(HomepageSlide.id == slide_id)
        .execution_options(populate_existing=True)
    )
    slide = result.scalar_one_or_none()
    return slide_to_dict(slide) if slide else None


async def next_sort_order(session: AsyncSession) -> int:
    """One past the highest existing sort_order, or 1 for an empty slider."""
    result = await session.execute(select(func.max(HomepageSlide.sort_order)))
    highest = result.scalar_one_or_none()
    return (highest or 0) + 1


async def create_slide(
    session: AsyncSession,
    *,
    image_url: str,
    uploaded_by: Optional[int],
    is_active: bool = True,
) -> Dict:
    """
    Append an image to the slider.

    The slide goes to the end of the order and gets a numbered default
    title and description.
    """
    order = await next_sort_order(session)
    slide = HomepageSlide(
        title=f"Foto {_site_name()} {order}",
        description=f"Gambar slider homepage ke-{order}",
        image_url=image_url,
        sort_order=order,
        is_active=is_active,
        uploaded_by=uploaded_by,
    )
    session.add(slide)
    await session.commit()
    logger.info(f"Created homepage slide {slide.id} at position {order}")
    return await get_slide(session, slide.id)


async def update_slide(session: AsyncSession, slide_id: int, **fields) -> Optional[Dict]:
    """Update a slide. Only keys present in ``fields`` are written. Returns None if not found."""
    slide = await session.get(HomepageSlide, slide_id)
    if slide is None:
        return None
    for key, value in fields.items():
        if key in _UPDATABLE_FIELDS and not (value is None and key in _REQUIRED_FIELDS):
            setattr(slide, key, value)
    await session.commit()
    return await get_slide(session, slide_id)


async def delete_slide(session: AsyncSession, slide_id: int) -> bool:
    """Delete a slide. Returns False if not found."""
    result = await session.execute(delete(HomepageSlide).where(HomepageSlide.id == slide_id))
    await session.commit()
    return result.rowcount > 0
