"""
Gallery service: photo gallery CRUD with unique slugs.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from village_cms.database.models import Gallery
from village_cms.services import slug_service
from village_cms.services.article_service import author_to_dict
from village_cms.utils.constants import ALL_FILTER, GalleryCategory
from village_cms.utils.datetime_utils import isoformat_or_none

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = {
    "title",
    "description",
    "image_url",
    "thumbnail_url",
    "category",
    "tags",
    "published",
}
_REQUIRED_FIELDS = {"title", "image_url", "category", "published"}


def gallery_to_dict(gallery: Gallery) -> Dict:
    """Serialize a gallery row."""
    return {
        "id": gallery.id,
        "title": gallery.title,
        "slug": gallery.slug,
        "description": gallery.description,
        "image_url": gallery.image_url,
        "thumbnail_url": gallery.thumbnail_url,
        "category": gallery.category,
        "tags": list(gallery.tags or []),
        "published": gallery.published,
        "uploader": author_to_dict(gallery.uploader),
        "created_at": isoformat_or_none(gallery.created_at),
        "updated_at": isoformat_or_none(gallery.updated_at),
    }


def _category_value(category) -> str:
    return category.value if isinstance(category, GalleryCategory) else category


async def list_galleries(
    session: AsyncSession,
    *,
    category: Optional[str] = None,
    published: Optional[bool] = None,
) -> List[Dict]:
    """List gallery entries newest first, optionally by category (``all`` = any) and publication state."""
    query = (
        select(Gallery)
        .options(selectinload(Gallery.uploader))
        .execution_options(populate_existing=True)
    )
    if category and category != ALL_FILTER:
        query = query.where(Gallery.category == _category_value(category))
    if published is not None:
        query = query.where(Gallery.published == published)
    query = query.order_by(Gallery.created_at.desc(), Gallery.id.desc())

    result = await session.execute(query)
    return [gallery_to_dict(g) for g in result.scalars().all()]


async def _load_gallery(session: AsyncSession, *conditions) -> Optional[Gallery]:
    result = await session.execute(
        select(Gallery)
        .options(selectinload(Gallery.uploader))
        .where(*conditions)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_gallery(session: AsyncSession, gallery_id: int) -> Optional[Dict]:
    """Get a gallery entry (with uploader) by ID, or None."""
    gallery = await _load_gallery(session, Gallery.id == gallery_id)
    return gallery_to_dict(gallery) if gallery else None


async def get_gallery_by_slug(session: AsyncSession, slug: str) -> Optional[Dict]:
    """Get a gallery entry by slug, or None."""
    gallery = await _load_gallery(session, Gallery.slug == slug)
    return gallery_to_dict(gallery) if gallery else None


async def create_gallery(
    session: AsyncSession,
    *,
    uploaded_by: Optional[int],
    title: str,
    image_url: str,
    description: Optional[str] = None,
    thumbnail_url: Optional[str] = None,
    category: str = GalleryCategory.DESA.value,
    tags: Optional[List[str]] = None,
    published: bool = False,
    slug: Optional[str] = None,
) -> Dict:
    """
    Create a gallery entry, generating a unique slug from the title unless one is given.

    Raises:
        ValueError: If an explicit slug is empty after normalization or too long
        SlugConflictError: If an explicit slug is taken, or generation lost every retry
    """
    fields = {
        "uploaded_by": uploaded_by,
        "title": title,
        "image_url": image_url,
        "description": description,
        "thumbnail_url": thumbnail_url,
        "category": _category_value(category),
        "tags": tags or [],
        "published": published,
    }

    if slug is not None:
        gallery = Gallery(slug=await slug_service.normalize_explicit_slug(session, Gallery, slug), **fields)
        session.add(gallery)
        await slug_service.commit_with_explicit_slug(session, gallery)
    else:
        async def build(candidate: str) -> Gallery:
            item = Gallery(slug=candidate, **fields)
            session.add(item)
            return item

        gallery = await slug_service.save_with_unique_slug(session, Gallery, title, build)

    logger.info(f"Created gallery {gallery.id} ({gallery.slug})")
    return await get_gallery(session, gallery.id)


async def update_gallery(session: AsyncSession, gallery_id: int, **fields) -> Optional[Dict]:
    """
    Update a gallery entry.

    A new title without an explicit slug regenerates the slug, excluding the
    entry itself from the collision check.

    Returns:
        Updated gallery dict, or None if not found or deleted before the save committed
    """
    gallery = await session.get(Gallery, gallery_id)
    if gallery is None:
        return None

    explicit_slug = fields.pop("slug", None)
    values = {
        k: v
        for k, v in fields.items()
        if k in _UPDATABLE_FIELDS and not (v is None and k in _REQUIRED_FIELDS)
    }
    if "category" in values:
        values["category"] = _category_value(values["category"])
    if "tags" in values and values["tags"] is None:
        values["tags"] = []

    def apply(item: Gallery) -> Gallery:
        for key, value in values.items():
            setattr(item, key, value)
        return item

    if explicit_slug is not None:
        gallery.slug = await slug_service.normalize_explicit_slug(
            session, Gallery, explicit_slug, exclude_id=gallery_id
        )
        apply(gallery)
        await slug_service.commit_with_explicit_slug(session, gallery)
    elif values.get("title"):
        async def build(candidate: str) -> Gallery:
            item = await slug_service.reload_for_slug(session, Gallery, gallery_id)
            item.slug = candidate
            return apply(item)

        try:
            await slug_service.save_with_unique_slug(
                session, Gallery, values["title"], build, exclude_id=gallery_id
            )
        except slug_service.SlugTargetGoneError:
            logger.warning(f"Gallery {gallery_id} was deleted while its slug was being updated")
            return None
    else:
        apply(gallery)
        await session.commit()

    return await get_gallery(session, gallery_id)


async def delete_gallery(session: AsyncSession, gallery_id: int) -> bool:
    """Delete a gallery entry. Returns False if not found."""
    result = await session.execute(delete(Gallery).where(Gallery.id == gallery_id))
    await session.commit()
    deleted = result.rowcount > 0
    if deleted:
        logger.info(f"Deleted gallery {gallery_id}")
    return deleted
