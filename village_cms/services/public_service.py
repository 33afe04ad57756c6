"""
Public service functions: no authentication required.

Provides read-only data access for SEO (sitemap).
"""

from typing import List, Dict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from village_cms.database.models import Article, Gallery
from village_cms.utils.datetime_utils import isoformat_or_none


async def _sitemap_rows(session: AsyncSession, model) -> List[Dict]:
    result = await session.execute(
        select(model.slug, model.updated_at)
        .where(model.published.is_(True), model.slug.is_not(None), model.slug != "")
        .order_by(model.updated_at.desc(), model.id.desc())
    )
    return [
        {"slug": row.slug, "updated_at": isoformat_or_none(row.updated_at)}
        for row in result.all()
    ]


async def get_sitemap_articles(session: AsyncSession) -> List[Dict]:
    """
    Get all published articles for sitemap generation.

    Returns:
        List of dicts with slug, updated_at. Articles without a slug are skipped.
    """
    return await _sitemap_rows(session, Article)


async def get_sitemap_galleries(session: AsyncSession) -> List[Dict]:
    """
    Get all published gallery entries for sitemap generation.

    Returns:
        List of dicts with slug, updated_at. Entries without a slug are skipped.
    """
    return await _sitemap_rows(session, Gallery)
