"""
Public API routes: no authentication required.

Provides read-only endpoints for SEO (sitemap).
All routes are prefixed with /api/public.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from village_cms.database.db import get_db_session
from village_cms.models.schemas import SitemapResponse
from village_cms.services import public_service

logger = logging.getLogger(__name__)


async def _cache_public(response: Response):
    """Set Cache-Control headers on all public API responses (5min TTL)."""
    response.headers["Cache-Control"] = "public, max-age=300, s-maxage=300"


public_router = APIRouter(
    prefix="/api/public", tags=["public"], dependencies=[Depends(_cache_public)]
)


@public_router.get("/sitemap", response_model=SitemapResponse)
async def sitemap(session: AsyncSession = Depends(get_db_session)):
    """
    Get published article and gallery slugs for sitemap generation.

    Returns {articles: [{slug, updated_at}], galleries: [...]}.
    No authentication required.
    """
    try:
        return {
            "articles": await public_service.get_sitemap_articles(session),
            "galleries": await public_service.get_sitemap_galleries(session),
        }
    except Exception:
        logger.error("Error fetching sitemap", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
