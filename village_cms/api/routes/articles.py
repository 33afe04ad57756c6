"""Article route handlers."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from village_cms.api.routes import SLUG_STORAGE_UNAVAILABLE
from village_cms.database.db import get_db_session
from village_cms.services import article_service
from village_cms.services.slug_service import SlugConflictError, SlugStorageError
from village_cms.api.auth_dependencies import require_admin
from village_cms.models.schemas import (
    ArticleCreate,
    ArticleUpdate,
    ArticleResponse,
    ViewCountResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/articles", response_model=List[ArticleResponse])
async def list_articles(
    published: Optional[bool] = None,
    limit: int = Query(0, ge=0),
    search: Optional[str] = None,
    session: AsyncSession = Depends(get_db_session),
):
    """
    List articles, newest first (public).

    Args:
        published: Only published (true) or drafts (false); all when omitted
        limit: Max number of articles (0 = no limit)
        search: Case-insensitive match on title, content or tags
    """
    try:
        return await article_service.list_articles(
            session, published=published, limit=limit, search=search
        )
    except Exception as e:
        logger.error(f"Error listing articles: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error listing articles")


@router.get("/api/articles/slug/{slug}", response_model=ArticleResponse)
async def get_article_by_slug(slug: str, session: AsyncSession = Depends(get_db_session)):
    """Get an article by its URL slug (public)."""
    try:
        article = await article_service.get_article_by_slug(session, slug)
        if not article:
            raise HTTPException(status_code=404, detail="Article not found")
        return article
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching article by slug {slug}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching article")


@router.get("/api/articles/{article_id}", response_model=ArticleResponse)
async def get_article(article_id: int, session: AsyncSession = Depends(get_db_session)):
    """Get an article by ID (public)."""
    try:
        article = await article_service.get_article(session, article_id)
        if not article:
            raise HTTPException(status_code=404, detail="Article not found")
        return article
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching article {article_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching article")


@router.post("/api/articles", response_model=ArticleResponse, status_code=201)
async def create_article(
    payload: ArticleCreate,
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Create an article (admin). The slug is generated from the title unless given."""
    try:
        return await article_service.create_article(
            session,
            author_id=user["id"],
            title=payload.title,
            content=payload.content,
            excerpt=payload.excerpt,
            featured_image=payload.featured_image,
            published=payload.published,
            tags=payload.tags,
            slug=payload.slug,
        )
    except SlugConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except SlugStorageError as e:
        logger.error(f"Slug lookup failed creating article: {e}", exc_info=True)
        raise HTTPException(status_code=503, detail=SLUG_STORAGE_UNAVAILABLE)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating article: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error creating article")


@router.patch("/api/articles/{article_id}", response_model=ArticleResponse)
async def update_article(
    article_id: int,
    payload: ArticleUpdate,
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Update an article (admin). A new title regenerates the slug."""
    try:
        article = await article_service.update_article(
            session, article_id, **payload.model_dump(exclude_unset=True)
        )
        if not article:
            raise HTTPException(status_code=404, detail="Article not found")
        return article
    except HTTPException:
        raise
    except SlugConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except SlugStorageError as e:
        logger.error(f"Slug lookup failed updating article {article_id}: {e}", exc_info=True)
        raise HTTPException(status_code=503, detail=SLUG_STORAGE_UNAVAILABLE)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating article {article_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error updating article")


@router.delete("/api/articles/{article_id}")
async def delete_article(
    article_id: int,
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Delete an article (admin)."""
    try:
        success = await article_service.delete_article(session, article_id)
        if not success:
            raise HTTPException(status_code=404, detail="Article not found")
        return {"success": True}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting article {article_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error deleting article")


@router.post("/api/articles/{article_id}/views", response_model=ViewCountResponse)
async def increment_article_views(article_id: int, session: AsyncSession = Depends(get_db_session)):
    """Count one page view (public)."""
    try:
        views = await article_service.increment_views(session, article_id)
        if views is None:
            raise HTTPException(status_code=404, detail="Article not found")
        return {"views": views, "success": True}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating views for article {article_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error updating views")
