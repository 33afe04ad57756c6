"""
Article service: CRUD, search, slug assignment and view counting.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from village_cms.database.models import Article, User
from village_cms.services import slug_service
from village_cms.utils.datetime_utils import isoformat_or_none

logger = logging.getLogger(__name__)

# Columns an update may touch directly (slug handled separately)
_UPDATABLE_FIELDS = {"title", "content", "excerpt", "featured_image", "published", "tags"}
_REQUIRED_FIELDS = {"title", "content", "published"}


def _matches_search(article: Article, term: str) -> bool:
    """True when the title, the content or any single tag contains ``term`` (already lowercased)."""
    if term in (article.title or "").lower() or term in (article.content or "").lower():
        return True
    return any(term in tag.lower() for tag in article.tags or [])


def author_to_dict(user: Optional[User]) -> Optional[Dict]:
    """Embedded author/uploader summary."""
    if user is None:
        return None
    return {"id": user.id, "name": user.name, "email": user.email}


def article_to_dict(article: Article, include_author: bool = True) -> Dict:
    """Serialize an article row."""
    data = {
        "id": article.id,
        "title": article.title,
        "slug": article.slug,
        "content": article.content,
        "excerpt": article.excerpt,
        "featured_image": article.featured_image,
        "published": article.published,
        "tags": list(article.tags or []),
        "views": article.views or 0,
        "created_at": isoformat_or_none(article.created_at),
        "updated_at": isoformat_or_none(article.updated_at),
    }
    if include_author:
        data["author"] = author_to_dict(article.author)
    return data


async def list_articles(
    session: AsyncSession,
    *,
    published: Optional[bool] = None,
    limit: int = 0,
    search: Optional[str] = None,
) -> List[Dict]:
    """
    List articles, newest first.

    Args:
        session: Database session
        published: Filter on publication state (None = both)
        limit: Maximum number of rows (0 = no limit)
        search: Case-insensitive match on title, content or tags

    Returns:
        List of article dicts with embedded author
    """
    query = (
        select(Article)
        .options(selectinload(Article.author))
        .execution_options(populate_existing=True)
    )

    if published is not None:
        query = query.where(Article.published == published)

    query = query.order_by(Article.created_at.desc(), Article.id.desc())
    term = (search or "").strip().lower()
    # Tags are matched one element at a time, so searches filter after the query
    if limit and limit > 0 and not term:
        query = query.limit(limit)

    result = await session.execute(query)
    articles = result.scalars().all()
    if term:
        articles = [a for a in articles if _matches_search(a, term)]
        if limit and limit > 0:
            articles = articles[:limit]
    return [article_to_dict(a) for a in articles]


async def _load_article(session: AsyncSession, *conditions) -> Optional[Article]:
    result = await session.execute(
        select(Article)
        .options(selectinload(Article.author))
        .where(*conditions)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_article(session: AsyncSession, article_id: int) -> Optional[Dict]:
    """Get an article by ID, or None."""
    article = await _load_article(session, Article.id == article_id)
    return article_to_dict(article) if article else None


async def get_article_by_slug(session: AsyncSession, slug: str) -> Optional[Dict]:
    """Get an article by slug, or None."""
    article = await _load_article(session, Article.slug == slug)
    return article_to_dict(article) if article else None


async def create_article(
    session: AsyncSession,
    *,
    author_id: Optional[int],
    title: str,
    content: str,
    excerpt: Optional[str] = None,
    featured_image: Optional[str] = None,
    published: bool = False,
    tags: Optional[List[str]] = None,
    slug: Optional[str] = None,
) -> Dict:
    """
    Create an article.

    The slug is generated from the title unless ``slug`` is given, in which
    case it is normalized and must be free.

    Raises:
        ValueError: If an explicit slug is empty after normalization or too long
        SlugConflictError: If an explicit slug is taken, or generation lost every retry
        SlugStorageError: If the collision lookup fails
    """
    fields = {
        "author_id": author_id,
        "title": title,
        "content": content,
        "excerpt": excerpt,
        "featured_image": featured_image,
        "published": published,
        "tags": tags or [],
        "views": 0,
    }

    if slug is not None:
        article = Article(slug=await slug_service.normalize_explicit_slug(session, Article, slug), **fields)
        session.add(article)
        await slug_service.commit_with_explicit_slug(session, article)
    else:
        async def build(candidate: str) -> Article:
            item = Article(slug=candidate, **fields)
            session.add(item)
            return item

        article = await slug_service.save_with_unique_slug(session, Article, title, build)

    logger.info(f"Created article {article.id} ({article.slug})")
    return await get_article(session, article.id)


async def update_article(session: AsyncSession, article_id: int, **fields) -> Optional[Dict]:
    """
    Update an article.

    Only keys present in ``fields`` are written. When ``title`` is present
    and no ``slug`` is given, the slug is regenerated from the new title with
    the article itself excluded from the collision check, so re-saving the
    same title keeps the same slug.

    Returns:
        Updated article dict, or None if not found or deleted before the save committed
    """
    article = await session.get(Article, article_id)
    if article is None:
        return None

    explicit_slug = fields.pop("slug", None)
    values = {
        k: v
        for k, v in fields.items()
        if k in _UPDATABLE_FIELDS and not (v is None and k in _REQUIRED_FIELDS)
    }
    if "tags" in values and values["tags"] is None:
        values["tags"] = []

    def apply(item: Article) -> Article:
        for key, value in values.items():
            setattr(item, key, value)
        return item

    if explicit_slug is not None:
        article.slug = await slug_service.normalize_explicit_slug(
            session, Article, explicit_slug, exclude_id=article_id
        )
        apply(article)
        await slug_service.commit_with_explicit_slug(session, article)
    elif values.get("title"):
        async def build(candidate: str) -> Article:
            item = await slug_service.reload_for_slug(session, Article, article_id)
            item.slug = candidate
            return apply(item)

        try:
            await slug_service.save_with_unique_slug(
                session, Article, values["title"], build, exclude_id=article_id
            )
        except slug_service.SlugTargetGoneError:
            logger.warning(f"Article {article_id} was deleted while its slug was being updated")
            return None
    else:
        apply(article)
        await session.commit()

    return await get_article(session, article_id)


async def delete_article(session: AsyncSession, article_id: int) -> bool:
    """Delete an article. Its slug becomes free for reuse. Returns False if not found."""
    result = await session.execute(delete(Article).where(Article.id == article_id))
    await session.commit()
    deleted = result.rowcount > 0
    if deleted:
        logger.info(f"Deleted article {article_id}")
    return deleted


async def increment_views(session: AsyncSession, article_id: int) -> Optional[int]:
    """Atomically add one view. Returns the new count, or None if the article doesn't exist."""
    result = await session.execute(
        update(Article)
        .where(Article.id == article_id)
        .values(views=Article.views + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        return None
    await session.commit()
    views = await session.execute(select(Article.views).where(Article.id == article_id))
    return views.scalar_one()
