"""
Unique slug resolution for sluggable content (articles, galleries).

A slug is derived from the title with ``slugify``; collisions within the same
table are resolved by appending ``-1``, ``-2``, ... to the base slug. The
check-then-write is not atomic, so the slug columns carry a unique index and
``save_with_unique_slug`` retries the resolve when a concurrent writer wins
the race.
"""

import logging
import secrets
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from village_cms.utils.constants import SLUG_MAX_LENGTH, SLUG_SAVE_ATTEMPTS
from village_cms.utils.slugify import slugify

logger = logging.getLogger(__name__)

# Room kept at the end of a base slug for "-<counter>" suffixes
_SUFFIX_RESERVE = 10

_FALLBACK_PREFIXES = {
    "articles": "article",
    "galleries": "gallery",
}


class SlugConflictError(Exception):
    """The slug is held by another row, or retries against concurrent writers ran out."""


class SlugStorageError(Exception):
    """The collision lookup itself failed at the storage layer."""



class SlugTargetGoneError(Exception):
    """The row being re-slugged was deleted before its save committed."""


async def reload_for_slug(session: AsyncSession, model: Type[Any], row_id: int) -> Any:
    """Fetch the row a retried ``build`` should update, failing if it has been deleted since."""
    item = await session.get(model, row_id)
    if item is None:
        raise SlugTargetGoneError(f"{model.__tablename__} {row_id} no longer exists")
    return item


def fallback_slug(model: Type[Any]) -> str:
    """Random slug for titles that normalize to nothing (e.g. "!!!" or non-Latin script)."""
    prefix = _FALLBACK_PREFIXES.get(model.__tablename__, "item")
    return f"{prefix}-{secrets.token_hex(4)}"


def base_slug(model: Type[Any], title: str) -> str:
    """Slugify ``title``, truncated to fit the column, with a random fallback when empty."""
    base = slugify(title)[: SLUG_MAX_LENGTH - _SUFFIX_RESERVE].strip("-")
    if not base:
        base = fallback_slug(model)
        logger.info(f"Title {title!r} has no slug-safe characters, using {base}")
    return base


async def _slug_taken(
    session: AsyncSession, model: Type[Any], slug: str, exclude_id: Optional[int] = None
) -> bool:
    """Return True if another row of ``model`` already holds ``slug``."""
    query = select(model.id).where(model.slug == slug)
    if exclude_id is not None:
        query = query.where(model.id != exclude_id)
    try:
        result = await session.execute(query.limit(1))
    except SQLAlchemyError as e:
        raise SlugStorageError(f"Slug lookup failed for {model.__tablename__}: {e}") from e
    return result.scalar_one_or_none() is not None


async def resolve_unique_slug(
    session: AsyncSession,
    model: Type[Any],
    title: str,
    exclude_id: Optional[int] = None,
) -> str:
    """
    Find a slug for ``title`` that no other row of ``model`` holds.

    Args:
        session: Database session
        model: Sluggable ORM model (needs ``id`` and ``slug`` columns)
        title: Title to derive the slug from
        exclude_id: Row being updated; its own slug does not count as a collision

    Returns:
        The base slug, or the base slug with the first free numeric suffix

    Raises:
        SlugStorageError: If a collision lookup fails
    """
    base = base_slug(model, title)
    candidate = base
    counter = 1
    while await _slug_taken(session, model, candidate, exclude_id):
        candidate = f"{base}-{counter}"
        counter += 1
    return candidate


async def normalize_explicit_slug(
    session: AsyncSession,
    model: Type[Any],
    slug: str,
    exclude_id: Optional[int] = None,
) -> str:
    """
    Validate a caller-supplied slug.

    The value is normalized with ``slugify`` and must not be held by another row.
    It is never truncated or suffixed.

    Raises:
        ValueError: If the slug is empty after normalization or longer than the column
        SlugConflictError: If another row already uses it
    """
    normalized = slugify(slug)
    if not normalized:
        raise ValueError("Slug must contain at least one letter or digit")
    if len(normalized) > SLUG_MAX_LENGTH:
        raise ValueError(f"Slug must be at most {SLUG_MAX_LENGTH} characters")
    if await _slug_taken(session, model, normalized, exclude_id):
        raise SlugConflictError(f"Slug '{normalized}' is already in use")
    return normalized


async def save_with_unique_slug(
    session: AsyncSession,
    model: Type[Any],
    title: str,
    build: Callable[[str], Awaitable[Any]],
    exclude_id: Optional[int] = None,
) -> Any:
    """
    Resolve a slug, let ``build`` stage the row with it, and commit.

    ``build(slug)`` must add or update the row in ``session`` and return it.
    It is called again after a rollback, so it must re-apply every change.
    When the commit hits the unique index because a concurrent writer took
    the candidate slug, the slug is resolved again and the save retried.

    Returns:
        The committed (refreshed) row

    Raises:
        SlugConflictError: If every attempt lost the race
        SlugStorageError: If a collision lookup fails
        IntegrityError: If the commit failed for a reason other than the slug
    """
    for attempt in range(1, SLUG_SAVE_ATTEMPTS + 1):
        slug = await resolve_unique_slug(session, model, title, exclude_id=exclude_id)
        item = await build(slug)
        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            if not await _slug_taken(session, model, slug, exclude_id):
                raise
            logger.warning(
                f"Slug '{slug}' on {model.__tablename__} taken concurrently "
                f"(attempt {attempt}/{SLUG_SAVE_ATTEMPTS}), retrying"
            )
            continue
        await session.refresh(item)
        return item

    raise SlugConflictError(
        f"Could not assign a unique slug for '{title}' after {SLUG_SAVE_ATTEMPTS} attempts"
    )


async def commit_with_explicit_slug(session: AsyncSession, item: Any) -> Any:
    """Commit a row whose slug was supplied by the caller, mapping a unique-index hit to a conflict."""
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise SlugConflictError(f"Slug '{item.slug}' is already in use") from e
    await session.refresh(item)
    return item


async def backfill_missing_slugs(session: AsyncSession, model: Type[Any]) -> List[Dict]:
    """
    Assign slugs to rows that have none (NULL or empty string).

    Each row is committed on its own so later rows see earlier assignments.
    A row that fails is reported with its error and the rest continue.

    Returns:
        One dict per processed row: ``{id, title, slug}`` or ``{id, title, error}``
    """
    result = await session.execute(
        select(model.id, model.title)
        .where(or_(model.slug.is_(None), model.slug == ""))
        .order_by(model.id)
    )
    rows = result.all()
    logger.info(f"Found {len(rows)} {model.__tablename__} rows without slug")

    report = []
    for row_id, title in rows:
        async def build(slug: str, row_id: int = row_id) -> Any:
            item = await reload_for_slug(session, model, row_id)
            item.slug = slug
            return item

        try:
            item = await save_with_unique_slug(session, model, title, build, exclude_id=row_id)
        except (SlugConflictError, SlugStorageError, SlugTargetGoneError, IntegrityError) as e:
            logger.error(f"Error assigning slug to {model.__tablename__} {row_id}: {e}")
            report.append({"id": row_id, "title": title, "error": str(e)})
            continue
        logger.info(f"Updated {model.__tablename__} {row_id}: {title} -> {item.slug}")
        report.append({"id": row_id, "title": title, "slug": item.slug})
    return report
