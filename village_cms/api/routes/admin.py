"""Admin maintenance route handlers: bootstrap, reset, seeding, slug backfill, stats."""

import hmac
import logging
import os
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from village_cms.database.db import get_db_session
from village_cms.services import admin_service
from village_cms.services.slug_service import SlugStorageError
from village_cms.api.auth_dependencies import require_admin
from village_cms.models.schemas import DashboardStatsResponse, SlugMigrationResponse

logger = logging.getLogger(__name__)
router = APIRouter()


def _check_bootstrap_token(provided: Optional[str]) -> None:
    """Compare the ``X-Bootstrap-Token`` header against ``ADMIN_BOOTSTRAP_TOKEN``."""
    expected = os.getenv("ADMIN_BOOTSTRAP_TOKEN")
    if not expected:
        raise HTTPException(status_code=403, detail="Admin bootstrap is disabled")
    if not provided or not hmac.compare_digest(expected, provided):
        raise HTTPException(status_code=403, detail="Invalid bootstrap token")


@router.post("/api/admin/create-admin")
async def create_admin(
    x_bootstrap_token: Optional[str] = Header(None),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Create the admin account from ``ADMIN_EMAIL`` / ``ADMIN_PASSWORD``.

    Requires the ``X-Bootstrap-Token`` header. Idempotent; the password is never returned.
    """
    try:
        _check_bootstrap_token(x_bootstrap_token)
        result = await admin_service.create_admin(session)
        message = "Admin user created successfully" if result["created"] else "Admin user already exists"
        return {"message": message, **result}
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating admin user: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error creating admin user")


@router.delete("/api/admin/clear-data")
async def clear_data(
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Delete all locations, galleries and articles (admin)."""
    try:
        deleted = await admin_service.clear_content(session)
        logger.warning(f"Content cleared by user {user['id']}: {deleted}")
        return {"message": "All data cleared successfully", "deleted": deleted}
    except Exception as e:
        logger.error(f"Error clearing data: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to clear data")


@router.post("/api/admin/seed")
async def seed_data(
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Replace content with sample village data (admin)."""
    try:
        created = await admin_service.seed_content(session, author_id=user["id"])
        return {"message": "Sample data created successfully!", "data": created}
    except Exception as e:
        logger.error(f"Error seeding data: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to seed data")


@router.post("/api/admin/migrate-slugs", response_model=SlugMigrationResponse)
async def migrate_slugs(
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Assign slugs to galleries and articles that have none (admin)."""
    try:
        report = await admin_service.migrate_slugs(session)
        return {"message": "Slug migration completed", **report}
    except SlugStorageError as e:
        logger.error(f"Slug migration aborted: {e}", exc_info=True)
        raise HTTPException(status_code=503, detail="Slug lookup is temporarily unavailable")
    except Exception as e:
        logger.error(f"Error migrating slugs: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Migration failed")


@router.get("/api/admin/stats", response_model=DashboardStatsResponse)
async def dashboard_stats(
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Content counts for the dashboard (admin)."""
    try:
        return await admin_service.dashboard_stats(session)
    except Exception as e:
        logger.error(f"Error fetching dashboard stats: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching stats")
