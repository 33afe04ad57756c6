"""
Shared pytest configuration for the village_cms tests.

Service tests run against an in-memory SQLite database (aiosqlite) by
default. Set TEST_DATABASE_URL to run them against PostgreSQL instead.

SAFETY: When TEST_DATABASE_URL is set, this module REFUSES to run against any
database whose name does not contain the substring "test". This prevents
accidental drop of the development or production database.
"""

import os

# Must be set before the app is imported so the rate limiter becomes a no-op
os.environ.setdefault("ENV", "test")
os.environ.setdefault("ENABLE_EMAIL", "false")

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from village_cms.database.db import Database
from village_cms.services import auth_service, user_service

SQLITE_MEMORY_URL = "sqlite+aiosqlite:///:memory:"


def _resolve_test_database_url() -> str:
    """Build the test database URL with safety checks.

    Raises ``RuntimeError`` if TEST_DATABASE_URL does not point to a database
    whose name contains "test".
    """
    url = os.getenv("TEST_DATABASE_URL")
    if not url:
        return SQLITE_MEMORY_URL

    # ── Safety gate: database name MUST contain "test" ──────────────────
    db_name = url.rsplit("/", 1)[-1].split("?")[0]  # strip query params
    if "test" not in db_name.lower():
        raise RuntimeError(
            f"\n{'=' * 70}\n"
            f"  SAFETY: Refusing to run tests against database '{db_name}'.\n"
            f"  The database name must contain 'test' to prevent accidental\n"
            f"  data loss in development or production databases.\n\n"
            f"  Resolved URL: {url}\n"
            f"{'=' * 70}"
        )
    return url


# Validated at import time so pytest fails immediately with a clear message
TEST_DATABASE_URL = _resolve_test_database_url()


@pytest_asyncio.fixture(scope="function")
async def test_db():
    """Database handle with a fresh schema for each test."""
    db = Database(TEST_DATABASE_URL, echo=False)
    await db.drop_schema()
    await db.init_schema()

    yield db

    await db.drop_schema()
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(test_db) -> AsyncSession:
    """Session bound to the test database."""
    async with test_db.session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()
            await session.close()


@pytest_asyncio.fixture
async def admin_user(db_session):
    """An admin account (password: ``admin-pass-123``)."""
    user_id = await user_service.create_user(
        db_session,
        name="Admin Desa",
        email="admin@desa.id",
        password_hash=auth_service.hash_password("admin-pass-123"),
        role="admin",
    )
    return await user_service.get_user_by_id(db_session, user_id)
