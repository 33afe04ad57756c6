#!/usr/bin/env python3
"""
Initialize default database values.
Run on startup: creates the admin account when ADMIN_EMAIL and ADMIN_PASSWORD are set.
"""

import asyncio
import logging
import os
from typing import Optional

from village_cms.database.db import Database
from village_cms.services import admin_service

logger = logging.getLogger(__name__)


async def init_defaults(db: Optional[Database] = None) -> bool:
    """
    Initialize default database values.

    Returns:
        True if the admin account was created by this call
    """
    if not (os.getenv("ADMIN_EMAIL") and os.getenv("ADMIN_PASSWORD")):
        logger.info("ADMIN_EMAIL/ADMIN_PASSWORD not set, skipping admin bootstrap")
        return False

    owns_db = db is None
    db = db or Database()
    try:
        async with db.session() as session:
            result = await admin_service.create_admin(session)
    finally:
        if owns_db:
            await db.dispose()

    if result["created"]:
        logger.info(f"✓ Created admin user {result['user']['email']}")
    else:
        logger.info(f"✓ Admin user already exists: {result['user']['email']}")
    return result["created"]


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(init_defaults())
