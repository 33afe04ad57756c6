#!/usr/bin/env python3
"""
Content maintenance from the command line, without going through the API.

Usage:
    python scripts/manage_content.py create-admin
    python scripts/manage_content.py seed
    python scripts/manage_content.py clear
    python scripts/manage_content.py migrate-slugs

Reads DATABASE_URL (and ADMIN_EMAIL / ADMIN_PASSWORD for create-admin and
seed) from the environment or .env.
"""

import argparse
import asyncio
import os
import sys

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from village_cms.database.db import Database
from village_cms.services import admin_service


async def create_admin(session):
    result = await admin_service.create_admin(session)
    if result["created"]:
        print(f"✓ Created admin user {result['user']['email']}")
    else:
        print(f"⏭️  Admin user already exists: {result['user']['email']}")
    return result["user"]


async def seed(session):
    user = await create_admin(session)
    counts = await admin_service.seed_content(session, author_id=user["id"])
    print(
        f"✓ Seeded {counts['locations']} locations, "
        f"{counts['galleries']} galleries, {counts['articles']} articles"
    )


async def clear(session):
    deleted = await admin_service.clear_content(session)
    print(
        f"🗑️  Deleted {deleted['locations']} locations, "
        f"{deleted['galleries']} galleries, {deleted['articles']} articles"
    )


async def migrate_slugs(session):
    report = await admin_service.migrate_slugs(session)
    for table, rows in report["results"].items():
        for row in rows:
            if "error" in row:
                print(f"   ❌ {table} #{row['id']} {row['title']}: {row['error']}")
            else:
                print(f"   ✓ {table} #{row['id']} {row['title']} -> {row['slug']}")
    print(f"\n✅ Slug migration processed {report['processed']} rows")


COMMANDS = {
    "create-admin": create_admin,
    "seed": seed,
    "clear": clear,
    "migrate-slugs": migrate_slugs,
}


async def main():
    parser = argparse.ArgumentParser(description="Village CMS content maintenance")
    parser.add_argument("command", choices=sorted(COMMANDS), help="Operation to run")
    args = parser.parse_args()

    db = Database()
    try:
        await db.init_schema()
        async with db.session_factory() as session:
            await COMMANDS[args.command](session)
    except ValueError as e:
        print(f"❌ {e}")
        sys.exit(1)
    finally:
        await db.dispose()


if __name__ == "__main__":
    asyncio.run(main())
