"""
Admin maintenance operations: bootstrap account, content reset and seeding,
slug backfill and dashboard counts.
"""

import logging
import os
from typing import Dict, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from village_cms.database.models import Article, Gallery, HomepageSlide, Location
from village_cms.services import (
    article_service,
    auth_service,
    contact_service,
    gallery_service,
    location_service,
    slug_service,
    user_service,
)
from village_cms.utils.constants import UserRole

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_NAME = "Administrator"

SAMPLE_LOCATIONS = [
    {
        "name": "RW 01 Desa Cepoko",
        "location_type": "rw",
        "description": "Rukun Warga 01 Desa Cepoko",
        "latitude": -7.0051,
        "longitude": 110.4381,
        "address": "Jl. Desa Cepoko, RW 01, Desa Cepoko, Gunungpati, Semarang",
        "phone": "024-1234567",
        "tags": ["rw", "pemerintahan"],
    },
    {
        "name": "RT 01 RW 01",
        "location_type": "rt",
        "description": "Rukun Tetangga 01 RW 01",
        "latitude": -7.0061,
        "longitude": 110.4391,
        "address": "Jl. Desa Cepoko, RT 01 RW 01, Desa Cepoko, Gunungpati, Semarang",
        "tags": ["rt", "pemerintahan"],
    },
    {
        "name": "Masjid Al-Ikhlas",
        "location_type": "fasilitas",
        "description": "Masjid utama Desa Cepoko",
        "latitude": -7.0041,
        "longitude": 110.4371,
        "address": "Jl. Masjid, Desa Cepoko, Gunungpati, Semarang",
        "phone": "024-7654321",
        "tags": ["masjid", "ibadah", "fasilitas"],
    },
    {
        "name": "SDN Cepoko",
        "location_type": "fasilitas",
        "description": "Sekolah Dasar Negeri Cepoko",
        "latitude": -7.0071,
        "longitude": 110.4401,
        "address": "Jl. Pendidikan, Desa Cepoko, Gunungpati, Semarang",
        "phone": "024-9876543",
        "tags": ["sekolah", "pendidikan", "fasilitas"],
    },
    {
        "name": "Pasar Cepoko",
        "location_type": "fasilitas",
        "description": "Pasar tradisional Desa Cepoko",
        "latitude": -7.0031,
        "longitude": 110.4361,
        "address": "Jl. Pasar, Desa Cepoko, Gunungpati, Semarang",
        "tags": ["pasar", "ekonomi", "fasilitas"],
    },
    {
        "name": "Taman Desa Cepoko",
        "location_type": "wisata",
        "description": "Taman rekreasi keluarga di Desa Cepoko",
        "latitude": -7.0081,
        "longitude": 110.4411,
        "address": "Jl. Taman, Desa Cepoko, Gunungpati, Semarang",
        "tags": ["taman", "rekreasi", "wisata"],
    },
]

SAMPLE_GALLERIES = [
    {
        "title": "Pemandangan Desa Cepoko",
        "description": "Pemandangan indah Desa Cepoko dari atas bukit",
        "category": "alam",
        "image_url": "https://images.unsplash.com/photo-1506905925346-21bda4d32df4?w=800&h=600&fit=crop",
        "tags": ["pemandangan", "alam", "desa"],
    },
    {
        "title": "Kegiatan Gotong Royong",
        "description": "Warga Desa Cepoko melakukan gotong royong membersihkan lingkungan",
        "category": "kegiatan",
        "image_url": "https://images.unsplash.com/photo-1582213782179-e0d53f98f2ca?w=800&h=600&fit=crop",
        "tags": ["gotong royong", "kegiatan", "lingkungan"],
    },
    {
        "title": "Masjid Al-Ikhlas",
        "description": "Masjid utama Desa Cepoko yang megah",
        "category": "infrastruktur",
        "image_url": "https://images.unsplash.com/photo-1564769668428-4d1e4c2f8e8e?w=800&h=600&fit=crop",
        "tags": ["masjid", "ibadah", "infrastruktur"],
    },
    {
        "title": "Sawah di Desa Cepoko",
        "description": "Hamparan sawah yang menghijau di Desa Cepoko",
        "category": "alam",
        "image_url": "https://images.unsplash.com/photo-1500382017468-9049fed747ef?w=800&h=600&fit=crop",
        "tags": ["sawah", "pertanian", "alam"],
    },
    {
        "title": "Kegiatan PKK",
        "description": "Kegiatan PKK Desa Cepoko dalam program pemberdayaan perempuan",
        "category": "kegiatan",
        "image_url": "https://images.unsplash.com/photo-1573496359142-b8d87734a5a2?w=800&h=600&fit=crop",
        "tags": ["pkk", "perempuan", "pemberdayaan"],
    },
    {
        "title": "Jalan Desa",
        "description": "Jalan utama Desa Cepoko yang sudah diperbaiki",
        "category": "infrastruktur",
        "image_url": "https://images.unsplash.com/photo-1558618666-fcd25c85cd64?w=800&h=600&fit=crop",
        "tags": ["jalan", "infrastruktur", "pembangunan"],
    },
]

SAMPLE_ARTICLES = [
    {
        "title": "Selamat Datang di Desa Cepoko",
        "content": (
            "<p>Selamat datang di website resmi Desa Cepoko, Gunungpati, Semarang. "
            "Desa kami adalah desa yang indah dengan masyarakat yang ramah dan gotong royong.</p>"
            "<p>Desa Cepoko memiliki berbagai fasilitas umum seperti masjid, sekolah, pasar, "
            "dan taman yang dapat digunakan oleh seluruh warga desa.</p>"
        ),
        "excerpt": "Pengenalan Desa Cepoko yang indah dengan masyarakat yang ramah dan gotong royong.",
        "tags": ["pengenalan", "desa", "selamat datang"],
        "views": 150,
    },
    {
        "title": "Kegiatan Gotong Royong Rutin",
        "content": (
            "<p>Desa Cepoko mengadakan kegiatan gotong royong rutin setiap minggu untuk "
            "menjaga kebersihan dan keindahan lingkungan desa.</p>"
            "<p>Kegiatan ini melibatkan seluruh warga desa dari berbagai usia, mulai dari "
            "anak-anak hingga lansia.</p>"
        ),
        "excerpt": "Kegiatan gotong royong rutin untuk menjaga kebersihan dan keindahan lingkungan desa.",
        "tags": ["gotong royong", "kegiatan", "lingkungan"],
        "views": 89,
    },
    {
        "title": "Pembangunan Infrastruktur Desa",
        "content": (
            "<p>Pemerintah desa terus berupaya membangun dan memperbaiki infrastruktur di "
            "Desa Cepoko untuk meningkatkan kesejahteraan warga.</p>"
            "<p>Beberapa pembangunan yang telah dilakukan antara lain perbaikan jalan desa, "
            "pembangunan drainase, dan renovasi fasilitas umum.</p>"
        ),
        "excerpt": "Upaya pemerintah desa dalam membangun dan memperbaiki infrastruktur untuk kesejahteraan warga.",
        "tags": ["pembangunan", "infrastruktur", "pemerintah"],
        "views": 67,
    },
]


async def create_admin(
    session: AsyncSession,
    email: Optional[str] = None,
    password: Optional[str] = None,
    name: str = DEFAULT_ADMIN_NAME,
) -> Dict:
    """
    Create the bootstrap admin account if it doesn't exist yet.

    Credentials default to ``ADMIN_EMAIL`` / ``ADMIN_PASSWORD``. Safe to call
    repeatedly: an existing account is returned untouched.

    Returns:
        ``{"created": bool, "user": {...}}`` (never includes the password hash)

    Raises:
        ValueError: If no email or password is available
    """
    email = email or os.getenv("ADMIN_EMAIL")
    password = password or os.getenv("ADMIN_PASSWORD")
    if not email or not password:
        raise ValueError("ADMIN_EMAIL and ADMIN_PASSWORD must be set")

    existing = await user_service.get_user_by_email(session, email)
    if existing:
        logger.info(f"Admin user {existing['email']} already exists")
        return {"created": False, "user": user_service.public_user(existing)}

    user_id = await user_service.create_user(
        session,
        name=name,
        email=email,
        password_hash=auth_service.hash_password(password),
        role=UserRole.ADMIN.value,
    )
    user = await user_service.get_user_by_id(session, user_id)
    return {"created": True, "user": user_service.public_user(user)}


async def clear_content(session: AsyncSession) -> Dict[str, int]:
    """
    Delete all locations, galleries and articles.

    Users, slides and contact messages are kept.

    Returns:
        Number of deleted rows per content type
    """
    counts = {}
    for key, model in (("locations", Location), ("galleries", Gallery), ("articles", Article)):
        result = await session.execute(delete(model))
        counts[key] = result.rowcount
    await session.commit()
    logger.info(f"Cleared content: {counts}")
    return counts


async def seed_content(session: AsyncSession, author_id: Optional[int]) -> Dict[str, int]:
    """
    Replace all content with the sample village data.

    Slugs go through the normal resolver, so seeding twice yields the same slugs.

    Args:
        session: Database session
        author_id: Owner of the seeded articles and galleries

    Returns:
        Number of created rows per content type
    """
    await clear_content(session)

    for location in SAMPLE_LOCATIONS:
        await location_service.create_location(session, published=True, **location)

    for gallery in SAMPLE_GALLERIES:
        await gallery_service.create_gallery(
            session, uploaded_by=author_id, published=True, **gallery
        )

    for sample in SAMPLE_ARTICLES:
        fields = {k: v for k, v in sample.items() if k != "views"}
        article = await article_service.create_article(
            session, author_id=author_id, published=True, **fields
        )
        await session.execute(
            update(Article).where(Article.id == article["id"]).values(views=sample["views"])
        )
    await session.commit()

    counts = {
        "locations": len(SAMPLE_LOCATIONS),
        "galleries": len(SAMPLE_GALLERIES),
        "articles": len(SAMPLE_ARTICLES),
    }
    logger.info(f"Seeded sample content: {counts}")
    return counts


async def migrate_slugs(session: AsyncSession) -> Dict:
    """
    Backfill slugs for galleries and articles that have none.

    Returns:
        ``{"processed": n, "results": {"galleries": [...], "articles": [...]}}``
    """
    results = {
        "galleries": await slug_service.backfill_missing_slugs(session, Gallery),
        "articles": await slug_service.backfill_missing_slugs(session, Article),
    }
    processed = sum(len(rows) for rows in results.values())
    logger.info(f"Slug migration processed {processed} rows")
    return {"processed": processed, "results": results}


async def _count(session: AsyncSession, column, *conditions) -> int:
    query = select(func.count(column))
    if conditions:
        query = query.where(*conditions)
    result = await session.execute(query)
    return result.scalar_one()


async def dashboard_stats(session: AsyncSession) -> Dict[str, int]:
    """Content counts shown on the admin dashboard."""
    return {
        "articles": await _count(session, Article.id),
        "published_articles": await _count(session, Article.id, Article.published.is_(True)),
        "galleries": await _count(session, Gallery.id),
        "locations": await _count(session, Location.id),
        "slides": await _count(session, HomepageSlide.id),
        "contact_messages": await contact_service.count_messages(session),
    }
