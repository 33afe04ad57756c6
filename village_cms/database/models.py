"""
SQLAlchemy ORM models for the village profile CMS.
"""

from sqlalchemy import (
    JSON,
    Column,
    Integer,
    String,
    Text,
    Boolean,
    Float,
    DateTime,
    ForeignKey,
    CheckConstraint,
    Index,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from village_cms.database.db import Base
from village_cms.utils.constants import (
    GalleryCategory,
    LocationType,
    UserRole,
    SLUG_MAX_LENGTH,
    SLIDE_TITLE_MAX_LENGTH,
    SLIDE_DESCRIPTION_MAX_LENGTH,
)

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
TagList = JSON().with_variant(JSONB(), "postgresql")


class User(Base):
    """Admin panel accounts."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=False, unique=True)  # Stored lowercase
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.ADMIN.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    articles = relationship("Article", back_populates="author")
    galleries = relationship("Gallery", back_populates="uploader")
    slides = relationship("HomepageSlide", back_populates="uploader")


class Article(Base):
    """News and announcement articles."""

    __tablename__ = "articles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(300), nullable=False)
    slug = Column(String(SLUG_MAX_LENGTH), nullable=True, unique=True)  # Unique per table; freed on delete
    content = Column(Text, nullable=False)
    excerpt = Column(Text, nullable=True)
    featured_image = Column(String(500), nullable=True)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    published = Column(Boolean, nullable=False, default=False)
    tags = Column(TagList, nullable=False, default=list)
    views = Column(Integer, nullable=False, default=0, server_default="0")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    author = relationship("User", back_populates="articles")

    __table_args__ = (
        Index("idx_articles_published_created", "published", "created_at"),
    )


class Gallery(Base):
    """Photo gallery entries."""

    __tablename__ = "galleries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(300), nullable=False)
    slug = Column(String(SLUG_MAX_LENGTH), nullable=True, unique=True)
    description = Column(Text, nullable=True)
    image_url = Column(String(500), nullable=False)
    thumbnail_url = Column(String(500), nullable=True)
    category = Column(String(30), nullable=False, default=GalleryCategory.DESA.value)
    tags = Column(TagList, nullable=False, default=list)
    uploaded_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    published = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    uploader = relationship("User", back_populates="galleries")

    __table_args__ = (
        Index("idx_galleries_category", "category"),
    )


class Location(Base):
    """Points shown on the village map."""

    __tablename__ = "locations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    type = Column(String(20), nullable=False, default=LocationType.LAINNYA.value)
    description = Column(Text, nullable=True)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    address = Column(String(500), nullable=False)
    phone = Column(String(30), nullable=True)
    email = Column(String(255), nullable=True)
    website = Column(String(500), nullable=True)
    image_url = Column(String(500), nullable=True)
    tags = Column(TagList, nullable=False, default=list)
    published = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("latitude >= -90 AND latitude <= 90", name="ck_locations_latitude"),
        CheckConstraint("longitude >= -180 AND longitude <= 180", name="ck_locations_longitude"),
        Index("idx_locations_type", "type"),
        Index("idx_locations_lat_lng", "latitude", "longitude"),
    )


class HomepageSlide(Base):
    """Images rotating in the homepage slider."""

    __tablename__ = "homepage_slides"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(SLIDE_TITLE_MAX_LENGTH), nullable=False)
    description = Column(String(SLIDE_DESCRIPTION_MAX_LENGTH), nullable=True)
    image_url = Column(String(500), nullable=False)
    sort_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    uploaded_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    uploader = relationship("User", back_populates="slides")

    __table_args__ = (Index("idx_homepage_slides_order_active", "sort_order", "is_active"),)


class ContactMessage(Base):
    """Messages sent through the public contact form."""

    __tablename__ = "contact_messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(30), nullable=True)
    subject = Column(String(300), nullable=False)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
