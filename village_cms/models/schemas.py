"""
Pydantic models for API request/response validation.
"""

from typing import Optional, List, Dict
from pydantic import BaseModel, Field, field_validator

from village_cms.utils.constants import (
    GalleryCategory,
    LocationType,
    SLIDE_TITLE_MAX_LENGTH,
    SLIDE_DESCRIPTION_MAX_LENGTH,
)


def _clean_tags(tags: Optional[List[str]]) -> Optional[List[str]]:
    """Trim tags and drop empty ones."""
    if tags is None:
        return None
    return [t.strip() for t in tags if t and t.strip()]


def _strip_or_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _strip_title(value: Optional[str]) -> Optional[str]:
    """Trim a title; a title made only of whitespace is rejected."""
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("Title is required")
    return value


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request to login with email and password."""

    email: str
    password: str


class UserResponse(BaseModel):
    """Authenticated user."""

    id: int
    name: str
    email: str
    role: str
    created_at: Optional[str] = None


class AuthResponse(BaseModel):
    """Login response with bearer token."""

    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class AuthorSummary(BaseModel):
    """Embedded author/uploader info."""

    id: int
    name: str
    email: str


# ---------------------------------------------------------------------------
# Articles
# ---------------------------------------------------------------------------


class ArticleBase(BaseModel):
    """Base article model."""

    title: str = Field(min_length=1, max_length=300)
    content: str = Field(min_length=1)
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    published: bool = False
    tags: List[str] = []

    clean_tags = field_validator("tags")(_clean_tags)
    strip_title = field_validator("title")(_strip_title)


class ArticleCreate(ArticleBase):
    """Request to create an article. ``slug`` bypasses generation when given."""

    slug: Optional[str] = None


class ArticleUpdate(BaseModel):
    """Partial article update."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=300)
    slug: Optional[str] = None
    content: Optional[str] = Field(default=None, min_length=1)
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    published: Optional[bool] = None
    tags: Optional[List[str]] = None

    clean_tags = field_validator("tags")(_clean_tags)
    strip_title = field_validator("title")(_strip_title)


class ArticleResponse(ArticleBase):
    """Article response."""

    id: int
    slug: Optional[str] = None
    views: int = 0
    author: Optional[AuthorSummary] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ViewCountResponse(BaseModel):
    """Result of incrementing an article's view counter."""

    views: int
    success: bool = True


# ---------------------------------------------------------------------------
# Galleries
# ---------------------------------------------------------------------------


class GalleryBase(BaseModel):
    """Base gallery model."""

    title: str = Field(min_length=1, max_length=300)
    description: Optional[str] = None
    image_url: str = Field(min_length=1)
    thumbnail_url: Optional[str] = None
    category: GalleryCategory = GalleryCategory.DESA
    tags: List[str] = []
    published: bool = False

    clean_tags = field_validator("tags")(_clean_tags)
    strip_title = field_validator("title")(_strip_title)


class GalleryCreate(GalleryBase):
    """Request to create a gallery entry."""

    slug: Optional[str] = None


class GalleryUpdate(BaseModel):
    """Partial gallery update."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=300)
    slug: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = Field(default=None, min_length=1)
    thumbnail_url: Optional[str] = None
    category: Optional[GalleryCategory] = None
    tags: Optional[List[str]] = None
    published: Optional[bool] = None

    clean_tags = field_validator("tags")(_clean_tags)
    strip_title = field_validator("title")(_strip_title)


class GalleryResponse(GalleryBase):
    """Gallery response."""

    id: int
    slug: Optional[str] = None
    uploader: Optional[AuthorSummary] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# ---------------------------------------------------------------------------
# Locations
# ---------------------------------------------------------------------------


class LocationBase(BaseModel):
    """Base location model."""

    name: str = Field(min_length=1, max_length=200)
    type: LocationType = LocationType.LAINNYA
    description: Optional[str] = None
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    address: str = Field(min_length=1, max_length=500)
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    image_url: Optional[str] = None
    tags: List[str] = []
    published: bool = True

    clean_tags = field_validator("tags")(_clean_tags)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: Optional[str]) -> Optional[str]:
        v = _strip_or_none(v)
        return v.lower() if v else None


class LocationCreate(LocationBase):
    """Request to create a location."""

    pass


class LocationUpdate(BaseModel):
    """Partial location update."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    type: Optional[LocationType] = None
    description: Optional[str] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    address: Optional[str] = Field(default=None, min_length=1, max_length=500)
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    image_url: Optional[str] = None
    tags: Optional[List[str]] = None
    published: Optional[bool] = None

    clean_tags = field_validator("tags")(_clean_tags)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: Optional[str]) -> Optional[str]:
        v = _strip_or_none(v)
        return v.lower() if v else None


class LocationResponse(LocationBase):
    """Location response."""

    id: int
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class LocationTypeCountsResponse(BaseModel):
    """Per-type location counts for the map legend."""

    total: int
    counts: Dict[str, int]


# ---------------------------------------------------------------------------
# Homepage slider
# ---------------------------------------------------------------------------


class SlideCreate(BaseModel):
    """Request to add an image to the homepage slider."""

    image_url: str = Field(min_length=1)
    is_active: bool = True


class SlideUpdate(BaseModel):
    """Partial slide update."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=SLIDE_TITLE_MAX_LENGTH)
    description: Optional[str] = Field(default=None, max_length=SLIDE_DESCRIPTION_MAX_LENGTH)
    image_url: Optional[str] = Field(default=None, min_length=1)
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None


class SlideResponse(BaseModel):
    """Slide response."""

    id: int
    title: str
    description: Optional[str] = None
    image_url: str
    sort_order: int
    is_active: bool
    uploaded_by: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# ---------------------------------------------------------------------------
# Upload / contact
# ---------------------------------------------------------------------------


class UploadResponse(BaseModel):
    """Result of an image upload."""

    success: bool = True
    filename: str
    url: str
    original_name: Optional[str] = None
    size: int
    type: str
    storage: str


class ContactRequest(BaseModel):
    """Contact form submission. Required fields are checked by the contact service."""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None


class ContactResponse(BaseModel):
    """Contact form acknowledgement."""

    message: str
    success: bool = True


# ---------------------------------------------------------------------------
# Admin / public
# ---------------------------------------------------------------------------


class SlugMigrationItem(BaseModel):
    """One row processed by the slug backfill."""

    id: int
    title: str
    slug: Optional[str] = None
    error: Optional[str] = None


class SlugMigrationResponse(BaseModel):
    """Slug backfill report."""

    message: str
    processed: int
    results: Dict[str, List[SlugMigrationItem]]


class DashboardStatsResponse(BaseModel):
    """Content counts for the admin dashboard."""

    articles: int
    published_articles: int
    galleries: int
    locations: int
    slides: int
    contact_messages: int


class SitemapItem(BaseModel):
    """A public page for sitemap generation."""

    slug: str
    updated_at: Optional[str] = None


class SitemapResponse(BaseModel):
    """Published article and gallery slugs."""

    articles: List[SitemapItem]
    galleries: List[SitemapItem]
