"""001_initial_schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 10:00:00.000000

Initial schema for the village CMS:
- users (admin panel accounts)
- articles and galleries (with unique slug indexes)
- locations (map points, coordinate range checks)
- homepage_slides, contact_messages
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TAG_LIST = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    """Create all tables."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "articles",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("slug", sa.String(200), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("excerpt", sa.Text(), nullable=True),
        sa.Column("featured_image", sa.String(500), nullable=True),
        sa.Column("author_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("published", sa.Boolean(), nullable=False),
        sa.Column("tags", TAG_LIST, nullable=False),
        sa.Column("views", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.UniqueConstraint("slug", name="uq_articles_slug"),
    )
    op.create_index("idx_articles_published_created", "articles", ["published", "created_at"])

    op.create_table(
        "galleries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("slug", sa.String(200), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(500), nullable=False),
        sa.Column("thumbnail_url", sa.String(500), nullable=True),
        sa.Column("category", sa.String(30), nullable=False),
        sa.Column("tags", TAG_LIST, nullable=False),
        sa.Column("uploaded_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("published", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("slug", name="uq_galleries_slug"),
    )
    op.create_index("idx_galleries_category", "galleries", ["category"])

    op.create_table(
        "locations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("address", sa.String(500), nullable=False),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("website", sa.String(500), nullable=True),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.Column("tags", TAG_LIST, nullable=False),
        sa.Column("published", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("latitude >= -90 AND latitude <= 90", name="ck_locations_latitude"),
        sa.CheckConstraint("longitude >= -180 AND longitude <= 180", name="ck_locations_longitude"),
    )
    op.create_index("idx_locations_type", "locations", ["type"])
    op.create_index("idx_locations_lat_lng", "locations", ["latitude", "longitude"])

    op.create_table(
        "homepage_slides",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("description", sa.String(200), nullable=True),
        sa.Column("image_url", sa.String(500), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("uploaded_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        *_timestamps(),
    )
    op.create_index("idx_homepage_slides_order_active", "homepage_slides", ["sort_order", "is_active"])

    op.create_table(
        "contact_messages",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("subject", sa.String(300), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("contact_messages")
    op.drop_index("idx_homepage_slides_order_active", table_name="homepage_slides")
    op.drop_table("homepage_slides")
    op.drop_index("idx_locations_lat_lng", table_name="locations")
    op.drop_index("idx_locations_type", table_name="locations")
    op.drop_table("locations")
    op.drop_index("idx_galleries_category", table_name="galleries")
    op.drop_table("galleries")
    op.drop_index("idx_articles_published_created", table_name="articles")
    op.drop_table("articles")
    op.drop_table("users")
