"""
Constants shared across the village CMS.
"""

import enum


class GalleryCategory(str, enum.Enum):
    """Gallery photo categories."""

    DESA = "desa"
    KEGIATAN = "kegiatan"
    INFRASTRUKTUR = "infrastruktur"
    ALAM = "alam"
    LAINNYA = "lainnya"


class LocationType(str, enum.Enum):
    """Map location types (RW/RT units, village office, facilities, tourism)."""

    RW = "rw"
    RT = "rt"
    KELURAHAN = "kelurahan"
    FASILITAS = "fasilitas"
    WISATA = "wisata"
    LAINNYA = "lainnya"


class UserRole(str, enum.Enum):
    """Admin panel roles."""

    ADMIN = "admin"
    EDITOR = "editor"


# Filter value meaning "no filter" on list endpoints
ALL_FILTER = "all"

# Slug limits
SLUG_MAX_LENGTH = 200
SLUG_SAVE_ATTEMPTS = 3  # Retries when a concurrent writer takes the same slug

# Homepage slider limits
SLIDE_TITLE_MAX_LENGTH = 100
SLIDE_DESCRIPTION_MAX_LENGTH = 200

# Upload limits
MAX_UPLOAD_BYTES = 5 * 1024 * 1024  # 5MB
MAX_IMAGE_WIDTH = 1920
MAX_IMAGE_HEIGHT = 1080
