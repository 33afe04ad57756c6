"""
Location service: CRUD for map locations plus the map filter.

``filter_locations`` and ``count_by_type`` work on serialized dicts so the
same rules apply whether locations come from the database or from a list
the caller already holds.
"""

import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from village_cms.database.models import Location
from village_cms.utils.constants import ALL_FILTER, LocationType
from village_cms.utils.datetime_utils import isoformat_or_none

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = {
    "name",
    "type",
    "description",
    "latitude",
    "longitude",
    "address",
    "phone",
    "email",
    "website",
    "image_url",
    "tags",
    "published",
}
_REQUIRED_FIELDS = {"name", "type", "latitude", "longitude", "address", "published"}


def location_to_dict(location: Location) -> Dict:
    """Serialize a location row."""
    return {
        "id": location.id,
        "name": location.name,
        "type": location.type,
        "description": location.description,
        "latitude": location.latitude,
        "longitude": location.longitude,
        "address": location.address,
        "phone": location.phone,
        "email": location.email,
        "website": location.website,
        "image_url": location.image_url,
        "tags": list(location.tags or []),
        "published": location.published,
        "created_at": isoformat_or_none(location.created_at),
        "updated_at": isoformat_or_none(location.updated_at),
    }


def _type_value(location_type) -> str:
    return location_type.value if isinstance(location_type, LocationType) else location_type


def _validate_coordinates(latitude: Optional[float], longitude: Optional[float]) -> None:
    if latitude is not None and not -90 <= latitude <= 90:
        raise ValueError("Latitude must be between -90 and 90")
    if longitude is not None and not -180 <= longitude <= 180:
        raise ValueError("Longitude must be between -180 and 180")


# ---------------------------------------------------------------------------
# Map filter
# ---------------------------------------------------------------------------


def filter_locations(
    locations: Iterable[Dict],
    location_type: Optional[str] = None,
    search: Optional[str] = None,
) -> List[Dict]:
    """
    Apply the map's type and search filters.

    A location passes when its type equals ``location_type`` (empty or
    ``all`` matches every type) and, for a non-blank ``search``, its name,
    description or address contains the term case-insensitively.
    """
    location_type = _type_value(location_type)
    term = (search or "").strip().lower()

    filtered = []
    for loc in locations:
        if location_type and location_type != ALL_FILTER and loc.get("type") != location_type:
            continue
        if term:
            haystacks = (loc.get("name"), loc.get("description"), loc.get("address"))
            if not any(h and term in h.lower() for h in haystacks):
                continue
        filtered.append(loc)
    return filtered


def count_by_type(locations: Iterable[Dict]) -> Dict:
    """Count locations per type; every known type is present, zero if unused."""
    counts = {t.value: 0 for t in LocationType}
    total = 0
    for loc in locations:
        counts[loc.get("type")] = counts.get(loc.get("type"), 0) + 1
        total += 1
    return {"total": total, "counts": counts}


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


async def list_locations(
    session: AsyncSession,
    *,
    location_type: Optional[str] = None,
    published: Optional[bool] = None,
    search: Optional[str] = None,
) -> List[Dict]:
    """
    List locations newest first.

    Args:
        session: Database session
        location_type: Filter by type (``all`` or None = any)
        published: Filter on publication state (None = both)
        search: Map search term, matched against name, description and address
    """
    query = select(Location).execution_options(populate_existing=True)
    location_type = _type_value(location_type)
    if location_type and location_type != ALL_FILTER:
        query = query.where(Location.type == location_type)
    if published is not None:
        query = query.where(Location.published == published)
    query = query.order_by(Location.created_at.desc(), Location.id.desc())

    result = await session.execute(query)
    locations = [location_to_dict(loc) for loc in result.scalars().all()]
    if search:
        locations = filter_locations(locations, search=search)
    return locations


async def get_location(session: AsyncSession, location_id: int) -> Optional[Dict]:
    """Get a location by ID, or None."""
    result = await session.execute(
        select(Location)
        .where(Location.id == location_id)
        .execution_options(populate_existing=True)
    )
    location = result.scalar_one_or_none()
    return location_to_dict(location) if location else None


async def create_location(
    session: AsyncSession,
    *,
    name: str,
    latitude: float,
    longitude: float,
    address: str,
    location_type: str = LocationType.LAINNYA.value,
    description: Optional[str] = None,
    phone: Optional[str] = None,
    email: Optional[str] = None,
    website: Optional[str] = None,
    image_url: Optional[str] = None,
    tags: Optional[List[str]] = None,
    published: bool = True,
) -> Dict:
    """
    Create a map location.

    Raises:
        ValueError: If coordinates are out of range
    """
    _validate_coordinates(latitude, longitude)
    location = Location(
        name=name,
        type=_type_value(location_type),
        description=description,
        latitude=latitude,
        longitude=longitude,
        address=address,
        phone=phone,
        email=email.lower() if email else None,
        website=website,
        image_url=image_url,
        tags=tags or [],
        published=published,
    )
    session.add(location)
    await session.commit()
    logger.info(f"Created location {location.id}: {name}")
    return await get_location(session, location.id)


async def update_location(session: AsyncSession, location_id: int, **fields) -> Optional[Dict]:
    """
    Update a location. Only keys present in ``fields`` are written.

    Returns:
        Updated location dict, or None if not found

    Raises:
        ValueError: If coordinates are out of range
    """
    location = await session.get(Location, location_id)
    if location is None:
        return None

    if "location_type" in fields:
        fields["type"] = fields.pop("location_type")
    values = {
        k: v
        for k, v in fields.items()
        if k in _UPDATABLE_FIELDS and not (v is None and k in _REQUIRED_FIELDS)
    }
    _validate_coordinates(values.get("latitude"), values.get("longitude"))
    if "type" in values:
        values["type"] = _type_value(values["type"])
    if values.get("email"):
        values["email"] = values["email"].lower()
    if "tags" in values and values["tags"] is None:
        values["tags"] = []

    for key, value in values.items():
        setattr(location, key, value)
    await session.commit()
    return await get_location(session, location_id)


async def delete_location(session: AsyncSession, location_id: int) -> bool:
    """Delete a location. Returns False if not found."""
    result = await session.execute(delete(Location).where(Location.id == location_id))
    await session.commit()
    return result.rowcount > 0
