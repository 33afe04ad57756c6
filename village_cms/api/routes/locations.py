"""Map location route handlers."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from village_cms.database.db import get_db_session
from village_cms.services import location_service
from village_cms.api.auth_dependencies import require_admin
from village_cms.models.schemas import (
    LocationCreate,
    LocationUpdate,
    LocationResponse,
    LocationTypeCountsResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/locations", response_model=List[LocationResponse])
async def list_locations(
    location_type: Optional[str] = Query(None, alias="type"),
    published: Optional[bool] = None,
    search: Optional[str] = None,
    session: AsyncSession = Depends(get_db_session),
):
    """
    List map locations (public).

    Args:
        type: Location type, or ``all``
        published: Filter on publication state
        search: Case-insensitive match on name, description or address
    """
    try:
        return await location_service.list_locations(
            session, location_type=location_type, published=published, search=search
        )
    except Exception as e:
        logger.error(f"Error listing locations: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error listing locations")


@router.get("/api/locations/types", response_model=LocationTypeCountsResponse)
async def location_type_counts(
    published: Optional[bool] = True,
    session: AsyncSession = Depends(get_db_session),
):
    """Per-type location counts for the map legend (public)."""
    try:
        locations = await location_service.list_locations(session, published=published)
        return location_service.count_by_type(locations)
    except Exception as e:
        logger.error(f"Error counting location types: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error counting locations")


@router.get("/api/locations/{location_id}", response_model=LocationResponse)
async def get_location(location_id: int, session: AsyncSession = Depends(get_db_session)):
    """Get a location by ID (public)."""
    try:
        location = await location_service.get_location(session, location_id)
        if not location:
            raise HTTPException(status_code=404, detail="Location not found")
        return location
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching location {location_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching location")


@router.post("/api/locations", response_model=LocationResponse, status_code=201)
async def create_location(
    payload: LocationCreate,
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Create a location (admin)."""
    try:
        return await location_service.create_location(
            session,
            name=payload.name,
            location_type=payload.type,
            description=payload.description,
            latitude=payload.latitude,
            longitude=payload.longitude,
            address=payload.address,
            phone=payload.phone,
            email=payload.email,
            website=payload.website,
            image_url=payload.image_url,
            tags=payload.tags,
            published=payload.published,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating location: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error creating location")


@router.patch("/api/locations/{location_id}", response_model=LocationResponse)
async def update_location(
    location_id: int,
    payload: LocationUpdate,
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Update a location (admin)."""
    try:
        location = await location_service.update_location(
            session, location_id, **payload.model_dump(exclude_unset=True)
        )
        if not location:
            raise HTTPException(status_code=404, detail="Location not found")
        return location
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating location {location_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error updating location")


@router.delete("/api/locations/{location_id}")
async def delete_location(
    location_id: int,
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Delete a location (admin)."""
    try:
        success = await location_service.delete_location(session, location_id)
        if not success:
            raise HTTPException(status_code=404, detail="Location not found")
        return {"success": True}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting location {location_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error deleting location")
