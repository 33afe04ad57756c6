"""Contact form route handlers."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from village_cms.api.routes import limiter
from village_cms.database.db import get_db_session
from village_cms.services import contact_service
from village_cms.models.schemas import ContactRequest, ContactResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/api/contact", response_model=ContactResponse)
@limiter.limit("5/minute")
async def submit_contact(
    request: Request,
    payload: ContactRequest,
    session: AsyncSession = Depends(get_db_session),
):
    """Submit the public contact form. Rate limited per client address."""
    try:
        return await contact_service.submit_contact(
            session,
            name=payload.name,
            email=payload.email,
            subject=payload.subject,
            message=payload.message,
            phone=payload.phone,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error submitting contact form: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Terjadi kesalahan server")
