"""Authentication route handlers."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from village_cms.api.routes import limiter, INVALID_CREDENTIALS_RESPONSE
from village_cms.database.db import get_db_session
from village_cms.services import auth_service, user_service
from village_cms.api.auth_dependencies import get_current_user
from village_cms.models.schemas import LoginRequest, AuthResponse, UserResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/api/auth/login", response_model=AuthResponse)
@limiter.limit("10/minute")
async def login(
    request: Request,
    payload: LoginRequest,
    session: AsyncSession = Depends(get_db_session),
):
    """Login with email and password."""
    try:
        user = await user_service.get_user_by_email(session, payload.email)
        if not user:
            raise INVALID_CREDENTIALS_RESPONSE

        if not auth_service.verify_password(payload.password, user["password_hash"]):
            logger.info(f"Failed login attempt for {user['email']}")
            raise INVALID_CREDENTIALS_RESPONSE

        token_data = {"user_id": user["id"], "role": user["role"]}
        access_token = auth_service.create_access_token(data=token_data)

        return AuthResponse(
            access_token=access_token,
            token_type="bearer",
            user=UserResponse(**user_service.public_user(user)),
        )
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error during login: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error during login")


@router.get("/api/auth/me", response_model=UserResponse)
async def get_current_user_info(current_user: dict = Depends(get_current_user)):
    """Get current authenticated user information."""
    return UserResponse(
        id=current_user["id"],
        name=current_user["name"],
        email=current_user["email"],
        role=current_user["role"],
        created_at=current_user.get("created_at"),
    )
