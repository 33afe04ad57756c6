"""
Authentication dependencies for FastAPI routes.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from village_cms.services import auth_service, user_service
from village_cms.database.db import get_db_session
from village_cms.utils.constants import UserRole

security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    session: AsyncSession = Depends(get_db_session),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict:
    """
    Dependency to get the current authenticated user from JWT token.

    Args:
        session: Database session
        credentials: HTTP Bearer token credentials

    Returns:
        User dictionary (without password hash)

    Raises:
        HTTPException: 401 if the token is missing or invalid, or the user no longer exists
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")

    # Verify token
    payload = auth_service.verify_token(credentials.credentials)
    if payload is None:
        raise _unauthorized("Invalid authentication token")

    # Get user_id from token
    user_id = payload.get("user_id")
    if user_id is None:
        raise _unauthorized("Invalid token payload")

    # Get user from database
    user = await user_service.get_user_by_id(session, user_id)
    if user is None:
        raise _unauthorized("User not found")

    return user_service.public_user(user)


async def require_admin(user: dict = Depends(get_current_user)) -> dict:
    """Require an authenticated admin account (403 for other roles)."""
    if user.get("role") != UserRole.ADMIN.value:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user
