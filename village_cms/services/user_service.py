"""
User service layer for admin account database operations.
"""

from typing import Optional, Dict
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from village_cms.database.models import User
from village_cms.utils.constants import UserRole
import logging

logger = logging.getLogger(__name__)


def _normalize_email(email: Optional[str]) -> Optional[str]:
    email = email.strip().lower() if email else None
    return email or None


async def create_user(
    session: AsyncSession,
    name: str,
    email: str,
    password_hash: str,
    role: str = UserRole.ADMIN.value,
) -> int:
    """
    Create a new user account.

    Args:
        session: Database session
        name: Display name
        email: Login email (normalized to lowercase)
        password_hash: Required hashed password
        role: ``admin`` or ``editor``

    Returns:
        User ID of the created user

    Raises:
        ValueError: If the email is missing or already registered
    """
    email = _normalize_email(email)
    if not email:
        raise ValueError("Email is required")

    result = await session.execute(select(User.id).where(User.email == email))
    if result.scalar_one_or_none():
        raise ValueError(f"Email {email} is already registered")

    new_user = User(name=name, email=email, password_hash=password_hash, role=role)
    session.add(new_user)
    await session.commit()
    await session.refresh(new_user)
    logger.info(f"Created {role} user {new_user.id} ({email})")
    return new_user.id


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[Dict]:
    """
    Get user by email address.

    Args:
        session: Database session
        email: Email address (will be normalized to lowercase)

    Returns:
        User dictionary or None if not found
    """
    email = _normalize_email(email)
    if not email:
        return None

    result = await session.execute(
        select(User).where(func.lower(func.trim(User.email)) == email).limit(1)
    )
    user = result.scalar_one_or_none()
    return _user_to_dict(user) if user else None


async def get_user_by_id(session: AsyncSession, user_id: int) -> Optional[Dict]:
    """
    Get user by ID.

    Args:
        session: Database session
        user_id: User ID

    Returns:
        User dictionary or None if not found
    """
    result = await session.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    return _user_to_dict(user) if user else None


def _user_to_dict(user: User) -> Dict:
    """
    Convert a User ORM instance to a dictionary.

    Includes ``password_hash``; strip it with ``public_user`` before returning to clients.
    """
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "password_hash": user.password_hash,
        "role": user.role,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


def public_user(user: Dict) -> Dict:
    """User dict without secrets."""
    return {k: v for k, v in user.items() if k != "password_hash"}
