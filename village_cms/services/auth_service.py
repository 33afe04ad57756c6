"""
Authentication service: password hashing and JWT tokens.
"""

import logging
import os
from datetime import timedelta
from typing import Dict, Optional

import bcrypt
import jwt

from village_cms.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
DEFAULT_TOKEN_EXPIRE_MINUTES = 60 * 24 * 7  # 7 days


def _get_secret_key() -> str:
    """JWT signing key, read at call time."""
    secret = os.getenv("JWT_SECRET_KEY")
    if not secret:
        if os.getenv("ENV", "").lower() == "production":
            raise RuntimeError("JWT_SECRET_KEY must be set in production")
        secret = "dev-secret-key-change-me"
    return secret


def _get_expire_minutes() -> int:
    try:
        return int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", DEFAULT_TOKEN_EXPIRE_MINUTES))
    except ValueError:
        return DEFAULT_TOKEN_EXPIRE_MINUTES


def hash_password(password: str) -> str:
    """Hash a password with bcrypt (random salt per call)."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plain password against a bcrypt hash."""
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash
        return False


def create_access_token(data: Dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed JWT access token.

    Args:
        data: Claims to encode (typically ``user_id`` and ``role``)
        expires_delta: Lifetime override (default ``ACCESS_TOKEN_EXPIRE_MINUTES``)

    Returns:
        Encoded JWT string
    """
    to_encode = data.copy()
    expire = utcnow() + (expires_delta or timedelta(minutes=_get_expire_minutes()))
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, _get_secret_key(), algorithm=ALGORITHM)


def verify_token(token: str) -> Optional[Dict]:
    """
    Decode and verify a JWT access token.

    Returns:
        Token payload, or None if the token is invalid or expired
    """
    try:
        payload = jwt.decode(token, _get_secret_key(), algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.debug("Access token expired")
        return None
    except jwt.InvalidTokenError:
        return None
    if payload.get("type") != "access":
        return None
    return payload
