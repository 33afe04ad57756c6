"""
Unit tests for authentication service and user lookups.
Tests password hashing, JWT tokens, and user creation.
"""
import pytest
from datetime import timedelta

import jwt

from village_cms.services import auth_service, user_service


class TestPasswordHashing:
    """Tests for password hashing and verification."""

    def test_hash_password(self):
        """Test password hashing produces different hashes for same password."""
        password = "rahasia-desa-123"
        hash1 = auth_service.hash_password(password)
        hash2 = auth_service.hash_password(password)

        # Hashes should be different (due to salt)
        assert hash1 != hash2
        # But both should verify correctly
        assert auth_service.verify_password(password, hash1)
        assert auth_service.verify_password(password, hash2)

    def test_verify_password_incorrect(self):
        password_hash = auth_service.hash_password("rahasia-desa-123")
        assert auth_service.verify_password("salah", password_hash) is False

    def test_verify_password_empty(self):
        password_hash = auth_service.hash_password("rahasia-desa-123")
        assert auth_service.verify_password("", password_hash) is False
        assert auth_service.verify_password("rahasia-desa-123", "") is False

    def test_verify_password_malformed_hash(self):
        assert auth_service.verify_password("rahasia", "not-a-bcrypt-hash") is False


class TestJWTTokens:
    """Tests for JWT token creation and verification."""

    def test_token_roundtrip_carries_claims(self):
        token = auth_service.create_access_token({"user_id": 1, "role": "admin"})

        decoded = auth_service.verify_token(token)
        assert decoded["user_id"] == 1
        assert decoded["role"] == "admin"
        assert decoded["type"] == "access"
        assert "exp" in decoded

    def test_verify_token_invalid(self):
        assert auth_service.verify_token("invalid_token_string") is None

    def test_verify_token_expired(self):
        token = auth_service.create_access_token({"user_id": 1}, expires_delta=timedelta(seconds=-1))
        assert auth_service.verify_token(token) is None

    def test_verify_token_wrong_secret(self, monkeypatch):
        token = auth_service.create_access_token({"user_id": 1})
        monkeypatch.setenv("JWT_SECRET_KEY", "another-secret")
        assert auth_service.verify_token(token) is None

    def test_verify_token_rejects_non_access_type(self):
        token = jwt.encode(
            {"user_id": 1, "type": "refresh"},
            auth_service._get_secret_key(),
            algorithm=auth_service.ALGORITHM,
        )
        assert auth_service.verify_token(token) is None

    def test_production_requires_secret(self, monkeypatch):
        monkeypatch.delenv("JWT_SECRET_KEY", raising=False)
        monkeypatch.setenv("ENV", "production")
        with pytest.raises(RuntimeError):
            auth_service.create_access_token({"user_id": 1})


# ============================================================================
# user_service
# ============================================================================

@pytest.mark.asyncio
async def test_create_and_get_user(db_session):
    user_id = await user_service.create_user(
        db_session, name="Editor", email="  Editor@Desa.ID ", password_hash="x", role="editor"
    )

    by_email = await user_service.get_user_by_email(db_session, "EDITOR@desa.id")
    by_id = await user_service.get_user_by_id(db_session, user_id)

    assert by_email["id"] == user_id
    assert by_id["email"] == "editor@desa.id"
    assert by_id["role"] == "editor"
    assert "password_hash" not in user_service.public_user(by_id)


@pytest.mark.asyncio
async def test_create_user_duplicate_email(db_session):
    await user_service.create_user(db_session, name="A", email="a@desa.id", password_hash="x")
    with pytest.raises(ValueError):
        await user_service.create_user(db_session, name="B", email="A@DESA.ID", password_hash="y")


@pytest.mark.asyncio
async def test_create_user_requires_email(db_session):
    with pytest.raises(ValueError):
        await user_service.create_user(db_session, name="A", email="  ", password_hash="x")


@pytest.mark.asyncio
async def test_get_user_missing(db_session):
    assert await user_service.get_user_by_email(db_session, "nobody@desa.id") is None
    assert await user_service.get_user_by_email(db_session, "") is None
    assert await user_service.get_user_by_id(db_session, 9999) is None
