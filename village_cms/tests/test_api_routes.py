"""
HTTP-level tests for the API routes.

Services are mocked; the database session dependency is replaced with a mock
so no database is needed. Authentication goes through the real dependencies
with ``verify_token`` / ``get_user_by_id`` patched.
"""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from village_cms.api.main import app
from village_cms.database.db import get_db_session
from village_cms.services import (
    admin_service,
    article_service,
    auth_service,
    contact_service,
    gallery_service,
    location_service,
    public_service,
    slider_service,
    upload_service,
    user_service,
)
from village_cms.services.slug_service import SlugConflictError, SlugStorageError


ARTICLE = {
    "id": 1,
    "title": "Kabar Desa",
    "slug": "kabar-desa",
    "content": "<p>Isi</p>",
    "excerpt": None,
    "featured_image": None,
    "published": True,
    "tags": ["desa"],
    "views": 3,
    "author": {"id": 1, "name": "Admin Desa", "email": "admin@desa.id"},
    "created_at": "2026-01-01T00:00:00+00:00",
    "updated_at": "2026-01-01T00:00:00+00:00",
}

GALLERY = {
    "id": 2,
    "title": "Sawah Hijau",
    "slug": "sawah-hijau",
    "description": None,
    "image_url": "/uploads/s.jpg",
    "thumbnail_url": None,
    "category": "alam",
    "tags": [],
    "published": True,
    "uploader": None,
    "created_at": None,
    "updated_at": None,
}

LOCATION = {
    "id": 3,
    "name": "Masjid Al-Ikhlas",
    "type": "fasilitas",
    "description": None,
    "latitude": -7.0041,
    "longitude": 110.4371,
    "address": "Jl. Masjid",
    "phone": None,
    "email": None,
    "website": None,
    "image_url": None,
    "tags": [],
    "published": True,
}

SLIDE = {
    "id": 4,
    "title": "Foto Desa 1",
    "description": "Gambar slider homepage ke-1",
    "image_url": "/uploads/a.jpg",
    "sort_order": 1,
    "is_active": True,
    "uploaded_by": 1,
}


@pytest.fixture
def mock_session():
    session = MagicMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
def client(mock_session):
    """TestClient with the database session replaced by a mock."""

    async def override_session():
        yield mock_session

    app.dependency_overrides[get_db_session] = override_session
    yield TestClient(app)
    app.dependency_overrides.clear()


def _login_as(monkeypatch, role="admin", user_id=1):
    """Make any bearer token resolve to a user with the given role."""

    def fake_verify_token(token):
        return {"user_id": user_id, "role": role}

    async def fake_get_user_by_id(session, uid):
        return {
            "id": user_id,
            "name": "Admin Desa",
            "email": "admin@desa.id",
            "role": role,
            "password_hash": "hash",
            "created_at": "2026-01-01T00:00:00+00:00",
        }

    monkeypatch.setattr(auth_service, "verify_token", fake_verify_token, raising=True)
    monkeypatch.setattr(user_service, "get_user_by_id", fake_get_user_by_id, raising=True)
    return {"Authorization": "Bearer dummy"}


@pytest.fixture
def admin_headers(monkeypatch):
    return _login_as(monkeypatch, role="admin")


# ============================================================================
# Authentication / authorization
# ============================================================================

class TestAuth:
    """Login, current user and admin gating."""

    def test_login_success(self, client, monkeypatch):
        stored = {
            "id": 1,
            "name": "Admin Desa",
            "email": "admin@desa.id",
            "role": "admin",
            "password_hash": auth_service.hash_password("admin-pass-123"),
            "created_at": None,
        }
        monkeypatch.setattr(user_service, "get_user_by_email", AsyncMock(return_value=stored))

        response = client.post(
            "/api/auth/login", json={"email": "admin@desa.id", "password": "admin-pass-123"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["user"]["email"] == "admin@desa.id"
        assert "password_hash" not in data["user"]
        claims = auth_service.verify_token(data["access_token"])
        assert claims["user_id"] == 1
        assert claims["role"] == "admin"

    def test_login_wrong_password(self, client, monkeypatch):
        stored = {
            "id": 1,
            "name": "Admin Desa",
            "email": "admin@desa.id",
            "role": "admin",
            "password_hash": auth_service.hash_password("admin-pass-123"),
        }
        monkeypatch.setattr(user_service, "get_user_by_email", AsyncMock(return_value=stored))

        response = client.post("/api/auth/login", json={"email": "admin@desa.id", "password": "salah"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Email or password is incorrect"

    def test_login_unknown_user(self, client, monkeypatch):
        monkeypatch.setattr(user_service, "get_user_by_email", AsyncMock(return_value=None))
        response = client.post("/api/auth/login", json={"email": "x@desa.id", "password": "y"})
        assert response.status_code == 401

    def test_me(self, client, admin_headers):
        response = client.get("/api/auth/me", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["role"] == "admin"

    def test_me_without_token(self, client):
        assert client.get("/api/auth/me").status_code == 401

    def test_invalid_token(self, client, monkeypatch):
        monkeypatch.setattr(auth_service, "verify_token", lambda token: None)
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer bad"})
        assert response.status_code == 401

    def test_mutation_requires_login(self, client):
        response = client.post("/api/articles", json={"title": "A", "content": "B"})
        assert response.status_code == 401

    def test_mutation_requires_admin_role(self, client, monkeypatch):
        headers = _login_as(monkeypatch, role="editor")
        response = client.delete("/api/locations/1", headers=headers)
        assert response.status_code == 403


# ============================================================================
# Articles
# ============================================================================

class TestArticles:
    """Article endpoints."""

    def test_list_passes_filters(self, client):
        with patch.object(article_service, "list_articles", new=AsyncMock(return_value=[ARTICLE])) as mock:
            response = client.get("/api/articles?published=true&limit=5&search=desa")

        assert response.status_code == 200
        assert response.json()[0]["slug"] == "kabar-desa"
        assert mock.call_args.kwargs == {"published": True, "limit": 5, "search": "desa"}

    def test_negative_limit_rejected(self, client):
        assert client.get("/api/articles?limit=-1").status_code == 422

    def test_get_by_slug(self, client):
        with patch.object(article_service, "get_article_by_slug", new=AsyncMock(return_value=ARTICLE)):
            response = client.get("/api/articles/slug/kabar-desa")
        assert response.status_code == 200
        assert response.json()["id"] == 1

    def test_get_missing(self, client):
        with patch.object(article_service, "get_article", new=AsyncMock(return_value=None)):
            response = client.get("/api/articles/99")
        assert response.status_code == 404

    def test_create(self, client, admin_headers):
        with patch.object(article_service, "create_article", new=AsyncMock(return_value=ARTICLE)) as mock:
            response = client.post(
                "/api/articles",
                json={"title": " Kabar Desa ", "content": "<p>Isi</p>", "tags": [" desa ", ""]},
                headers=admin_headers,
            )

        assert response.status_code == 201
        kwargs = mock.call_args.kwargs
        assert kwargs["author_id"] == 1
        assert kwargs["title"] == "Kabar Desa"
        assert kwargs["tags"] == ["desa"]
        assert kwargs["slug"] is None

    def test_create_blank_title_is_422(self, client, admin_headers):
        response = client.post("/api/articles", json={"title": "   ", "content": "x"}, headers=admin_headers)
        assert response.status_code == 422

    def test_create_slug_conflict_is_409(self, client, admin_headers):
        error = SlugConflictError("Slug 'kabar-desa' is already in use")
        with patch.object(article_service, "create_article", new=AsyncMock(side_effect=error)):
            response = client.post(
                "/api/articles",
                json={"title": "Kabar", "content": "x", "slug": "kabar-desa"},
                headers=admin_headers,
            )
        assert response.status_code == 409
        assert "kabar-desa" in response.json()["detail"]

    def test_create_slug_storage_error_is_503(self, client, admin_headers):
        with patch.object(
            article_service, "create_article", new=AsyncMock(side_effect=SlugStorageError("db down"))
        ):
            response = client.post(
                "/api/articles", json={"title": "Kabar", "content": "x"}, headers=admin_headers
            )
        assert response.status_code == 503

    def test_create_invalid_slug_is_400(self, client, admin_headers):
        with patch.object(
            article_service, "create_article", new=AsyncMock(side_effect=ValueError("Slug is empty"))
        ):
            response = client.post(
                "/api/articles", json={"title": "Kabar", "content": "x", "slug": "!!!"}, headers=admin_headers
            )
        assert response.status_code == 400

    def test_update_sends_only_given_fields(self, client, admin_headers):
        with patch.object(article_service, "update_article", new=AsyncMock(return_value=ARTICLE)) as mock:
            response = client.patch("/api/articles/1", json={"published": False}, headers=admin_headers)

        assert response.status_code == 200
        assert mock.call_args.args[1] == 1
        assert mock.call_args.kwargs == {"published": False}

    def test_update_missing(self, client, admin_headers):
        with patch.object(article_service, "update_article", new=AsyncMock(return_value=None)):
            response = client.patch("/api/articles/9", json={"title": "X"}, headers=admin_headers)
        assert response.status_code == 404

    def test_delete(self, client, admin_headers):
        with patch.object(article_service, "delete_article", new=AsyncMock(return_value=True)):
            response = client.delete("/api/articles/1", headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == {"success": True}

    def test_increment_views(self, client):
        with patch.object(article_service, "increment_views", new=AsyncMock(return_value=4)):
            response = client.post("/api/articles/1/views")
        assert response.json() == {"views": 4, "success": True}

    def test_increment_views_missing(self, client):
        with patch.object(article_service, "increment_views", new=AsyncMock(return_value=None)):
            assert client.post("/api/articles/9/views").status_code == 404

    def test_service_error_is_500(self, client):
        with patch.object(article_service, "list_articles", new=AsyncMock(side_effect=RuntimeError("boom"))):
            response = client.get("/api/articles")
        assert response.status_code == 500


# ============================================================================
# Galleries
# ============================================================================

class TestGalleries:
    """Gallery endpoints."""

    def test_list_by_category(self, client):
        with patch.object(gallery_service, "list_galleries", new=AsyncMock(return_value=[GALLERY])) as mock:
            response = client.get("/api/galleries?category=alam&published=true")
        assert response.status_code == 200
        assert mock.call_args.kwargs["category"] == "alam"
        assert mock.call_args.kwargs["published"] is True

    def test_get_by_slug_missing(self, client):
        with patch.object(gallery_service, "get_gallery_by_slug", new=AsyncMock(return_value=None)):
            assert client.get("/api/galleries/slug/nope").status_code == 404

    def test_create_rejects_unknown_category(self, client, admin_headers):
        response = client.post(
            "/api/galleries",
            json={"title": "Foto", "image_url": "/uploads/x.jpg", "category": "olahraga"},
            headers=admin_headers,
        )
        assert response.status_code == 422

    def test_create(self, client, admin_headers):
        with patch.object(gallery_service, "create_gallery", new=AsyncMock(return_value=GALLERY)) as mock:
            response = client.post(
                "/api/galleries",
                json={"title": "Sawah Hijau", "image_url": "/uploads/s.jpg", "category": "alam"},
                headers=admin_headers,
            )
        assert response.status_code == 201
        assert mock.call_args.kwargs["uploaded_by"] == 1

    def test_update_slug_conflict(self, client, admin_headers):
        with patch.object(
            gallery_service, "update_gallery", new=AsyncMock(side_effect=SlugConflictError("taken"))
        ):
            response = client.patch("/api/galleries/2", json={"slug": "x"}, headers=admin_headers)
        assert response.status_code == 409


# ============================================================================
# Locations
# ============================================================================

class TestLocations:
    """Location endpoints."""

    def test_list_uses_type_query_param(self, client):
        with patch.object(location_service, "list_locations", new=AsyncMock(return_value=[LOCATION])) as mock:
            response = client.get("/api/locations?type=fasilitas&search=masjid")
        assert response.status_code == 200
        assert response.json()[0]["type"] == "fasilitas"
        assert mock.call_args.kwargs["location_type"] == "fasilitas"
        assert mock.call_args.kwargs["search"] == "masjid"

    def test_type_counts(self, client):
        with patch.object(location_service, "list_locations", new=AsyncMock(return_value=[LOCATION])):
            response = client.get("/api/locations/types")
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["counts"]["fasilitas"] == 1

    def test_create_out_of_range_is_422(self, client, admin_headers):
        response = client.post(
            "/api/locations",
            json={"name": "X", "latitude": 100, "longitude": 110, "address": "Jl. X"},
            headers=admin_headers,
        )
        assert response.status_code == 422

    def test_create(self, client, admin_headers):
        with patch.object(location_service, "create_location", new=AsyncMock(return_value=LOCATION)) as mock:
            response = client.post(
                "/api/locations",
                json={
                    "name": "Masjid Al-Ikhlas",
                    "type": "fasilitas",
                    "latitude": -7.0041,
                    "longitude": 110.4371,
                    "address": "Jl. Masjid",
                },
                headers=admin_headers,
            )
        assert response.status_code == 201
        assert mock.call_args.kwargs["location_type"] == "fasilitas"

    def test_delete_missing(self, client, admin_headers):
        with patch.object(location_service, "delete_location", new=AsyncMock(return_value=False)):
            assert client.delete("/api/locations/9", headers=admin_headers).status_code == 404


# ============================================================================
# Homepage slider
# ============================================================================

class TestSlider:
    """Homepage slider endpoints."""

    def test_list(self, client):
        with patch.object(slider_service, "list_active_slides", new=AsyncMock(return_value=[SLIDE])):
            response = client.get("/api/homepage-slider")
        assert response.status_code == 200
        assert response.json()[0]["sort_order"] == 1

    def test_create(self, client, admin_headers):
        with patch.object(slider_service, "create_slide", new=AsyncMock(return_value=SLIDE)) as mock:
            response = client.post(
                "/api/homepage-slider", json={"image_url": "/uploads/a.jpg"}, headers=admin_headers
            )
        assert response.status_code == 201
        assert mock.call_args.kwargs == {"image_url": "/uploads/a.jpg", "uploaded_by": 1, "is_active": True}

    def test_delete_removes_stored_image(self, client, admin_headers):
        with patch.object(slider_service, "get_slide", new=AsyncMock(return_value=SLIDE)), patch.object(
            slider_service, "delete_slide", new=AsyncMock(return_value=True)
        ), patch.object(upload_service, "delete_stored_image", new=AsyncMock(return_value=True)) as remove:
            response = client.delete("/api/homepage-slider/4", headers=admin_headers)

        assert response.status_code == 200
        remove.assert_awaited_once_with("/uploads/a.jpg")

    def test_delete_missing(self, client, admin_headers):
        with patch.object(slider_service, "get_slide", new=AsyncMock(return_value=None)), patch.object(
            upload_service, "delete_stored_image", new=AsyncMock()
        ) as remove:
            response = client.delete("/api/homepage-slider/9", headers=admin_headers)
        assert response.status_code == 404
        remove.assert_not_awaited()


# ============================================================================
# Upload
# ============================================================================

class TestUpload:
    """Image upload endpoint."""

    def test_upload(self, client, admin_headers):
        stored = {
            "success": True,
            "filename": "image-1-abc.jpg",
            "url": "/uploads/image-1-abc.jpg",
            "original_name": "foto.png",
            "size": 10,
            "type": "image/jpeg",
            "storage": "local",
        }
        with patch.object(upload_service, "store_image", new=AsyncMock(return_value=stored)) as mock:
            response = client.post(
                "/api/upload",
                files={"image": ("foto.png", b"png-bytes", "image/png")},
                headers=admin_headers,
            )

        assert response.status_code == 200
        assert response.json()["url"] == "/uploads/image-1-abc.jpg"
        assert mock.call_args.args == (b"png-bytes", "image/png")
        assert mock.call_args.kwargs == {"original_name": "foto.png"}

    def test_upload_without_file(self, client, admin_headers):
        response = client.post("/api/upload", data={"note": "kosong"}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "No file uploaded"

    def test_upload_rejected_file(self, client, admin_headers):
        response = client.post(
            "/api/upload",
            files={"image": ("doc.pdf", b"%PDF-1.4", "application/pdf")},
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Only image files are allowed"

    def test_upload_requires_auth(self, client):
        response = client.post("/api/upload", files={"image": ("a.png", b"x", "image/png")})
        assert response.status_code == 401


# ============================================================================
# Contact
# ============================================================================

class TestContact:
    """Public contact form."""

    def test_submit(self, client):
        ack = {"message": contact_service.SUCCESS_MESSAGE, "success": True}
        with patch.object(contact_service, "submit_contact", new=AsyncMock(return_value=ack)) as mock:
            response = client.post(
                "/api/contact",
                json={"name": "Budi", "email": "budi@example.com", "subject": "Halo", "message": "Pesan"},
            )
        assert response.status_code == 200
        assert response.json() == ack
        assert mock.call_args.kwargs["phone"] is None

    def test_missing_fields(self, client):
        response = client.post("/api/contact", json={"name": "Budi"})
        assert response.status_code == 400
        assert response.json()["detail"] == contact_service.MISSING_FIELDS_MESSAGE

    def test_invalid_email(self, client):
        response = client.post(
            "/api/contact",
            json={"name": "Budi", "email": "budi", "subject": "Halo", "message": "Pesan"},
        )
        assert response.status_code == 400
        assert response.json()["detail"] == contact_service.INVALID_EMAIL_MESSAGE

    def test_server_error(self, client):
        with patch.object(contact_service, "submit_contact", new=AsyncMock(side_effect=RuntimeError("x"))):
            response = client.post(
                "/api/contact",
                json={"name": "Budi", "email": "budi@example.com", "subject": "Halo", "message": "Pesan"},
            )
        assert response.status_code == 500
        assert response.json()["detail"] == "Terjadi kesalahan server"


# ============================================================================
# Admin
# ============================================================================

class TestAdmin:
    """Admin maintenance endpoints."""

    def test_create_admin_disabled_without_token_config(self, client, monkeypatch):
        monkeypatch.delenv("ADMIN_BOOTSTRAP_TOKEN", raising=False)
        response = client.post("/api/admin/create-admin", headers={"X-Bootstrap-Token": "x"})
        assert response.status_code == 403
        assert response.json()["detail"] == "Admin bootstrap is disabled"

    def test_create_admin_wrong_token(self, client, monkeypatch):
        monkeypatch.setenv("ADMIN_BOOTSTRAP_TOKEN", "s3cret")
        with patch.object(admin_service, "create_admin", new=AsyncMock()) as mock:
            response = client.post("/api/admin/create-admin", headers={"X-Bootstrap-Token": "nope"})
        assert response.status_code == 403
        mock.assert_not_awaited()

    def test_create_admin(self, client, monkeypatch):
        monkeypatch.setenv("ADMIN_BOOTSTRAP_TOKEN", "s3cret")
        result = {"created": True, "user": {"id": 1, "email": "admin@desa.id", "role": "admin"}}
        with patch.object(admin_service, "create_admin", new=AsyncMock(return_value=result)):
            response = client.post("/api/admin/create-admin", headers={"X-Bootstrap-Token": "s3cret"})
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Admin user created successfully"
        assert data["created"] is True

    def test_create_admin_missing_credentials(self, client, monkeypatch):
        monkeypatch.setenv("ADMIN_BOOTSTRAP_TOKEN", "s3cret")
        error = ValueError("ADMIN_EMAIL and ADMIN_PASSWORD must be set")
        with patch.object(admin_service, "create_admin", new=AsyncMock(side_effect=error)):
            response = client.post("/api/admin/create-admin", headers={"X-Bootstrap-Token": "s3cret"})
        assert response.status_code == 400

    def test_seed(self, client, admin_headers):
        counts = {"locations": 6, "galleries": 6, "articles": 3}
        with patch.object(admin_service, "seed_content", new=AsyncMock(return_value=counts)) as mock:
            response = client.post("/api/admin/seed", headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == {"message": "Sample data created successfully!", "data": counts}
        assert mock.call_args.kwargs["author_id"] == 1

    def test_clear(self, client, admin_headers):
        deleted = {"locations": 1, "galleries": 0, "articles": 2}
        with patch.object(admin_service, "clear_content", new=AsyncMock(return_value=deleted)):
            response = client.delete("/api/admin/clear-data", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["deleted"] == deleted

    def test_migrate_slugs(self, client, admin_headers):
        report = {
            "processed": 1,
            "results": {"galleries": [{"id": 2, "title": "Sawah", "slug": "sawah"}], "articles": []},
        }
        with patch.object(admin_service, "migrate_slugs", new=AsyncMock(return_value=report)):
            response = client.post("/api/admin/migrate-slugs", headers=admin_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Slug migration completed"
        assert data["processed"] == 1
        assert data["results"]["galleries"][0]["slug"] == "sawah"

    def test_migrate_slugs_storage_error(self, client, admin_headers):
        with patch.object(
            admin_service, "migrate_slugs", new=AsyncMock(side_effect=SlugStorageError("down"))
        ):
            response = client.post("/api/admin/migrate-slugs", headers=admin_headers)
        assert response.status_code == 503

    def test_stats_requires_admin(self, client, monkeypatch):
        headers = _login_as(monkeypatch, role="editor")
        assert client.get("/api/admin/stats", headers=headers).status_code == 403


# ============================================================================
# Public / health
# ============================================================================

def test_sitemap(client):
    with patch.object(
        public_service, "get_sitemap_articles", new=AsyncMock(return_value=[{"slug": "a", "updated_at": None}])
    ), patch.object(public_service, "get_sitemap_galleries", new=AsyncMock(return_value=[])):
        response = client.get("/api/public/sitemap")

    assert response.status_code == 200
    assert response.json() == {"articles": [{"slug": "a", "updated_at": None}], "galleries": []}
    assert response.headers["Cache-Control"] == "public, max-age=300, s-maxage=300"


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_health_reports_database_failure(client, mock_session):
    mock_session.execute.side_effect = Exception("connection refused")
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "unhealthy"
    assert response.json()["database"] is False
