"""
Tests for gallery_service CRUD, category filter and slugs.
"""
import pytest

from village_cms.services import gallery_service, slug_service
from village_cms.services.slug_service import SlugConflictError
from village_cms.utils.constants import GalleryCategory

# db_session and admin_user fixtures are provided by conftest.py

IMAGE_URL = "/uploads/image-1700000000000-abcdef123456.jpg"


async def _create(session, uploader_id, title="Pemandangan Desa", **kwargs):
    fields = {"image_url": IMAGE_URL, "published": True}
    fields.update(kwargs)
    return await gallery_service.create_gallery(
        session, uploaded_by=uploader_id, title=title, **fields
    )


@pytest.mark.asyncio
async def test_create_gallery(db_session, admin_user):
    gallery = await _create(db_session, admin_user["id"], category="alam", tags=["alam"])

    assert gallery["slug"] == "pemandangan-desa"
    assert gallery["category"] == "alam"
    assert gallery["tags"] == ["alam"]
    assert gallery["uploader"]["id"] == admin_user["id"]


@pytest.mark.asyncio
async def test_create_gallery_default_category(db_session, admin_user):
    gallery = await _create(db_session, admin_user["id"])
    assert gallery["category"] == GalleryCategory.DESA.value


@pytest.mark.asyncio
async def test_create_gallery_accepts_enum_category(db_session, admin_user):
    gallery = await _create(db_session, admin_user["id"], category=GalleryCategory.KEGIATAN)
    assert gallery["category"] == "kegiatan"


@pytest.mark.asyncio
async def test_duplicate_titles_get_suffixes(db_session, admin_user):
    first = await _create(db_session, admin_user["id"])
    second = await _create(db_session, admin_user["id"])
    assert (first["slug"], second["slug"]) == ("pemandangan-desa", "pemandangan-desa-1")


@pytest.mark.asyncio
async def test_explicit_slug_conflict(db_session, admin_user):
    await _create(db_session, admin_user["id"])
    with pytest.raises(SlugConflictError):
        await _create(db_session, admin_user["id"], title="Lain", slug="pemandangan-desa")


@pytest.mark.asyncio
async def test_list_galleries_filters(db_session, admin_user):
    await _create(db_session, admin_user["id"], title="Sawah", category="alam")
    await _create(db_session, admin_user["id"], title="Gotong Royong", category="kegiatan")
    await _create(db_session, admin_user["id"], title="Draft Alam", category="alam", published=False)

    assert len(await gallery_service.list_galleries(db_session)) == 3
    assert len(await gallery_service.list_galleries(db_session, category="all")) == 3

    alam = await gallery_service.list_galleries(db_session, category="alam")
    assert [g["title"] for g in alam] == ["Draft Alam", "Sawah"]

    published_alam = await gallery_service.list_galleries(db_session, category="alam", published=True)
    assert [g["title"] for g in published_alam] == ["Sawah"]


@pytest.mark.asyncio
async def test_get_by_id_and_slug(db_session, admin_user):
    created = await _create(db_session, admin_user["id"])
    assert (await gallery_service.get_gallery(db_session, created["id"]))["title"] == "Pemandangan Desa"
    assert (await gallery_service.get_gallery_by_slug(db_session, "pemandangan-desa"))["id"] == created["id"]
    assert await gallery_service.get_gallery(db_session, 9999) is None
    assert await gallery_service.get_gallery_by_slug(db_session, "nope") is None


@pytest.mark.asyncio
async def test_update_gallery_title_and_category(db_session, admin_user):
    created = await _create(db_session, admin_user["id"])

    same = await gallery_service.update_gallery(db_session, created["id"], title="Pemandangan Desa")
    assert same["slug"] == "pemandangan-desa"

    renamed = await gallery_service.update_gallery(
        db_session, created["id"], title="Bukit Desa", category=GalleryCategory.ALAM
    )
    assert renamed["slug"] == "bukit-desa"
    assert renamed["category"] == "alam"

    assert await gallery_service.update_gallery(db_session, 9999, title="X") is None


@pytest.mark.asyncio
async def test_update_gallery_rejects_empty_explicit_slug(db_session, admin_user):
    created = await _create(db_session, admin_user["id"])
    with pytest.raises(ValueError):
        await gallery_service.update_gallery(db_session, created["id"], slug="")
    with pytest.raises(ValueError):
        await _create(db_session, admin_user["id"], title="Sawah", slug="")


@pytest.mark.asyncio
async def test_update_title_of_gallery_deleted_during_save(db_session, admin_user, monkeypatch):
    created = await _create(db_session, admin_user["id"])
    real_resolve = slug_service.resolve_unique_slug

    async def resolve_then_delete(session, model, title, exclude_id=None):
        slug = await real_resolve(session, model, title, exclude_id=exclude_id)
        await gallery_service.delete_gallery(session, created["id"])
        return slug

    monkeypatch.setattr(slug_service, "resolve_unique_slug", resolve_then_delete)

    assert await gallery_service.update_gallery(db_session, created["id"], title="Bukit Desa") is None


@pytest.mark.asyncio
async def test_delete_gallery_frees_slug(db_session, admin_user):
    created = await _create(db_session, admin_user["id"])
    assert await gallery_service.delete_gallery(db_session, created["id"]) is True
    assert await gallery_service.delete_gallery(db_session, created["id"]) is False
    assert (await _create(db_session, admin_user["id"]))["slug"] == "pemandangan-desa"
