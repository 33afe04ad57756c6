"""
Upload service: stores processed images on local disk or in S3.

Backend selection (``STORAGE_BACKEND``):
    s3     always upload to S3
    local  always write under ``UPLOAD_DIR`` (served at ``/uploads``)
    unset  S3 when its credentials are configured, else local
"""

import asyncio
import logging
import os
import secrets
import time
from pathlib import Path
from typing import Dict, Optional

from village_cms.services import image_service, s3_service

logger = logging.getLogger(__name__)

STORAGE_LOCAL = "local"
STORAGE_S3 = "s3"
LOCAL_URL_PREFIX = "/uploads"


def get_upload_dir() -> Path:
    """Local upload directory, read from the environment at call time."""
    return Path(os.getenv("UPLOAD_DIR", "uploads"))


def get_storage_backend() -> str:
    """Resolve which backend new uploads go to."""
    configured = os.getenv("STORAGE_BACKEND", "").strip().lower()
    if configured in (STORAGE_LOCAL, STORAGE_S3):
        return configured
    if configured:
        logger.warning(f"Unknown STORAGE_BACKEND '{configured}', falling back to auto-detect")
    return STORAGE_S3 if s3_service.is_configured() else STORAGE_LOCAL


def generate_filename(extension: str = ".jpg") -> str:
    """Unique name like ``image-1700000000000-9f2c4e1ab37d.jpg``."""
    timestamp = int(time.time() * 1000)
    return f"image-{timestamp}-{secrets.token_hex(6)}{extension}"


def _write_local(directory: Path, filename: str, data: bytes) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / filename
    path.write_bytes(data)
    return path


async def store_image(
    content: bytes,
    content_type: str,
    original_name: Optional[str] = None,
) -> Dict:
    """
    Validate, process and store an uploaded image.

    Args:
        content: Raw uploaded bytes
        content_type: MIME type declared by the client
        original_name: Client-side filename, echoed back

    Returns:
        Dict with ``success, filename, url, original_name, size, type, storage``

    Raises:
        ValueError: If the upload is not an acceptable image
    """
    image_service.validate_upload(content, content_type)
    processed = await asyncio.to_thread(image_service.process_image, content)
    filename = generate_filename()
    backend = get_storage_backend()

    if backend == STORAGE_S3:
        key = s3_service.build_key(filename)
        url = await asyncio.to_thread(s3_service.upload_file, processed, key, "image/jpeg")
    else:
        path = await asyncio.to_thread(_write_local, get_upload_dir(), filename, processed)
        url = f"{LOCAL_URL_PREFIX}/{filename}"
        logger.info(f"Saved upload to local filesystem: {path}")

    return {
        "success": True,
        "filename": filename,
        "url": url,
        "original_name": original_name,
        "size": len(processed),
        "type": "image/jpeg",
        "storage": backend,
    }


def _remove_local(path: Path) -> bool:
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    return True


async def delete_stored_image(url: Optional[str]) -> bool:
    """
    Remove a previously stored image. Best-effort: failures are logged, not raised.

    Local URLs (``/uploads/<name>``) are unlinked from ``UPLOAD_DIR``; other
    URLs are deleted from S3 when S3 is configured. External URLs are left alone.

    Returns:
        True if a stored file was removed
    """
    if not url:
        return False
    try:
        if url.startswith(f"{LOCAL_URL_PREFIX}/"):
            filename = Path(url[len(LOCAL_URL_PREFIX) + 1:]).name
            removed = await asyncio.to_thread(_remove_local, get_upload_dir() / filename)
        elif s3_service.is_configured():
            removed = await asyncio.to_thread(s3_service.delete_file_by_url, url)
        else:
            return False
    except OSError as e:
        logger.error(f"Failed to delete stored image {url}: {e}")
        return False
    if removed:
        logger.info(f"Deleted stored image {url}")
    return removed
