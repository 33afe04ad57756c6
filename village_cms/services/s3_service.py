"""
S3 service for uploading and managing content images in S3.

Provides a lazy-initialized boto3 client and helpers used by the upload
service when the S3 storage backend is active.
"""

import logging
import os
from typing import Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

# Lazy-initialized S3 client
_s3_client = None


def _get_config():
    """Read S3 configuration from environment at call time (not import time)."""
    return {
        "access_key_id": os.getenv("AWS_ACCESS_KEY_ID"),
        "secret_access_key": os.getenv("AWS_SECRET_ACCESS_KEY"),
        "bucket": os.getenv("AWS_S3_BUCKET"),
        "region": os.getenv("AWS_S3_REGION", "ap-southeast-1"),
        "prefix": os.getenv("AWS_S3_PREFIX", "uploads").strip("/"),
    }


def is_configured() -> bool:
    """True when credentials and bucket are all set."""
    cfg = _get_config()
    return all([cfg["access_key_id"], cfg["secret_access_key"], cfg["bucket"]])


def _get_s3_client():
    """Get or create the boto3 S3 client. Lazy-imports boto3 to avoid import-time dependency."""
    global _s3_client
    if _s3_client is None:
        cfg = _get_config()
        if not is_configured():
            raise ValueError(
                "AWS S3 environment variables not configured. "
                "Set AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY, and AWS_S3_BUCKET."
            )
        import boto3

        _s3_client = boto3.client(
            "s3",
            aws_access_key_id=cfg["access_key_id"],
            aws_secret_access_key=cfg["secret_access_key"],
            region_name=cfg["region"],
        )
    return _s3_client


def build_key(filename: str) -> str:
    """Object key for an uploaded file under the configured prefix."""
    prefix = _get_config()["prefix"]
    return f"{prefix}/{filename}" if prefix else filename


def upload_file(file_bytes: bytes, key: str, content_type: str = "application/octet-stream") -> str:
    """
    Upload file bytes to S3 under the given key.

    Blocking; call through ``asyncio.to_thread`` from request handlers.

    Args:
        file_bytes: Raw file content
        key: S3 object key (e.g., "uploads/image-1700000000000-abc123.jpg")
        content_type: MIME type for the uploaded object

    Returns:
        Public URL of the uploaded file
    """
    client = _get_s3_client()
    cfg = _get_config()
    bucket = cfg["bucket"]
    region = cfg["region"]

    client.put_object(
        Bucket=bucket,
        Key=key,
        Body=file_bytes,
        ContentType=content_type,
    )

    url = f"https://{bucket}.s3.{region}.amazonaws.com/{key}"
    logger.info("Uploaded file to S3: %s", key)
    return url


def delete_file_by_url(url: str) -> bool:
    """
    Delete an uploaded file from S3 by its URL. Best-effort: logs errors but doesn't raise.

    Args:
        url: The full S3 URL of the object

    Returns:
        True if deleted successfully, False otherwise
    """
    try:
        client = _get_s3_client()
        bucket = _get_config()["bucket"]
        key = _extract_key_from_url(url, bucket)
        if not key:
            logger.warning(f"Could not extract S3 key from URL: {url}")
            return False

        client.delete_object(Bucket=bucket, Key=key)
        logger.info(f"Deleted file from S3: {key}")
        return True
    except Exception as e:
        logger.error(f"Failed to delete file from S3: {e}")
        return False


def _extract_key_from_url(url: str, expected_bucket: Optional[str] = None) -> Optional[str]:
    """
    Extract the S3 object key from a full S3 URL.

    Validates that the URL hostname matches the expected S3 bucket before
    extracting the key.

    Handles URLs like:
      https://bucket.s3.region.amazonaws.com/uploads/image-123-abc.jpg

    Args:
        url: Full S3 URL
        expected_bucket: Expected S3 bucket name for hostname validation

    Returns:
        Object key string or None if parsing fails or hostname doesn't match
    """
    try:
        parsed = urlparse(url)

        # Validate hostname contains expected bucket if provided
        if expected_bucket and parsed.hostname:
            if expected_bucket not in parsed.hostname:
                logger.warning(
                    f"URL hostname '{parsed.hostname}' does not match "
                    f"expected bucket '{expected_bucket}'"
                )
                return None

        key = parsed.path.lstrip("/")
        return key if key else None
    except Exception:
        return None
