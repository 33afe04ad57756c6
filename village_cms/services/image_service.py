"""
Image processing for content uploads.

Validates, downsizes and converts uploaded images to JPEG before they are
stored, so every stored image fits within 1920x1080.
"""

import logging
from io import BytesIO

from PIL import Image

from village_cms.utils.constants import MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH, MAX_UPLOAD_BYTES

logger = logging.getLogger(__name__)

# Validation constants
MAX_IMAGE_PIXELS = 40_000_000  # 40MP
JPEG_QUALITY = 85

Image.MAX_IMAGE_PIXELS = MAX_IMAGE_PIXELS


def validate_upload(content: bytes, content_type: str) -> None:
    """
    Check size and declared type of an uploaded file.

    Raises:
        ValueError: If the file is empty, too large, or not an image
    """
    if not content:
        raise ValueError("No file uploaded")
    if not (content_type or "").startswith("image/"):
        raise ValueError("Only image files are allowed")
    if len(content) > MAX_UPLOAD_BYTES:
        raise ValueError(
            f"File size must be less than {MAX_UPLOAD_BYTES // (1024 * 1024)}MB"
        )


def process_image(content: bytes) -> bytes:
    """
    Decode, downsize and re-encode an image as JPEG.

    Args:
        content: Raw uploaded bytes

    Returns:
        Processed JPEG bytes

    Raises:
        ValueError: If the image is corrupted or its dimensions are too large
    """
    try:
        img = Image.open(BytesIO(content))
        img.load()  # Force full decode to catch corrupted files
    except Image.DecompressionBombError:
        raise ValueError("Image dimensions too large")
    except Exception as e:
        raise ValueError(f"Invalid or corrupted image: {e}")

    # Convert to RGB (strip alpha / handle palette modes)
    if img.mode not in ("RGB", "L"):
        img = img.convert("RGB")

    w, h = img.size
    if w > MAX_IMAGE_WIDTH or h > MAX_IMAGE_HEIGHT:
        img.thumbnail((MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT), Image.LANCZOS)
        logger.debug(f"Resized image from {w}x{h} to {img.size[0]}x{img.size[1]}")

    buf = BytesIO()
    img.save(buf, format="JPEG", quality=JPEG_QUALITY)
    return buf.getvalue()
