"""URL-safe slug generation utilities."""

import re
import unicodedata


def slugify(text: str) -> str:
    """Convert a title to a URL-safe slug (lowercase, hyphens, no special chars).

    Accented letters are transliterated to their ASCII base letter before
    stripping, so "Café Desa!" and "cafe desa" both become "cafe-desa".
    Titles with nothing left after stripping (pure punctuation, non-Latin
    scripts) return an empty string; callers decide what to do with that.

    Args:
        text: Text to slugify (e.g. "Kegiatan Gotong Royong").

    Returns:
        Slugified text (e.g. "kegiatan-gotong-royong").
    """
    if not text:
        return ""
    text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    text = text.lower()
    text = re.sub(r"[^a-z0-9\s-]", "", text)
    text = re.sub(r"\s+", "-", text)
    text = re.sub(r"-+", "-", text)
    return text.strip("-")
