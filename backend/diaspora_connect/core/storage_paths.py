"""Storage Paths: object naming and URL parsing for Firebase Storage.

Two URL shapes are recognized:
    - download URLs: https://firebasestorage.googleapis.com/v0/b/<bucket>/o/<encoded path>?alt=media
    - public URLs:   https://storage.googleapis.com/<bucket>/<path>
"""

import re
from urllib.parse import unquote, urlparse

PUBLIC_HOST = "storage.googleapis.com"

_OBJECT_PATH = re.compile(r"/o/([^/?]+)$")
_SAFE_NAME = re.compile(r"[^A-Za-z0-9._-]+")


def storage_path_from_url(url: str) -> str | None:
    """Extract the object path from a Firebase Storage URL, or None."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    match = _OBJECT_PATH.search(parsed.path)
    if match:
        return unquote(match.group(1))
    if parsed.netloc == PUBLIC_HOST:
        # /<bucket>/<path>
        parts = parsed.path.lstrip("/").split("/", 1)
        if len(parts) == 2 and parts[1]:
            return unquote(parts[1])
    return None


def safe_filename(filename: str) -> str:
    return _SAFE_NAME.sub("-", filename).strip("-") or "image"


def image_path(folder: str, doc_id: str, filename: str) -> str:
    """Image belonging to a stored document, e.g. products/<id>/shirt.png."""
    return f"{folder}/{doc_id}/{safe_filename(filename)}"


def upload_path(folder: str, filename: str, stamp_ms: int) -> str:
    """Image uploaded before its document exists, e.g. banners/1767225600000-hero.png."""
    return f"{folder}/{stamp_ms}-{safe_filename(filename)}"
