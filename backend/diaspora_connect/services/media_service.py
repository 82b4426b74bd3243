"""Media Service: image uploads for products, banners and leaders.

Invariants:
    - Only JPEG, PNG, WebP and GIF images up to 5 MB are accepted
    - Replacing a document's image deletes the previous Storage object when its
      path can be recovered from the stored URL
    - Deleting a document removes its image too; a failed image delete is logged
      and never blocks the document delete
"""

import logging
import time

from diaspora_connect.core.errors import DatastoreError, InvalidRequestError
from diaspora_connect.core.storage_paths import image_path, storage_path_from_url, upload_path
from diaspora_connect.infrastructure.storage import StorageClient
from diaspora_connect.repositories.base import FirestoreRepository

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/webp", "image/gif")
MAX_IMAGE_BYTES = 5 * 1024 * 1024


def validate_image(data: bytes, content_type: str | None) -> None:
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise InvalidRequestError(f"Unsupported image type: {content_type}", field="file")
    if not data:
        raise InvalidRequestError("Image file is empty", field="file")
    if len(data) > MAX_IMAGE_BYTES:
        raise InvalidRequestError("Image must be 5 MB or smaller", field="file")


def upload_image(
    storage: StorageClient,
    folder: str,
    *,
    data: bytes,
    filename: str,
    content_type: str | None,
) -> str:
    """Store an image ahead of the document that will use it; returns the public URL."""
    validate_image(data, content_type)
    path = upload_path(folder, filename, int(time.time() * 1000))
    return storage.upload(path, data, content_type)


def replace_image(
    storage: StorageClient,
    repo: FirestoreRepository,
    doc_id: str,
    *,
    folder: str,
    data: bytes,
    filename: str,
    content_type: str | None,
) -> str:
    """Upload a new image for doc_id, drop the old one and store the new URL."""
    validate_image(data, content_type)
    current = repo.require(doc_id)
    url = storage.upload(image_path(folder, doc_id, filename), data, content_type)

    old_path = storage_path_from_url(current.get("imageUrl") or "")
    if old_path:
        storage.delete(old_path)
    repo.update(doc_id, {"imageUrl": url})
    return url


def delete_with_image(
    storage: StorageClient | None, repo: FirestoreRepository, doc_id: str,
) -> None:
    current = repo.require(doc_id)
    repo.delete(doc_id)
    path = storage_path_from_url(current.get("imageUrl") or "")
    if not path or storage is None:
        return
    try:
        storage.delete(path)
    except DatastoreError as e:
        logger.error(
            f"Could not delete image {path}: {e.message}",
            extra={"collection": repo.collection_name, "document_id": doc_id},
        )
