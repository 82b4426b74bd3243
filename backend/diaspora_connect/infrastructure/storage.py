"""Firebase Storage: upload and delete product/resource images."""

import logging

import firebase_admin
from firebase_admin import storage
from google.api_core.exceptions import GoogleAPICallError, NotFound

from diaspora_connect.core.errors import DatastoreError, ServiceNotConfiguredError

logger = logging.getLogger(__name__)


class StorageClient:
    """Thin wrapper over the default bucket of the Firebase app."""

    def __init__(self, app: firebase_admin.App, bucket_name: str | None = None):
        self.bucket = storage.bucket(bucket_name, app=app)

    def upload(self, path: str, data: bytes, content_type: str | None = None) -> str:
        """Upload bytes to path and return a public URL."""
        blob = self.bucket.blob(path)
        try:
            blob.upload_from_string(data, content_type=content_type)
            blob.make_public()
        except GoogleAPICallError as e:
            logger.error(f"Storage upload failed for {path}: {e}")
            raise DatastoreError("Storage upload failed", "upload")
        logger.info(f"Uploaded {len(data)} bytes to {path}")
        return blob.public_url

    def delete(self, path: str) -> None:
        try:
            self.bucket.blob(path).delete()
        except NotFound:
            logger.warning(f"Storage object already gone: {path}")
        except GoogleAPICallError as e:
            logger.error(f"Storage delete failed for {path}: {e}")
            raise DatastoreError("Storage delete failed", "delete")


# Singleton (initialized on startup when a bucket is configured)
storage_client: StorageClient | None = None


def init_storage(app: firebase_admin.App, bucket_name: str | None) -> StorageClient | None:
    global storage_client
    storage_client = StorageClient(app, bucket_name) if bucket_name else None
    return storage_client


def get_storage() -> StorageClient:
    """FastAPI dependency for Firebase Storage."""
    if not storage_client:
        raise ServiceNotConfiguredError("Firebase Storage", "firebase_storage_bucket")
    return storage_client


def get_optional_storage() -> StorageClient | None:
    """Storage client, or None when no bucket is configured."""
    return storage_client
