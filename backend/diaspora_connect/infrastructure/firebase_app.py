"""Firebase App: single firebase-admin app shared by Firestore, Auth and Storage.

Invariants:
    - initialize_firebase is idempotent: a second call returns the existing default app
    - Service-account JSON when configured, Application Default Credentials otherwise
"""

import logging

import firebase_admin
from firebase_admin import credentials

logger = logging.getLogger(__name__)


def initialize_firebase(
    project_id: str | None = None,
    credentials_path: str | None = None,
    storage_bucket: str | None = None,
) -> firebase_admin.App:
    """Initialize (or reuse) the default firebase-admin app."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass  # not initialized yet

    cred = (
        credentials.Certificate(credentials_path)
        if credentials_path
        else credentials.ApplicationDefault()
    )
    options: dict[str, str] = {}
    if project_id:
        options["projectId"] = project_id
    if storage_bucket:
        options["storageBucket"] = storage_bucket
    app = firebase_admin.initialize_app(cred, options or None)
    logger.info(f"Firebase app initialized (project={project_id or 'default'})")
    return app
