"""Firestore Manager: client lifecycle, error mapping and health checks.

Invariants:
    - Single Firestore client per process (initialized via init_firestore)
    - All google.api_core exceptions mapped to DatastoreError (core/errors.py)
    - NotFound maps to ResourceNotFoundError when the caller names the resource

Design Decisions:
    - Singleton firestore_manager initialized on startup: FastAPI lifespan manages lifecycle
    - get_firestore is the only route-level entry point, overridden in tests
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

import firebase_admin
from firebase_admin import firestore
from google.api_core.exceptions import (
    DeadlineExceeded,
    GoogleAPICallError,
    NotFound,
    PermissionDenied,
    RetryError,
    ServiceUnavailable,
)

from diaspora_connect.core.errors import (
    DatastoreError,
    ResourceNotFoundError,
    ServiceNotConfiguredError,
)

logger = logging.getLogger(__name__)


@contextmanager
def translate_errors(
    operation: str, resource: tuple[str, str] | None = None,
) -> Iterator[None]:
    """Map Firestore/transport exceptions raised in the block to domain errors.

    resource: optional (resource_type, resource_id) for NotFound reporting.
    """
    try:
        yield
    except NotFound as e:
        if resource:
            raise ResourceNotFoundError(*resource)
        logger.error(f"Firestore not found during {operation}: {e}")
        raise DatastoreError("Document not found", operation)
    except PermissionDenied as e:
        logger.error(f"Firestore permission denied during {operation}: {e}")
        raise DatastoreError("Permission denied", operation)
    except (DeadlineExceeded, ServiceUnavailable, RetryError) as e:
        logger.error(f"Firestore unavailable during {operation}: {e}")
        raise DatastoreError("Service unavailable", operation)
    except GoogleAPICallError as e:
        logger.error(f"Firestore API error during {operation}: {e}")
        raise DatastoreError("Firestore API error", operation)


class FirestoreManager:
    """Owns the Firestore client for the running process."""

    def __init__(self, app: firebase_admin.App):
        self.client = firestore.client(app)

    def health_check(self) -> bool:
        """Check Firestore connectivity (for readiness checks)."""
        try:
            with translate_errors("health_check"):
                next(iter(self.client.collections()), None)
            return True
        except Exception as e:
            logger.error(f"Firestore health check failed: {e}")
            return False


# Singleton (initialized on startup)
firestore_manager: FirestoreManager | None = None


def init_firestore(app: firebase_admin.App) -> FirestoreManager:
    global firestore_manager
    firestore_manager = FirestoreManager(app)
    return firestore_manager


def get_firestore():
    """FastAPI dependency for the Firestore client."""
    if not firestore_manager:
        raise ServiceNotConfiguredError("Firestore", "firebase_project_id")
    return firestore_manager.client


def get_optional_firestore():
    """Firestore client, or None when Firebase is not configured."""
    return firestore_manager.client if firestore_manager else None
