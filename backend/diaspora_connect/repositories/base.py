"""Firestore Repository Base: shared CRUD and query helpers.

Invariants:
    - Created documents carry `id` (the document id) and `createdAt` (UTC)
    - Reads return plain dicts; missing documents return None
    - Ordered queries that hit a missing composite index (FailedPrecondition)
      are retried unordered and sorted in Python

Design Decisions:
    - Synchronous: firebase-admin's Firestore client is blocking; routes run
      repository calls in FastAPI's threadpool
"""

import logging
from datetime import datetime, timezone
from typing import Any

from google.api_core.exceptions import FailedPrecondition
from google.cloud.firestore_v1 import Query
from google.cloud.firestore_v1.base_query import FieldFilter

from diaspora_connect.core.errors import ResourceNotFoundError
from diaspora_connect.infrastructure.firestore import translate_errors

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def eq(field: str, value: Any) -> FieldFilter:
    return FieldFilter(field, "==", value)


def snapshot_to_dict(snapshot) -> dict:
    data = snapshot.to_dict() or {}
    data.setdefault("id", snapshot.id)
    return data


def _sort_key(field: str):
    def key(doc: dict):
        value = doc.get(field)
        return (value is not None, value)
    return key


class FirestoreRepository:
    """Base class: one repository per top-level collection."""

    collection_name: str = ""
    resource_label: str = "Document"

    def __init__(self, db):
        self.db = db

    @property
    def collection(self):
        return self.db.collection(self.collection_name)

    def _op(self, name: str) -> str:
        return f"{self.collection_name}.{name}"

    def _create(self, data: dict, doc_id: str | None = None) -> dict:
        ref = self.collection.document(doc_id) if doc_id else self.collection.document()
        record = {**data, "id": ref.id, "createdAt": data.get("createdAt") or utcnow()}
        with translate_errors(self._op("create")):
            ref.set(record)
        logger.info(
            f"Created {self.resource_label}",
            extra={"collection": self.collection_name, "document_id": ref.id},
        )
        return record

    def get(self, doc_id: str) -> dict | None:
        with translate_errors(self._op("get")):
            snapshot = self.collection.document(doc_id).get()
        if not snapshot.exists:
            return None
        return snapshot_to_dict(snapshot)

    def require(self, doc_id: str) -> dict:
        doc = self.get(doc_id)
        if doc is None:
            raise ResourceNotFoundError(self.resource_label, doc_id)
        return doc

    def _update(self, doc_id: str, fields: dict, touch: bool = False) -> None:
        if touch:
            fields = {**fields, "updatedAt": utcnow()}
        with translate_errors(self._op("update"), resource=(self.resource_label, doc_id)):
            self.collection.document(doc_id).update(fields)

    def _merge(self, doc_id: str, fields: dict) -> None:
        with translate_errors(self._op("merge")):
            self.collection.document(doc_id).set(fields, merge=True)

    def delete(self, doc_id: str) -> None:
        with translate_errors(self._op("delete")):
            self.collection.document(doc_id).delete()

    def _query(
        self,
        *filters: FieldFilter,
        order_by: str | None = None,
        descending: bool = True,
        limit: int | None = None,
    ) -> list[dict]:
        query = self.collection
        for f in filters:
            query = query.where(filter=f)
        with translate_errors(self._op("query")):
            if not order_by:
                if limit:
                    query = query.limit(limit)
                return [snapshot_to_dict(s) for s in query.stream()]
            direction = Query.DESCENDING if descending else Query.ASCENDING
            ordered = query.order_by(order_by, direction=direction)
            if limit:
                ordered = ordered.limit(limit)
            try:
                return [snapshot_to_dict(s) for s in ordered.stream()]
            except FailedPrecondition as e:
                logger.warning(
                    f"Composite index not ready for {self.collection_name}"
                    f" ordered by {order_by}, sorting in memory: {e}",
                )
                docs = [snapshot_to_dict(s) for s in query.stream()]
        docs.sort(key=_sort_key(order_by), reverse=descending)
        return docs[:limit] if limit else docs

    def _first(self, *filters: FieldFilter, order_by: str | None = None) -> dict | None:
        docs = self._query(*filters, order_by=order_by, limit=1)
        return docs[0] if docs else None

    def list_all(self, limit: int | None = None) -> list[dict]:
        return self._query(order_by="createdAt", limit=limit)
