"""Petitions: `petitions` collection with a `signatures` subcollection.

Invariants:
    - A signed-in user's signature document id is their uid, so a second
      signature fails atomically in Firestore (create() raises AlreadyExists)
    - Guest signatures are de-duplicated by email before insert
    - currentSignatures is only ever changed through Increment, in the same
      batch as the signature it counts: both land or neither does
"""

import logging

from google.api_core.exceptions import AlreadyExists
from google.cloud.firestore_v1 import Increment

from diaspora_connect.core.errors import ConflictError
from diaspora_connect.infrastructure.firestore import translate_errors
from diaspora_connect.repositories.base import (
    FirestoreRepository, eq, snapshot_to_dict, utcnow,
)

logger = logging.getLogger(__name__)

SIGNATURES = "signatures"
ALREADY_SIGNED = "You have already signed this petition"


class PetitionRepository(FirestoreRepository):
    collection_name = "petitions"
    resource_label = "Petition"

    def create(self, fields: dict, created_by: str) -> dict:
        return self._create({
            **fields,
            "createdBy": created_by,
            "currentSignatures": 0,
            "updatedAt": utcnow(),
        })

    def list_petitions(self, published_only: bool = True, active_only: bool = False) -> list[dict]:
        filters = []
        if published_only:
            filters.append(eq("published", True))
        if active_only:
            filters.append(eq("active", True))
        return self._query(*filters, order_by="createdAt")

    def update(self, petition_id: str, fields: dict) -> None:
        self._update(petition_id, fields, touch=True)

    # ─── Signatures ─────────────────────────────────────────────

    def _signatures(self, petition_id: str):
        return self.collection.document(petition_id).collection(SIGNATURES)

    def add_signature(
        self,
        petition_id: str,
        *,
        user_id: str | None,
        name: str,
        email: str,
        anonymous: bool = False,
    ) -> dict:
        """Insert a signature and bump the counter; ConflictError on duplicates."""
        signatures = self._signatures(petition_id)
        if not user_id and self.find_signature_by_email(petition_id, email):
            raise ConflictError(ALREADY_SIGNED)
        ref = signatures.document(user_id) if user_id else signatures.document()
        signature = {
            "id": ref.id,
            "petitionId": petition_id,
            "userId": user_id,
            "name": name,
            "email": email,
            "anonymous": anonymous,
            "signedAt": utcnow(),
        }
        batch = self.db.batch()
        batch.create(ref, signature)
        batch.update(self.collection.document(petition_id), {"currentSignatures": Increment(1)})
        with translate_errors(self._op("sign"), resource=(self.resource_label, petition_id)):
            try:
                batch.commit()
            except AlreadyExists:
                raise ConflictError(ALREADY_SIGNED)
        logger.info(
            "Petition signed",
            extra={"document_id": petition_id, "user_id": user_id},
        )
        return signature

    def find_signature_by_email(self, petition_id: str, email: str) -> dict | None:
        query = self._signatures(petition_id).where(filter=eq("email", email)).limit(1)
        with translate_errors(self._op("signatures.query")):
            docs = [snapshot_to_dict(s) for s in query.stream()]
        return docs[0] if docs else None

    def has_signed(self, petition_id: str, user_id: str) -> bool:
        with translate_errors(self._op("signatures.get")):
            return self._signatures(petition_id).document(user_id).get().exists

    def list_signatures(self, petition_id: str) -> list[dict]:
        with translate_errors(self._op("signatures.list")):
            docs = [snapshot_to_dict(s) for s in self._signatures(petition_id).stream()]
        docs.sort(key=lambda d: d.get("signedAt") or utcnow(), reverse=True)
        return docs
