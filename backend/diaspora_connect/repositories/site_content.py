"""Site Content: homepage banners, leadership profiles, Twitter/X embeds, newsletter signups.

Invariants:
    - Banners and leaders list by `order` ascending; public listings keep isActive only
    - New banners/leaders without an explicit order go last
    - Moving an item renumbers the affected `order` values in one batch
    - Twitter embeds list newest first; the live embed is the newest active one
    - One newsletter subscription per email (case-insensitive)
"""

import logging

from diaspora_connect.core.errors import ResourceNotFoundError
from diaspora_connect.infrastructure.firestore import translate_errors
from diaspora_connect.repositories.base import FirestoreRepository, eq, utcnow

logger = logging.getLogger(__name__)

MOVE_UP = "up"
MOVE_DOWN = "down"


class _OrderedRepository(FirestoreRepository):
    """Collections the admin dashboard arranges by hand (banners, leaders)."""

    def create(self, fields: dict, created_by: str | None = None) -> dict:
        if fields.get("order") is None:
            fields = {**fields, "order": self._next_order()}
        return self._create({**fields, "createdBy": created_by, "updatedAt": utcnow()})

    def list_ordered(self, active_only: bool = False) -> list[dict]:
        filters = [eq("isActive", True)] if active_only else []
        return self._query(*filters, order_by="order", descending=False)

    def update(self, doc_id: str, fields: dict) -> None:
        self._update(doc_id, fields, touch=True)

    def move(self, doc_id: str, direction: str) -> list[dict]:
        """Swap an item with its neighbour; returns the listing in its new order.

        Items are renumbered 0..n-1 so that duplicate `order` values (two items
        both created with order 0) still move.
        """
        items = self.list_ordered()
        index = next((i for i, item in enumerate(items) if item["id"] == doc_id), None)
        if index is None:
            raise ResourceNotFoundError(self.resource_label, doc_id)
        target = index - 1 if direction == MOVE_UP else index + 1
        if not 0 <= target < len(items):
            return items

        items[index], items[target] = items[target], items[index]
        batch = self.db.batch()
        now = utcnow()
        for position, item in enumerate(items):
            if item.get("order") != position:
                batch.update(
                    self.collection.document(item["id"]),
                    {"order": position, "updatedAt": now},
                )
                item["order"] = position
        with translate_errors(self._op("move")):
            batch.commit()
        logger.info(
            f"Moved {self.resource_label} {direction}",
            extra={"collection": self.collection_name, "document_id": doc_id},
        )
        return items

    def _next_order(self) -> int:
        orders = [item.get("order") or 0 for item in self.list_ordered()]
        return max(orders) + 1 if orders else 0


class BannerRepository(_OrderedRepository):
    collection_name = "banners"
    resource_label = "Banner"


class LeaderRepository(_OrderedRepository):
    collection_name = "leaders"
    resource_label = "Leader"


class TwitterEmbedRepository(FirestoreRepository):
    collection_name = "twitterEmbeds"
    resource_label = "Twitter embed"

    def create(self, fields: dict, created_by: str) -> dict:
        return self._create({**fields, "createdBy": created_by, "updatedAt": utcnow()})

    def list_active(self) -> list[dict]:
        return self._query(eq("isActive", True), order_by="createdAt")

    def live(self) -> dict | None:
        return self._first(eq("isActive", True), order_by="createdAt")

    def update(self, embed_id: str, fields: dict) -> None:
        self._update(embed_id, fields, touch=True)


class NewsletterRepository(FirestoreRepository):
    collection_name = "newsletterSubscriptions"
    resource_label = "Newsletter subscription"

    def subscribe(self, email: str, user_id: str | None = None) -> tuple[dict, bool]:
        """(subscription, created); an existing subscription is returned unchanged."""
        email = email.strip().lower()
        existing = self._first(eq("email", email))
        if existing is not None:
            return existing, False
        record = self._create({"email": email, "userId": user_id, "active": True})
        return record, True
