"""Published Content: products, news (with article views) and member resources.

Invariants:
    - Public listings only return active products and published news
    - Counters (article views, resource downloads) use Firestore Increment
"""

from google.cloud.firestore_v1 import Increment

from diaspora_connect.repositories.base import FirestoreRepository, eq, utcnow


class ProductRepository(FirestoreRepository):
    collection_name = "products"
    resource_label = "Product"

    def create(self, fields: dict) -> dict:
        return self._create({**fields, "updatedAt": utcnow()})

    def list_active(self) -> list[dict]:
        return self._query(eq("isActive", True), order_by="createdAt")

    def update(self, product_id: str, fields: dict) -> None:
        self._update(product_id, fields, touch=True)


class NewsRepository(FirestoreRepository):
    collection_name = "news"
    resource_label = "News article"

    def create(self, fields: dict, author_id: str) -> dict:
        published = bool(fields.get("published"))
        return self._create({
            **fields,
            "authorId": author_id,
            "publishedAt": utcnow() if published else None,
            "updatedAt": utcnow(),
        })

    def list_published(
        self, category: str | None = None, limit: int | None = None,
    ) -> list[dict]:
        filters = [eq("published", True)]
        if category:
            filters.append(eq("category", category))
        return self._query(*filters, order_by="publishedAt", limit=limit)

    def update(self, article_id: str, fields: dict, current: dict) -> None:
        if fields.get("published") and not current.get("publishedAt"):
            fields = {**fields, "publishedAt": utcnow()}
        self._update(article_id, fields, touch=True)


class ArticleViewRepository(FirestoreRepository):
    """One counter document per article (doc id == article id)."""

    collection_name = "articleViews"
    resource_label = "Article views"

    def record_view(self, article_id: str, title: str) -> None:
        self._merge(article_id, {
            "articleId": article_id,
            "title": title,
            "views": Increment(1),
            "lastViewedAt": utcnow(),
        })

    def top(self, limit: int = 10) -> list[dict]:
        return self._query(order_by="views", limit=limit)


class ResourceRepository(FirestoreRepository):
    collection_name = "resources"
    resource_label = "Resource"

    def create(self, fields: dict, uploaded_by: str) -> dict:
        return self._create({
            **fields,
            "uploadedBy": uploaded_by,
            "downloadCount": 0,
        })

    def increment_downloads(self, resource_id: str) -> None:
        self._update(resource_id, {"downloadCount": Increment(1)})
