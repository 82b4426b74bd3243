"""News: published articles, view tracking and staff authoring."""

from fastapi import APIRouter, Depends, Query, status

from diaspora_connect.api.dependencies import repository, require_staff
from diaspora_connect.core.domain_types import NewsCategory
from diaspora_connect.core.errors import InvalidRequestError, ResourceNotFoundError
from diaspora_connect.repositories.content import ArticleViewRepository, NewsRepository
from diaspora_connect.schemas.content import NewsCreate, NewsUpdate

router = APIRouter(prefix="/api/news", tags=["news"])


def _published_or_404(news: NewsRepository, article_id: str) -> dict:
    article = news.get(article_id)
    if article is None or not article.get("published"):
        raise ResourceNotFoundError("News article", article_id)
    return article


@router.get("")
def list_news(
    category: NewsCategory | None = None,
    limit: int | None = Query(None, ge=1, le=100),
    news: NewsRepository = Depends(repository(NewsRepository)),
):
    return {
        "articles": news.list_published(
            category.value if category else None, limit=limit,
        ),
    }


@router.get("/{article_id}")
def get_article(
    article_id: str,
    news: NewsRepository = Depends(repository(NewsRepository)),
):
    return _published_or_404(news, article_id)


@router.post("/{article_id}/views", status_code=status.HTTP_204_NO_CONTENT)
def record_view(
    article_id: str,
    news: NewsRepository = Depends(repository(NewsRepository)),
    views: ArticleViewRepository = Depends(repository(ArticleViewRepository)),
):
    article = _published_or_404(news, article_id)
    views.record_view(article_id, article.get("title", ""))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_article(
    body: NewsCreate,
    staff: dict = Depends(require_staff),
    news: NewsRepository = Depends(repository(NewsRepository)),
):
    return news.create(body.to_document(), author_id=staff["uid"])


@router.patch("/{article_id}")
def update_article(
    article_id: str,
    body: NewsUpdate,
    _staff: dict = Depends(require_staff),
    news: NewsRepository = Depends(repository(NewsRepository)),
):
    fields = body.to_document(exclude_unset=True)
    if not fields:
        raise InvalidRequestError("No article fields to update")
    current = news.require(article_id)
    news.update(article_id, fields, current)
    return news.require(article_id)


@router.delete("/{article_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_article(
    article_id: str,
    _staff: dict = Depends(require_staff),
    news: NewsRepository = Depends(repository(NewsRepository)),
):
    news.require(article_id)
    news.delete(article_id)
