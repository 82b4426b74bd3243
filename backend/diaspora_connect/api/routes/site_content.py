"""Site Content: homepage banners, leadership profiles, Twitter/X embeds and newsletter signups.

Invariants:
    - Public listings return active items only; /admin/all returns everything
    - Banners and leaders are arranged by hand (order ascending, move up/down)
    - Images can be uploaded before the item exists (POST /images) or replaced
      on an existing item (POST /{id}/image)
    - Deleting an item removes its Storage image; a missing bucket skips that step
"""

from fastapi import APIRouter, Depends, File, Response, UploadFile, status
from pydantic import BaseModel

from diaspora_connect.api.dependencies import get_optional_user, repository, require_staff
from diaspora_connect.core.errors import InvalidRequestError
from diaspora_connect.infrastructure.firebase_auth import AuthenticatedUser
from diaspora_connect.infrastructure.storage import (
    StorageClient, get_optional_storage, get_storage,
)
from diaspora_connect.repositories.site_content import (
    BannerRepository, LeaderRepository, NewsletterRepository, TwitterEmbedRepository,
)
from diaspora_connect.schemas.site_content import (
    BannerCreate,
    BannerUpdate,
    LeaderCreate,
    LeaderUpdate,
    MoveRequest,
    NewsletterSubscribe,
    TwitterEmbedCreate,
    TwitterEmbedUpdate,
)
from diaspora_connect.services.media_service import delete_with_image, replace_image, upload_image


def _ordered_router(
    prefix: str,
    key: str,
    label: str,
    repo_cls: type,
    create_model: type[BaseModel],
    update_model: type[BaseModel],
) -> APIRouter:
    """CRUD, ordering and image routes for a hand-arranged collection."""
    router = APIRouter(prefix=prefix, tags=[key])
    folder = key
    get_repo = repository(repo_cls)

    @router.get("")
    def list_active(items=Depends(get_repo)):
        return {key: items.list_ordered(active_only=True)}

    @router.get("/admin/all")
    def list_all(_staff: dict = Depends(require_staff), items=Depends(get_repo)):
        return {key: items.list_ordered()}

    @router.post("", status_code=status.HTTP_201_CREATED)
    def create(
        body: create_model,
        staff: dict = Depends(require_staff),
        items=Depends(get_repo),
    ):
        return items.create(body.to_document(), created_by=staff["uid"])

    @router.post("/images", status_code=status.HTTP_201_CREATED)
    def upload(
        file: UploadFile = File(...),
        _staff: dict = Depends(require_staff),
        storage: StorageClient = Depends(get_storage),
    ):
        url = upload_image(
            storage, folder,
            data=file.file.read(),
            filename=file.filename or "image",
            content_type=file.content_type,
        )
        return {"imageUrl": url}

    @router.patch("/{item_id}")
    def update(
        item_id: str,
        body: update_model,
        _staff: dict = Depends(require_staff),
        items=Depends(get_repo),
    ):
        fields = body.to_document(exclude_unset=True)
        if not fields:
            raise InvalidRequestError(f"No {label.lower()} fields to update")
        items.update(item_id, fields)
        return items.require(item_id)

    @router.post("/{item_id}/move")
    def move(
        item_id: str,
        body: MoveRequest,
        _staff: dict = Depends(require_staff),
        items=Depends(get_repo),
    ):
        return {key: items.move(item_id, body.direction)}

    @router.post("/{item_id}/image")
    def replace(
        item_id: str,
        file: UploadFile = File(...),
        _staff: dict = Depends(require_staff),
        storage: StorageClient = Depends(get_storage),
        items=Depends(get_repo),
    ):
        url = replace_image(
            storage, items, item_id,
            folder=folder,
            data=file.file.read(),
            filename=file.filename or "image",
            content_type=file.content_type,
        )
        return {"imageUrl": url}

    @router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete(
        item_id: str,
        _staff: dict = Depends(require_staff),
        storage: StorageClient | None = Depends(get_optional_storage),
        items=Depends(get_repo),
    ):
        delete_with_image(storage, items, item_id)

    return router


banner_router = _ordered_router(
    "/api/banners", "banners", "Banner", BannerRepository, BannerCreate, BannerUpdate,
)
leader_router = _ordered_router(
    "/api/leaders", "leaders", "Leader", LeaderRepository, LeaderCreate, LeaderUpdate,
)


# ─── Twitter/X embeds ───────────────────────────────────────────

twitter_router = APIRouter(prefix="/api/twitter-embeds", tags=["twitter-embeds"])


@twitter_router.get("")
def list_embeds(
    embeds: TwitterEmbedRepository = Depends(repository(TwitterEmbedRepository)),
):
    return {"embeds": embeds.list_active()}


@twitter_router.get("/live")
def live_embed(
    embeds: TwitterEmbedRepository = Depends(repository(TwitterEmbedRepository)),
):
    return {"embed": embeds.live()}


@twitter_router.get("/admin/all")
def list_all_embeds(
    _staff: dict = Depends(require_staff),
    embeds: TwitterEmbedRepository = Depends(repository(TwitterEmbedRepository)),
):
    return {"embeds": embeds.list_all()}


@twitter_router.post("", status_code=status.HTTP_201_CREATED)
def create_embed(
    body: TwitterEmbedCreate,
    staff: dict = Depends(require_staff),
    embeds: TwitterEmbedRepository = Depends(repository(TwitterEmbedRepository)),
):
    return embeds.create(body.to_document(), created_by=staff["uid"])


@twitter_router.patch("/{embed_id}")
def update_embed(
    embed_id: str,
    body: TwitterEmbedUpdate,
    _staff: dict = Depends(require_staff),
    embeds: TwitterEmbedRepository = Depends(repository(TwitterEmbedRepository)),
):
    fields = body.to_document(exclude_unset=True)
    if not fields:
        raise InvalidRequestError("No embed fields to update")
    embeds.update(embed_id, fields)
    return embeds.require(embed_id)


@twitter_router.delete("/{embed_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_embed(
    embed_id: str,
    _staff: dict = Depends(require_staff),
    embeds: TwitterEmbedRepository = Depends(repository(TwitterEmbedRepository)),
):
    embeds.require(embed_id)
    embeds.delete(embed_id)


# ─── Newsletter ─────────────────────────────────────────────────

newsletter_router = APIRouter(prefix="/api/newsletter", tags=["newsletter"])


@newsletter_router.post("", status_code=status.HTTP_201_CREATED)
def subscribe(
    body: NewsletterSubscribe,
    response: Response,
    user: AuthenticatedUser | None = Depends(get_optional_user),
    subscriptions: NewsletterRepository = Depends(repository(NewsletterRepository)),
):
    _, created = subscriptions.subscribe(body.email, user.uid if user else None)
    if not created:
        response.status_code = status.HTTP_200_OK
        return {"success": True, "message": "You are already subscribed"}
    return {"success": True, "message": "Thanks for subscribing"}
