"""Petitions: public listing and signing; staff authoring and signature export."""

from fastapi import APIRouter, Depends, status

from diaspora_connect.api.dependencies import (
    get_optional_user, repository, require_staff,
)
from diaspora_connect.core.errors import InvalidRequestError, ResourceNotFoundError
from diaspora_connect.infrastructure.firebase_auth import AuthenticatedUser
from diaspora_connect.repositories.petitions import PetitionRepository
from diaspora_connect.repositories.users import UserRepository
from diaspora_connect.schemas.content import (
    PetitionCreate, PetitionUpdate, SignPetitionRequest,
)
from diaspora_connect.services.petition_service import sign_petition

router = APIRouter(prefix="/api/petitions", tags=["petitions"])


@router.get("")
def list_petitions(
    active: bool = False,
    petitions: PetitionRepository = Depends(repository(PetitionRepository)),
):
    return {"petitions": petitions.list_petitions(published_only=True, active_only=active)}


@router.get("/admin/all")
def list_all_petitions(
    _staff: dict = Depends(require_staff),
    petitions: PetitionRepository = Depends(repository(PetitionRepository)),
):
    return {"petitions": petitions.list_petitions(published_only=False)}


@router.get("/{petition_id}")
def get_petition(
    petition_id: str,
    petitions: PetitionRepository = Depends(repository(PetitionRepository)),
):
    petition = petitions.get(petition_id)
    if petition is None or not petition.get("published"):
        raise ResourceNotFoundError("Petition", petition_id)
    return petition


@router.post("/{petition_id}/signatures", status_code=status.HTTP_201_CREATED)
def sign(
    petition_id: str,
    body: SignPetitionRequest,
    user: AuthenticatedUser | None = Depends(get_optional_user),
    petitions: PetitionRepository = Depends(repository(PetitionRepository)),
    users: UserRepository = Depends(repository(UserRepository)),
):
    profile = None
    if user is not None:
        profile = users.get(user.uid) or {"name": user.name, "email": user.email}
    return sign_petition(
        petitions, petition_id, body,
        user_id=user.uid if user else None,
        profile=profile,
    )


@router.post("", status_code=status.HTTP_201_CREATED)
def create_petition(
    body: PetitionCreate,
    staff: dict = Depends(require_staff),
    petitions: PetitionRepository = Depends(repository(PetitionRepository)),
):
    return petitions.create(body.to_document(), created_by=staff["uid"])


@router.patch("/{petition_id}")
def update_petition(
    petition_id: str,
    body: PetitionUpdate,
    _staff: dict = Depends(require_staff),
    petitions: PetitionRepository = Depends(repository(PetitionRepository)),
):
    fields = body.to_document(exclude_unset=True)
    if not fields:
        raise InvalidRequestError("No petition fields to update")
    petitions.update(petition_id, fields)
    return petitions.require(petition_id)


@router.get("/{petition_id}/signatures")
def list_signatures(
    petition_id: str,
    _staff: dict = Depends(require_staff),
    petitions: PetitionRepository = Depends(repository(PetitionRepository)),
):
    petitions.require(petition_id)
    return {"signatures": petitions.list_signatures(petition_id)}
