"""Petition Service: signature eligibility and recording.

Invariants:
    - Only published, active, unexpired petitions accept signatures
    - Signed-in users sign with their uid (one signature per user)
    - Guests must provide name and email
"""

from datetime import datetime, timezone

from diaspora_connect.core.errors import InvalidRequestError, ResourceNotFoundError
from diaspora_connect.repositories.petitions import PetitionRepository
from diaspora_connect.schemas.content import SignPetitionRequest


def check_open(petition: dict, now: datetime | None = None) -> None:
    """Raise InvalidRequestError when the petition no longer accepts signatures."""
    now = now or datetime.now(timezone.utc)
    if not petition.get("active", True):
        raise InvalidRequestError("This petition is closed")
    expires_at = petition.get("expiresAt")
    if expires_at and expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    if expires_at and expires_at <= now:
        raise InvalidRequestError("This petition has expired")


def sign_petition(
    petitions: PetitionRepository,
    petition_id: str,
    request: SignPetitionRequest,
    user_id: str | None = None,
    profile: dict | None = None,
) -> dict:
    petition = petitions.get(petition_id)
    if petition is None or not petition.get("published"):
        raise ResourceNotFoundError("Petition", petition_id)
    check_open(petition)

    profile = profile or {}
    name = (request.name or profile.get("name") or "").strip()
    email = (request.email or profile.get("email") or "").strip()
    if not name:
        raise InvalidRequestError("Name is required", field="name")
    if not email:
        raise InvalidRequestError("Email is required", field="email")

    signature = petitions.add_signature(
        petition_id,
        user_id=user_id,
        name=name,
        email=email.lower(),
        anonymous=request.anonymous,
    )
    return {
        "signature": signature,
        "currentSignatures": (petition.get("currentSignatures") or 0) + 1,
    }
