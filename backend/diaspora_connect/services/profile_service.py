"""Profile Service: user profiles derived from verified Firebase identities.

Invariants:
    - A profile is created at most once per uid (existing profiles are returned as-is)
    - Referral attribution happens only when the profile is first created
    - Users may only edit name and photoURL; tier and role change elsewhere
"""

import logging

from diaspora_connect.core.errors import InvalidRequestError
from diaspora_connect.infrastructure.firebase_auth import AuthenticatedUser
from diaspora_connect.repositories.engagement import ReferralRepository
from diaspora_connect.repositories.users import UserRepository
from diaspora_connect.schemas.users import ProfileUpdate
from diaspora_connect.services.referral_service import attribute_signup

logger = logging.getLogger(__name__)


def get_or_create_profile(
    users: UserRepository,
    referrals: ReferralRepository,
    identity: AuthenticatedUser,
    name: str | None = None,
    referral_code: str | None = None,
) -> dict:
    existing = users.get(identity.uid)
    if existing is not None:
        return existing

    referred_by = None
    if referral_code:
        referred_by = attribute_signup(
            users,
            referrals,
            code=referral_code,
            user_id=identity.uid,
            email=identity.email,
        )
    return users.create(
        uid=identity.uid,
        email=identity.email,
        name=name or identity.name,
        email_verified=identity.email_verified,
        photo_url=identity.picture,
        referred_by=referred_by,
    )


def update_profile(users: UserRepository, uid: str, update: ProfileUpdate) -> dict:
    fields = update.to_document(exclude_unset=True)
    if not fields:
        raise InvalidRequestError("No profile fields to update")
    if "name" in fields:
        fields["name"] = (fields["name"] or "").strip()
        if not fields["name"]:
            raise InvalidRequestError("Name cannot be empty", field="name")
    users.require(uid)
    users.update_profile(uid, fields)
    return users.require(uid)
