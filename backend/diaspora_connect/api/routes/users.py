"""Current User: profile, personal history (donations, membership, referrals, applications)
and the membership card.

Invariants:
    - Every endpoint acts on the caller's own uid
    - POST /me is idempotent: an existing profile is returned unchanged
"""

from fastapi import APIRouter, Depends

from diaspora_connect.api.dependencies import get_current_user, repository
from diaspora_connect.config import Settings, get_settings
from diaspora_connect.core.errors import ResourceNotFoundError
from diaspora_connect.core.referrals import referral_link
from diaspora_connect.infrastructure.firebase_auth import AuthenticatedUser
from diaspora_connect.repositories.applications import (
    MembershipApplicationRepository, VolunteerApplicationRepository,
)
from diaspora_connect.repositories.engagement import ReferralRepository
from diaspora_connect.repositories.payments import DonationRepository, MembershipRepository
from diaspora_connect.repositories.users import UserRepository
from diaspora_connect.schemas.users import (
    ProfileCreate, ProfileUpdate, ReferralSummary, UserProfile,
)
from diaspora_connect.services.membership_card_service import get_own_card
from diaspora_connect.services.profile_service import get_or_create_profile, update_profile

router = APIRouter(prefix="/api/users/me", tags=["users"])


@router.get("", response_model=UserProfile)
def get_my_profile(
    user: AuthenticatedUser = Depends(get_current_user),
    users: UserRepository = Depends(repository(UserRepository)),
):
    profile = users.get(user.uid)
    if profile is None:
        raise ResourceNotFoundError("User", user.uid)
    return profile


@router.post("", response_model=UserProfile)
def create_my_profile(
    body: ProfileCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    users: UserRepository = Depends(repository(UserRepository)),
    referrals: ReferralRepository = Depends(repository(ReferralRepository)),
):
    """Create the caller's profile at signup (with optional referral code)."""
    return get_or_create_profile(
        users, referrals, user, name=body.name, referral_code=body.referral_code,
    )


@router.patch("", response_model=UserProfile)
def update_my_profile(
    body: ProfileUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
    users: UserRepository = Depends(repository(UserRepository)),
):
    return update_profile(users, user.uid, body)


@router.get("/donations")
def list_my_donations(
    user: AuthenticatedUser = Depends(get_current_user),
    donations: DonationRepository = Depends(repository(DonationRepository)),
):
    return {"donations": donations.list_by_user(user.uid)}


@router.get("/membership")
def get_my_membership(
    user: AuthenticatedUser = Depends(get_current_user),
    memberships: MembershipRepository = Depends(repository(MembershipRepository)),
):
    return {"membership": memberships.latest_for_user(user.uid)}


@router.get("/membership-card")
def get_my_membership_card(
    user: AuthenticatedUser = Depends(get_current_user),
    applications: MembershipApplicationRepository = Depends(
        repository(MembershipApplicationRepository),
    ),
    users: UserRepository = Depends(repository(UserRepository)),
    memberships: MembershipRepository = Depends(repository(MembershipRepository)),
):
    return get_own_card(user.uid, applications, users, memberships)


@router.get("/referrals", response_model=ReferralSummary)
def get_my_referrals(
    user: AuthenticatedUser = Depends(get_current_user),
    users: UserRepository = Depends(repository(UserRepository)),
    referrals: ReferralRepository = Depends(repository(ReferralRepository)),
    settings: Settings = Depends(get_settings),
):
    profile = users.get(user.uid) or {}
    code = profile.get("referralCode")
    return {
        "referralCode": code,
        "referralLink": referral_link(settings.base_url, code) if code else None,
        "referrals": referrals.list_by_referrer(user.uid),
    }


@router.get("/membership-application")
def get_my_membership_application(
    user: AuthenticatedUser = Depends(get_current_user),
    applications: MembershipApplicationRepository = Depends(
        repository(MembershipApplicationRepository),
    ),
):
    return {"application": applications.latest_for_user(user.uid)}


@router.get("/volunteer-application")
def get_my_volunteer_application(
    user: AuthenticatedUser = Depends(get_current_user),
    volunteers: VolunteerApplicationRepository = Depends(
        repository(VolunteerApplicationRepository),
    ),
):
    return {"application": volunteers.latest_for_user(user.uid)}
