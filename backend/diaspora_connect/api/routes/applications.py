"""Membership & Volunteer Applications: submission and staff review.

Invariants:
    - Membership applications require a signed-in applicant
    - Volunteer applications accept guests (userId null)
    - Listing and reviewing are staff-only; deleting a membership application is admin-only
"""

from fastapi import APIRouter, Depends, Query, status

from diaspora_connect.api.dependencies import (
    get_current_user, get_optional_user, repository, require_admin, require_staff,
)
from diaspora_connect.infrastructure.firebase_auth import AuthenticatedUser
from diaspora_connect.repositories.applications import (
    MembershipApplicationRepository, VolunteerApplicationRepository,
)
from diaspora_connect.repositories.engagement import (
    NotificationRepository, ReferralRepository,
)
from diaspora_connect.repositories.users import UserRepository
from diaspora_connect.schemas.applications import (
    ApplicationReview,
    MembershipApplicationCreate,
    VolunteerApplicationCreate,
    VolunteerStatusUpdate,
)
from diaspora_connect.services.application_service import (
    ApplicationService, submit_volunteer_application,
)

membership_router = APIRouter(prefix="/api/membership-applications", tags=["applications"])
volunteer_router = APIRouter(prefix="/api/volunteers", tags=["volunteers"])


def get_application_service(
    applications: MembershipApplicationRepository = Depends(
        repository(MembershipApplicationRepository),
    ),
    notifications: NotificationRepository = Depends(repository(NotificationRepository)),
    referrals: ReferralRepository = Depends(repository(ReferralRepository)),
    users: UserRepository = Depends(repository(UserRepository)),
) -> ApplicationService:
    return ApplicationService(applications, notifications, referrals, users)


# --- Membership applications -------------------------------------------------

@membership_router.post("", status_code=status.HTTP_201_CREATED)
def submit_membership_application(
    body: MembershipApplicationCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service),
):
    return service.submit(user.uid, body)


@membership_router.get("")
def list_membership_applications(
    status_filter: str | None = Query(None, alias="status"),
    _staff: dict = Depends(require_staff),
    applications: MembershipApplicationRepository = Depends(
        repository(MembershipApplicationRepository),
    ),
):
    return {"applications": applications.list_by_status(status_filter)}


@membership_router.patch("/{application_id}")
def review_membership_application(
    application_id: str,
    body: ApplicationReview,
    staff: dict = Depends(require_staff),
    service: ApplicationService = Depends(get_application_service),
):
    return service.review(
        application_id, body.status, staff["uid"], body.notes,
        membership_number=body.membership_number,
        province_allocated=body.province_allocated,
    )


@membership_router.delete("/{application_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_membership_application(
    application_id: str,
    _admin: dict = Depends(require_admin),
    applications: MembershipApplicationRepository = Depends(
        repository(MembershipApplicationRepository),
    ),
):
    applications.require(application_id)
    applications.delete(application_id)


# --- Volunteer applications --------------------------------------------------

@volunteer_router.post("", status_code=status.HTTP_201_CREATED)
def submit_volunteer(
    body: VolunteerApplicationCreate,
    user: AuthenticatedUser | None = Depends(get_optional_user),
    volunteers: VolunteerApplicationRepository = Depends(
        repository(VolunteerApplicationRepository),
    ),
):
    return submit_volunteer_application(volunteers, user.uid if user else None, body)


@volunteer_router.get("")
def list_volunteers(
    status_filter: str | None = Query(None, alias="status"),
    _staff: dict = Depends(require_staff),
    volunteers: VolunteerApplicationRepository = Depends(
        repository(VolunteerApplicationRepository),
    ),
):
    return {"applications": volunteers.list_by_status(status_filter)}


@volunteer_router.patch("/{application_id}")
def update_volunteer_status(
    application_id: str,
    body: VolunteerStatusUpdate,
    staff: dict = Depends(require_staff),
    volunteers: VolunteerApplicationRepository = Depends(
        repository(VolunteerApplicationRepository),
    ),
):
    volunteers.review(application_id, body.status, staff["uid"], body.notes)
    return volunteers.require(application_id)
