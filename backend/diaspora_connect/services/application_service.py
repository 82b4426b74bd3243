"""Application Service: membership and volunteer applications.

Invariants:
    - Submitting a membership application notifies staff and moves the
      applicant's referral forward to `applied`
    - A user with a pending membership application cannot submit another
    - Approval promotes a `supporter` to `member`; higher roles are untouched
    - Approval assigns the next DCP-<year>-<NNN> number unless the application
      already has one or staff supply one; numbers are never shared
    - Reviews always record reviewer and timestamp
"""

import logging
from datetime import datetime, timezone

from diaspora_connect.core.domain_types import (
    ApplicationStatus,
    MembershipApplicationType,
    ReferralStatus,
    UserRole,
    VolunteerApplicationStatus,
)
from diaspora_connect.core.errors import ConflictError
from diaspora_connect.core.membership_cards import next_membership_number
from diaspora_connect.repositories.applications import (
    MembershipApplicationRepository, VolunteerApplicationRepository,
)
from diaspora_connect.repositories.engagement import (
    NotificationRepository, ReferralRepository,
)
from diaspora_connect.repositories.users import UserRepository
from diaspora_connect.schemas.applications import (
    MembershipApplicationCreate, VolunteerApplicationCreate,
)
from diaspora_connect.services.referral_service import advance_referral

logger = logging.getLogger(__name__)

NEW_APPLICATION_NOTIFICATION = "new_membership_application"
APPLICATIONS_ADMIN_LINK = "/dashboard/admin/membership-applications"


def applicant_name(application: MembershipApplicationCreate) -> str:
    if application.type is MembershipApplicationType.INSTITUTIONAL:
        return application.organisation_name or "An organisation"
    return application.full_name or "An applicant"


class ApplicationService:

    def __init__(
        self,
        applications: MembershipApplicationRepository,
        notifications: NotificationRepository,
        referrals: ReferralRepository,
        users: UserRepository,
    ):
        self.applications = applications
        self.notifications = notifications
        self.referrals = referrals
        self.users = users

    def submit(self, user_id: str, application: MembershipApplicationCreate) -> dict:
        latest = self.applications.latest_for_user(user_id)
        if latest and latest.get("status") == ApplicationStatus.PENDING.value:
            raise ConflictError("You already have a pending membership application")

        record = self.applications.create(user_id, application.to_document())
        name = applicant_name(application)
        self.notifications.create(
            type=NEW_APPLICATION_NOTIFICATION,
            title="New membership application",
            message=f"{name} submitted a {application.type.value} membership application",
            link=APPLICATIONS_ADMIN_LINK,
        )
        advance_referral(self.referrals, user_id, ReferralStatus.APPLIED)
        logger.info(
            "Membership application submitted",
            extra={"user_id": user_id, "document_id": record["id"]},
        )
        return record

    def review(
        self,
        application_id: str,
        status: ApplicationStatus,
        reviewer_id: str,
        notes: str | None = None,
        *,
        membership_number: str | None = None,
        province_allocated: str | None = None,
    ) -> dict:
        application = self.applications.require(application_id)
        extra = {}
        if province_allocated:
            extra["provinceAllocated"] = province_allocated
        number = self._membership_number(application, status, membership_number)
        if number:
            extra["membershipNumber"] = number
        self.applications.review(application_id, status, reviewer_id, notes, extra)

        user_id = application.get("userId")
        if status is ApplicationStatus.APPROVED and user_id:
            profile = self.users.get(user_id)
            if profile and profile.get("role") == UserRole.SUPPORTER.value:
                self.users.set_role(user_id, UserRole.MEMBER)
        logger.info(
            f"Membership application {status.value}",
            extra={"user_id": reviewer_id, "document_id": application_id},
        )
        return self.applications.require(application_id)

    def _membership_number(
        self, application: dict, status: ApplicationStatus, requested: str | None,
    ) -> str | None:
        """Number to store on review, or None to leave the application as it is."""
        current = application.get("membershipNumber")
        if requested and requested != current:
            taken = any(
                a["membershipNumber"] == requested and a["id"] != application["id"]
                for a in self.applications.list_numbered()
            )
            if taken:
                raise ConflictError(f"Membership number {requested} is already assigned")
            return requested
        if current or status is not ApplicationStatus.APPROVED:
            return None
        return next_membership_number(self.applications.membership_numbers(), datetime.now(timezone.utc).year)


def submit_volunteer_application(
    volunteers: VolunteerApplicationRepository,
    user_id: str | None,
    application: VolunteerApplicationCreate,
) -> dict:
    if user_id:
        latest = volunteers.latest_for_user(user_id)
        if latest and latest.get("status") == VolunteerApplicationStatus.PENDING.value:
            raise ConflictError("You already have a pending volunteer application")
    return volunteers.create(user_id, application.to_document())
