"""Applications: `membershipApplications` and `volunteerApplications` collections.

Invariants:
    - New applications start `pending`
    - Reviews record reviewer uid and reviewedAt alongside the new status
    - Membership numbers are stored on the application (membershipNumber)
"""

from diaspora_connect.core.domain_types import (
    ApplicationStatus, VolunteerApplicationStatus,
)
from diaspora_connect.repositories.base import FirestoreRepository, eq, utcnow


class _ReviewableRepository(FirestoreRepository):

    def create(self, user_id: str | None, fields: dict) -> dict:
        return self._create({
            **fields,
            "userId": user_id,
            "status": "pending",
        })

    def latest_for_user(self, user_id: str) -> dict | None:
        return self._first(eq("userId", user_id), order_by="createdAt")

    def list_by_status(self, status: str | None = None) -> list[dict]:
        if status:
            return self._query(eq("status", status), order_by="createdAt")
        return self._query(order_by="createdAt")

    def review(
        self,
        application_id: str,
        status: str,
        reviewer_id: str,
        notes: str | None = None,
        extra: dict | None = None,
    ) -> None:
        fields = {
            **(extra or {}),
            "status": status,
            "reviewedBy": reviewer_id,
            "reviewedAt": utcnow(),
        }
        if notes is not None:
            fields["notes"] = notes
        self._update(application_id, fields, touch=True)


class MembershipApplicationRepository(_ReviewableRepository):
    collection_name = "membershipApplications"
    resource_label = "Membership application"

    def review(
        self,
        application_id: str,
        status: ApplicationStatus,
        reviewer_id: str,
        notes: str | None = None,
        extra: dict | None = None,
    ) -> None:
        super().review(application_id, status.value, reviewer_id, notes, extra)

    def membership_numbers(self) -> list[str]:
        return [a["membershipNumber"] for a in self.list_numbered()]

    def list_numbered(self) -> list[dict]:
        """Applications holding a membership number, newest first."""
        return [a for a in self.list_all() if a.get("membershipNumber")]


class VolunteerApplicationRepository(_ReviewableRepository):
    collection_name = "volunteerApplications"
    resource_label = "Volunteer application"

    def review(
        self,
        application_id: str,
        status: VolunteerApplicationStatus,
        reviewer_id: str,
        notes: str | None = None,
    ) -> None:
        super().review(application_id, status.value, reviewer_id, notes)
