"""Engagement Records: contacts, email logs, admin notifications and referrals."""

from diaspora_connect.core.domain_types import (
    EmailStatus, EmailType, ReferralStatus,
)
from diaspora_connect.repositories.base import FirestoreRepository, eq, utcnow


class ContactRepository(FirestoreRepository):
    collection_name = "contacts"
    resource_label = "Contact"

    def create(
        self, *, name: str, email: str, message: str, user_id: str | None = None,
    ) -> dict:
        return self._create({
            "name": name,
            "email": email,
            "message": message,
            "userId": user_id,
        })


class EmailLogRepository(FirestoreRepository):
    collection_name = "emailLogs"
    resource_label = "Email log"

    def create(
        self,
        *,
        to: str,
        subject: str,
        email_type: EmailType,
        name: str | None = None,
        status: EmailStatus,
        user_id: str | None = None,
        resend_id: str | None = None,
        error: str | None = None,
    ) -> dict:
        return self._create({
            "to": to,
            "name": name,
            "subject": subject,
            "type": email_type.value,
            "status": status.value,
            "userId": user_id,
            "resendId": resend_id,
            "error": error,
            "sentAt": utcnow(),
        })


class NotificationRepository(FirestoreRepository):
    collection_name = "notifications"
    resource_label = "Notification"

    def create(
        self, *, type: str, title: str, message: str, link: str | None = None,
    ) -> dict:
        return self._create({
            "type": type,
            "title": title,
            "message": message,
            "link": link,
            "read": False,
        })

    def list_unread(self, limit: int | None = None) -> list[dict]:
        return self._query(eq("read", False), order_by="createdAt", limit=limit)

    def mark_read(self, notification_id: str) -> None:
        self._update(notification_id, {"read": True, "readAt": utcnow()})


class ReferralRepository(FirestoreRepository):
    collection_name = "referrals"
    resource_label = "Referral"

    def create(
        self,
        *,
        referrer_id: str,
        referred_user_id: str,
        referred_email: str | None,
        referral_code: str,
    ) -> dict:
        return self._create({
            "referrerId": referrer_id,
            "referredUserId": referred_user_id,
            "referredEmail": referred_email,
            "referralCode": referral_code,
            "status": ReferralStatus.SIGNED_UP.value,
        })

    def list_by_referrer(self, referrer_id: str) -> list[dict]:
        return self._query(eq("referrerId", referrer_id), order_by="createdAt")

    def get_by_referred_user(self, user_id: str) -> dict | None:
        return self._first(eq("referredUserId", user_id))

    def update_status(self, referral_id: str, status: ReferralStatus) -> None:
        self._update(
            referral_id,
            {"status": status.value, f"{status.value}At": utcnow()},
            touch=True,
        )
