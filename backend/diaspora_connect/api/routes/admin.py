"""Admin Dashboard: users, payments, membership cards, messages, referrals, newsletter,
notifications and catalog seeding.

Invariants:
    - Every endpoint requires role `admin`
    - Admins cannot change their own role (no self-demotion lockout)
"""

import logging
from typing import Literal

from fastapi import APIRouter, Depends, Query, status

from diaspora_connect.api.dependencies import (
    get_email_client, repository, require_admin,
)
from diaspora_connect.config import Settings, get_settings
from diaspora_connect.core.errors import InvalidRequestError
from diaspora_connect.core.payments import summarize_donations
from diaspora_connect.infrastructure.email_client import ResendEmailClient
from diaspora_connect.repositories.applications import MembershipApplicationRepository
from diaspora_connect.repositories.content import ArticleViewRepository, ProductRepository
from diaspora_connect.repositories.engagement import (
    ContactRepository, EmailLogRepository, NotificationRepository, ReferralRepository,
)
from diaspora_connect.repositories.payments import DonationRepository, MembershipRepository
from diaspora_connect.repositories.site_content import NewsletterRepository
from diaspora_connect.repositories.users import UserRepository
from diaspora_connect.schemas.admin import DonationsOverview, ProductUploadResponse
from diaspora_connect.schemas.messaging import CustomEmailRequest
from diaspora_connect.schemas.users import RoleUpdate, UserProfile
from diaspora_connect.services.catalog_service import upload_sample_products
from diaspora_connect.services.email_service import EmailService
from diaspora_connect.services.membership_card_service import list_membership_cards

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/users", response_model=list[UserProfile])
def list_users(
    _admin: dict = Depends(require_admin),
    users: UserRepository = Depends(repository(UserRepository)),
):
    return users.list_all()


@router.patch("/users/{uid}/role", response_model=UserProfile)
def update_user_role(
    uid: str,
    body: RoleUpdate,
    admin: dict = Depends(require_admin),
    users: UserRepository = Depends(repository(UserRepository)),
):
    if uid == admin["uid"]:
        raise InvalidRequestError("You cannot change your own role", field="role")
    users.set_role(uid, body.role)
    return users.require(uid)


@router.get("/donations", response_model=DonationsOverview)
def list_donations(
    limit: int | None = Query(None, ge=1, le=1000),
    _admin: dict = Depends(require_admin),
    donations: DonationRepository = Depends(repository(DonationRepository)),
):
    records = donations.list_all(limit)
    return {"summary": summarize_donations(records), "donations": records}


@router.get("/memberships")
def list_memberships(
    _admin: dict = Depends(require_admin),
    memberships: MembershipRepository = Depends(repository(MembershipRepository)),
):
    return {"memberships": memberships.list_all()}


@router.get("/membership-cards")
def list_cards(
    payment_status: Literal["paid", "unpaid"] | None = Query(None, alias="paymentStatus"),
    search: str | None = Query(None, max_length=200),
    _admin: dict = Depends(require_admin),
    applications: MembershipApplicationRepository = Depends(
        repository(MembershipApplicationRepository),
    ),
    users: UserRepository = Depends(repository(UserRepository)),
    memberships: MembershipRepository = Depends(repository(MembershipRepository)),
):
    return list_membership_cards(
        applications, users, memberships, payment_status=payment_status, search=search,
    )


@router.get("/contacts")
def list_contacts(
    _admin: dict = Depends(require_admin),
    contacts: ContactRepository = Depends(repository(ContactRepository)),
):
    return {"contacts": contacts.list_all()}


@router.get("/emails")
def list_email_logs(
    _admin: dict = Depends(require_admin),
    logs: EmailLogRepository = Depends(repository(EmailLogRepository)),
):
    return {"emails": logs.list_all()}


@router.post("/emails", status_code=status.HTTP_201_CREATED)
def send_custom_email(
    body: CustomEmailRequest,
    _admin: dict = Depends(require_admin),
    client: ResendEmailClient = Depends(get_email_client),
    logs: EmailLogRepository = Depends(repository(EmailLogRepository)),
    settings: Settings = Depends(get_settings),
):
    email_id = EmailService(client, logs, settings).send_custom(
        to=body.to,
        subject=body.subject,
        body=body.body,
        name=body.name,
        user_id=body.user_id,
    )
    return {"success": True, "emailId": email_id}


@router.get("/newsletter-subscriptions")
def list_newsletter_subscriptions(
    _admin: dict = Depends(require_admin),
    subscriptions: NewsletterRepository = Depends(repository(NewsletterRepository)),
):
    return {"subscriptions": subscriptions.list_all()}


@router.get("/referrals")
def list_referrals(
    _admin: dict = Depends(require_admin),
    referrals: ReferralRepository = Depends(repository(ReferralRepository)),
):
    return {"referrals": referrals.list_all()}


@router.get("/article-views")
def list_article_views(
    limit: int = Query(10, ge=1, le=100),
    _admin: dict = Depends(require_admin),
    views: ArticleViewRepository = Depends(repository(ArticleViewRepository)),
):
    return {"articles": views.top(limit)}


@router.get("/notifications")
def list_notifications(
    unread: bool = False,
    _admin: dict = Depends(require_admin),
    notifications: NotificationRepository = Depends(repository(NotificationRepository)),
):
    records = notifications.list_unread() if unread else notifications.list_all()
    return {"notifications": records}


@router.post("/notifications/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
def mark_notification_read(
    notification_id: str,
    _admin: dict = Depends(require_admin),
    notifications: NotificationRepository = Depends(repository(NotificationRepository)),
):
    notifications.mark_read(notification_id)


@router.post("/upload-products", response_model=ProductUploadResponse)
def upload_products(
    _admin: dict = Depends(require_admin),
    products: ProductRepository = Depends(repository(ProductRepository)),
):
    """Seed the store with the sample catalog."""
    result = upload_sample_products(products)
    logger.info(result["message"])
    return result
