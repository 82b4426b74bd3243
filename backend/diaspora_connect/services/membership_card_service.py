"""Membership Card Service: admin card register and the member's own card."""

import logging

from diaspora_connect.core.domain_types import ApplicationStatus
from diaspora_connect.core.membership_cards import (
    build_card, build_cards, card_viewable, filter_cards, is_paid,
)
from diaspora_connect.repositories.applications import MembershipApplicationRepository
from diaspora_connect.repositories.payments import MembershipRepository
from diaspora_connect.repositories.users import UserRepository

logger = logging.getLogger(__name__)


def list_membership_cards(
    applications: MembershipApplicationRepository,
    users: UserRepository,
    memberships: MembershipRepository,
    *,
    payment_status: str | None = None,
    search: str | None = None,
) -> dict:
    """Cards for every numbered application plus paid/unpaid counts (before filtering)."""
    profiles = {u["uid"]: u for u in users.list_all() if u.get("uid")}
    cards = build_cards(applications.list_numbered(), profiles, memberships.list_all())
    paid = sum(1 for c in cards if c["paymentStatus"] == "paid")
    return {
        "summary": {"total": len(cards), "paid": paid, "unpaid": len(cards) - paid},
        "cards": filter_cards(cards, payment_status, search),
    }


def get_own_card(
    user_id: str,
    applications: MembershipApplicationRepository,
    users: UserRepository,
    memberships: MembershipRepository,
) -> dict:
    """The caller's card, shown only once paid, approved and numbered.

    requirements tells the client which of the three conditions are still missing.
    """
    application = applications.latest_for_user(user_id)
    membership = memberships.latest_paid_for_user(user_id)
    requirements = {
        "paid": is_paid(membership),
        "approved": bool(application) and application.get("status") == ApplicationStatus.APPROVED.value,
        "numbered": bool(application) and bool(application.get("membershipNumber")),
    }
    card = None
    if application and requirements["numbered"]:
        card = build_card(application, users.get(user_id), membership)
    viewable = card is not None and card_viewable(card)
    if not viewable:
        logger.info("Membership card not yet available", extra={"user_id": user_id})
    return {
        "viewable": viewable,
        "requirements": requirements,
        "card": card if viewable else None,
    }
