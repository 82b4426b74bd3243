"""Membership Cards: membership numbers and the card shown to approved, paid members.

Invariants:
    - Membership numbers look like DCP-<year>-<NNN>; the sequence continues from the
      highest number already issued, whatever its year
    - An application keeps the number it already has
    - A card exists only for an application with both a userId and a membership number
    - Only a card that is paid, approved and numbered is viewable by its member
    - Expiry is one year after the payment date (29 Feb rolls back to 28 Feb)
"""

import re
from collections.abc import Iterable
from datetime import datetime

from diaspora_connect.core.domain_types import (
    ApplicationStatus, MembershipApplicationType, MembershipTier, SubscriptionStatus,
)

MEMBERSHIP_NUMBER_PREFIX = "DCP"
PENDING_PAYMENT = "Pending Payment"
UNKNOWN_MEMBER = "Unknown"

_NUMBER = re.compile(r"DCP-\d{4}-(\d+)")

PAID_STATUSES = (SubscriptionStatus.ACTIVE.value, SubscriptionStatus.TRIALING.value)


def next_membership_number(existing: Iterable[str | None], year: int) -> str:
    """Next number in the sequence: highest issued + 1, zero-padded to 3 digits."""
    highest = 0
    for number in existing:
        match = _NUMBER.search(number or "")
        if match:
            highest = max(highest, int(match.group(1)))
    return f"{MEMBERSHIP_NUMBER_PREFIX}-{year}-{highest + 1:03d}"


def add_one_year(value: datetime) -> datetime:
    try:
        return value.replace(year=value.year + 1)
    except ValueError:
        return value.replace(year=value.year + 1, day=28)


def is_paid(membership: dict | None) -> bool:
    return bool(membership) and membership.get("status") in PAID_STATUSES


def latest_paid_by_user(memberships: Iterable[dict]) -> dict[str, dict]:
    """userId -> first paid membership seen (pass memberships newest first)."""
    by_user: dict[str, dict] = {}
    for membership in memberships:
        user_id = membership.get("userId")
        if user_id and is_paid(membership) and user_id not in by_user:
            by_user[user_id] = membership
    return by_user


def _is_individual(application: dict) -> bool:
    return application.get("type") != MembershipApplicationType.INSTITUTIONAL.value


def member_name(application: dict, user: dict | None) -> str:
    own = application.get("fullName") if _is_individual(application) else application.get("organisationName")
    return own or (user or {}).get("name") or UNKNOWN_MEMBER


def card_province(application: dict) -> str | None:
    if application.get("provinceAllocated"):
        return application["provinceAllocated"]
    if _is_individual(application):
        return application.get("province")
    return ", ".join(application.get("provincesOfOperation") or []) or None


def build_card(application: dict, user: dict | None, membership: dict | None) -> dict:
    """Card data for one numbered application.

    membership is the member's most recent paid membership, or None.
    """
    user = user or {}
    paid_at = None
    if is_paid(membership):
        paid_at = membership.get("startDate") or membership.get("createdAt")
    else:
        membership = None
    return {
        "userId": application.get("userId"),
        "applicationId": application.get("id"),
        "memberName": member_name(application, user),
        "membershipNumber": application.get("membershipNumber"),
        "province": card_province(application),
        "dateJoined": paid_at or application.get("createdAt"),
        "expiryDate": add_one_year(paid_at) if paid_at else PENDING_PAYMENT,
        "photoURL": user.get("photoURL"),
        "email": (
            user.get("email")
            or application.get("emailAddress")
            or application.get("representativeEmail")
        ),
        "tier": (membership or {}).get("tier") or MembershipTier.FREE.value,
        "paymentStatus": "paid" if membership else "unpaid",
        "applicationStatus": application.get("status"),
    }


def build_cards(
    applications: Iterable[dict], users: dict[str, dict], memberships: Iterable[dict],
) -> list[dict]:
    paid = latest_paid_by_user(memberships)
    return [
        build_card(app, users.get(app["userId"]), paid.get(app["userId"]))
        for app in applications
        if app.get("userId") and app.get("membershipNumber")
    ]


def card_viewable(card: dict) -> bool:
    return (
        card["paymentStatus"] == "paid"
        and card["applicationStatus"] == ApplicationStatus.APPROVED.value
        and bool(card["membershipNumber"])
    )


def filter_cards(
    cards: list[dict], payment_status: str | None = None, search: str | None = None,
) -> list[dict]:
    """Filter by paid/unpaid and a case-insensitive match on name, number, email or province."""
    query = (search or "").strip().lower()
    results = []
    for card in cards:
        if payment_status and card["paymentStatus"] != payment_status:
            continue
        if query and not any(
            query in (card.get(key) or "").lower()
            for key in ("memberName", "membershipNumber", "email", "province")
        ):
            continue
        results.append(card)
    return results
