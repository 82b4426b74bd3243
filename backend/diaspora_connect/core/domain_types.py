"""Domain Types: enums and rankings shared by every layer.

Invariants:
    - Enum values match the strings stored in Firestore documents
    - ROLE_RANK and TIER_RANK are total orders; unknown values rank lowest
    - REFERRAL_RANK only moves forward (see core/referrals.py)
"""

from enum import Enum
from typing import NewType

UserId = NewType("UserId", str)
DocumentId = NewType("DocumentId", str)


class UserRole(str, Enum):
    SUPPORTER = "supporter"
    MEMBER = "member"
    MODERATOR = "moderator"
    ADMIN = "admin"


class MembershipTier(str, Enum):
    FREE = "free"
    BASIC = "basic"
    PREMIUM = "premium"
    CHAMPION = "champion"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    CANCELED = "canceled"
    PAST_DUE = "past_due"
    TRIALING = "trialing"
    INCOMPLETE = "incomplete"


class CheckoutType(str, Enum):
    DONATION = "donation"
    MEMBERSHIP = "membership"


class MembershipApplicationType(str, Enum):
    INDIVIDUAL = "individual"
    INSTITUTIONAL = "institutional"


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class VolunteerApplicationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


class ReferralStatus(str, Enum):
    SIGNED_UP = "signed_up"
    APPLIED = "applied"
    PAID = "paid"


class EmailType(str, Enum):
    WELCOME = "welcome"
    CUSTOM = "custom"


class EmailStatus(str, Enum):
    SENT = "sent"
    FAILED = "failed"


class NewsCategory(str, Enum):
    ANNOUNCEMENT = "announcement"
    EVENT = "event"
    UPDATE = "update"
    GENERAL = "general"


ROLE_RANK: dict[UserRole, int] = {
    UserRole.SUPPORTER: 0,
    UserRole.MEMBER: 1,
    UserRole.MODERATOR: 2,
    UserRole.ADMIN: 3,
}

TIER_RANK: dict[MembershipTier, int] = {
    MembershipTier.FREE: 0,
    MembershipTier.BASIC: 1,
    MembershipTier.PREMIUM: 2,
    MembershipTier.CHAMPION: 3,
}

REFERRAL_RANK: dict[ReferralStatus, int] = {
    ReferralStatus.SIGNED_UP: 0,
    ReferralStatus.APPLIED: 1,
    ReferralStatus.PAID: 2,
}

PAID_TIERS = (MembershipTier.BASIC, MembershipTier.PREMIUM, MembershipTier.CHAMPION)
