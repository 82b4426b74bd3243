"""Referral Progression: attribute signups and advance referral status."""

import logging

from diaspora_connect.core.domain_types import ReferralStatus
from diaspora_connect.core.referrals import next_referral_status
from diaspora_connect.repositories.engagement import ReferralRepository
from diaspora_connect.repositories.users import UserRepository

logger = logging.getLogger(__name__)


def attribute_signup(
    users: UserRepository,
    referrals: ReferralRepository,
    *,
    code: str,
    user_id: str,
    email: str | None,
) -> str | None:
    """Record a referral for a new user; returns the referrer uid or None."""
    referrer = users.find_by_referral_code(code)
    if referrer is None:
        logger.info(f"Unknown referral code {code}", extra={"user_id": user_id})
        return None
    referrer_id = referrer.get("uid") or referrer.get("id")
    if referrer_id == user_id:
        return None
    referrals.create(
        referrer_id=referrer_id,
        referred_user_id=user_id,
        referred_email=email,
        referral_code=code,
    )
    return referrer_id


def advance_referral(
    referrals: ReferralRepository, user_id: str, target: ReferralStatus,
) -> bool:
    """Move the referral for user_id forward to target; never regresses."""
    referral = referrals.get_by_referred_user(user_id)
    if referral is None:
        return False
    status = next_referral_status(referral.get("status"), target)
    if status is None:
        return False
    referrals.update_status(referral["id"], status)
    logger.info(
        f"Referral advanced to {status.value}",
        extra={"user_id": user_id, "document_id": referral["id"]},
    )
    return True
