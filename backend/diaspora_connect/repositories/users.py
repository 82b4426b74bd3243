"""User Profiles: `users` collection keyed by Firebase uid.

Invariants:
    - Document id == uid; profiles store `uid` rather than `id`
    - New profiles default to tier `free` and role `supporter`
    - Profiles always carry a referralCode once created
"""

import logging

from diaspora_connect.core.domain_types import MembershipTier, UserRole
from diaspora_connect.core.referrals import generate_referral_code
from diaspora_connect.infrastructure.firestore import translate_errors
from diaspora_connect.repositories.base import FirestoreRepository, eq, utcnow

logger = logging.getLogger(__name__)


class UserRepository(FirestoreRepository):
    collection_name = "users"
    resource_label = "User"

    def create(
        self,
        uid: str,
        email: str | None,
        name: str | None = None,
        email_verified: bool = False,
        photo_url: str | None = None,
        referred_by: str | None = None,
    ) -> dict:
        profile = {
            "uid": uid,
            "email": email,
            "name": name or "",
            "membershipTier": MembershipTier.FREE.value,
            "role": UserRole.SUPPORTER.value,
            "emailVerified": email_verified,
            "photoURL": photo_url,
            "stripeCustomerId": None,
            "referralCode": generate_referral_code(),
            "referredBy": referred_by,
            "createdAt": utcnow(),
        }
        with translate_errors(self._op("create")):
            self.collection.document(uid).set(profile)
        logger.info("Created user profile", extra={"user_id": uid})
        return profile

    def get(self, uid: str) -> dict | None:
        doc = super().get(uid)
        if doc is not None:
            doc.pop("id", None)
            doc.setdefault("uid", uid)
        return doc

    def update_profile(self, uid: str, fields: dict) -> None:
        self._merge(uid, {**fields, "updatedAt": utcnow()})

    def set_stripe_customer_id(self, uid: str, customer_id: str) -> None:
        self._merge(uid, {"stripeCustomerId": customer_id})

    def set_tier(self, uid: str, tier: MembershipTier) -> None:
        self._merge(uid, {"membershipTier": tier.value, "updatedAt": utcnow()})
        logger.info(f"Membership tier set to {tier.value}", extra={"user_id": uid})

    def set_role(self, uid: str, role: UserRole) -> None:
        self._update(uid, {"role": role.value}, touch=True)
        logger.info(f"Role set to {role.value}", extra={"user_id": uid})

    def find_by_referral_code(self, code: str) -> dict | None:
        return self._first(eq("referralCode", code))

    def list_all(self, limit: int | None = None) -> list[dict]:
        users = super().list_all(limit)
        for user in users:
            user.pop("id", None)
        return users
