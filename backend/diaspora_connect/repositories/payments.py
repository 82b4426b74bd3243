"""Payment Records: `donations` and `memberships` collections.

Invariants:
    - Amounts are stored in major units (dollars), currency lowercase
    - A payment intent id, or failing that a checkout session id, maps to at
      most one donation (webhook idempotency)
    - A subscription id maps to at most one membership
    - Per-user history is newest first
"""

from diaspora_connect.core.domain_types import PaymentStatus
from diaspora_connect.core.membership_cards import is_paid
from diaspora_connect.repositories.base import FirestoreRepository, eq, utcnow

USER_HISTORY_LIMIT = 50


class DonationRepository(FirestoreRepository):
    collection_name = "donations"
    resource_label = "Donation"

    def create(
        self,
        *,
        user_id: str | None,
        amount: float,
        status: PaymentStatus,
        currency: str = "usd",
        description: str | None = None,
        payment_intent_id: str | None = None,
        checkout_session_id: str | None = None,
        customer_email: str | None = None,
    ) -> dict:
        return self._create({
            "userId": user_id or None,
            "amount": amount,
            "currency": (currency or "usd").lower(),
            "status": status.value,
            "description": description or None,
            "stripePaymentIntentId": payment_intent_id,
            "stripeCheckoutSessionId": checkout_session_id,
            "customerEmail": customer_email,
        })

    def list_by_user(self, user_id: str, limit: int = USER_HISTORY_LIMIT) -> list[dict]:
        return self._query(eq("userId", user_id), order_by="createdAt", limit=limit)

    def find_by_payment_intent(self, payment_intent_id: str) -> dict | None:
        return self._first(eq("stripePaymentIntentId", payment_intent_id))

    def find_by_checkout_session(self, session_id: str) -> dict | None:
        return self._first(eq("stripeCheckoutSessionId", session_id))

    def update_status(self, donation_id: str, status: PaymentStatus) -> None:
        self._update(donation_id, {"status": status.value}, touch=True)


class MembershipRepository(FirestoreRepository):
    collection_name = "memberships"
    resource_label = "Membership"

    def create(
        self,
        *,
        user_id: str | None,
        tier: str,
        status: str,
        amount: float,
        currency: str = "usd",
        subscription_id: str | None = None,
        payment_intent_id: str | None = None,
        checkout_session_id: str | None = None,
        customer_id: str | None = None,
        start_date=None,
        end_date=None,
        cancel_at_period_end: bool = False,
    ) -> dict:
        return self._create({
            "userId": user_id or None,
            "tier": tier,
            "status": status,
            "amount": amount,
            "currency": (currency or "usd").lower(),
            "stripeSubscriptionId": subscription_id,
            "stripePaymentIntentId": payment_intent_id,
            "stripeCheckoutSessionId": checkout_session_id,
            "stripeCustomerId": customer_id,
            "startDate": start_date or utcnow(),
            "endDate": end_date,
            "cancelAtPeriodEnd": cancel_at_period_end,
        })

    def latest_for_user(self, user_id: str) -> dict | None:
        return self._first(eq("userId", user_id), order_by="startDate")

    def latest_paid_for_user(self, user_id: str) -> dict | None:
        """Most recent active (or trialing) membership, the one a membership card shows."""
        for membership in self._query(eq("userId", user_id), order_by="startDate"):
            if is_paid(membership):
                return membership
        return None

    def find_by_subscription(self, subscription_id: str) -> dict | None:
        return self._first(eq("stripeSubscriptionId", subscription_id))

    def find_by_payment_intent(self, payment_intent_id: str) -> dict | None:
        return self._first(eq("stripePaymentIntentId", payment_intent_id))

    def find_by_checkout_session(self, session_id: str) -> dict | None:
        return self._first(eq("stripeCheckoutSessionId", session_id))

    def update(self, membership_id: str, fields: dict) -> None:
        self._update(membership_id, fields, touch=True)
