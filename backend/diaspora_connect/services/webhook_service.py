"""Webhook Service: applies verified Stripe events to Firestore.

Invariants:
    - Every handler is idempotent: redelivered events never create a second
      donation (keyed by payment intent, else checkout session) or membership
      (keyed by subscription, payment intent or checkout session)
    - Only membership checkouts change a tier; a subscription-mode checkout
      tagged as a donation is recorded as a donation
    - Unknown event types are acknowledged and logged, never rejected
    - Handler failures propagate so the route answers non-2xx and Stripe retries
    - Tier changes follow the membership: paid checkout sets the purchased tier,
      a canceled subscription drops the user to `free`

Design Decisions:
    - Dispatch table keyed by event type (one method per event family)
    - Event payloads arrive as plain dicts (the gateway converts StripeObjects)
    - Period bounds read from the subscription, falling back to its first item
      (newer API versions only report them per item)
"""

import logging
from datetime import datetime, timezone

from diaspora_connect.core.domain_types import (
    CheckoutType, MembershipTier, PaymentStatus, ReferralStatus, SubscriptionStatus,
)
from diaspora_connect.core.payments import from_minor_units
from diaspora_connect.infrastructure.stripe_gateway import StripeGateway
from diaspora_connect.repositories.engagement import ReferralRepository
from diaspora_connect.repositories.payments import DonationRepository, MembershipRepository
from diaspora_connect.repositories.users import UserRepository
from diaspora_connect.services.referral_service import advance_referral

logger = logging.getLogger(__name__)

DEFAULT_TIER = MembershipTier.BASIC.value


def from_timestamp(value: int | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromtimestamp(value, tz=timezone.utc)


def subscription_period(subscription) -> tuple[datetime | None, datetime | None]:
    """(current_period_start, current_period_end) as UTC datetimes."""
    start = subscription.get("current_period_start")
    end = subscription.get("current_period_end")
    if start is None or end is None:
        items = (subscription.get("items") or {}).get("data") or []
        if items:
            start = start or items[0].get("current_period_start")
            end = end or items[0].get("current_period_end")
    return from_timestamp(start), from_timestamp(end)


def invoice_subscription_id(invoice) -> str | None:
    """Subscription id of an invoice, across old and new API shapes."""
    subscription = invoice.get("subscription")
    if subscription:
        return subscription if isinstance(subscription, str) else subscription.get("id")
    parent = invoice.get("parent") or {}
    details = parent.get("subscription_details") or {}
    return details.get("subscription")


def _tier_or_default(tier: str | None) -> MembershipTier:
    try:
        return MembershipTier(tier or DEFAULT_TIER)
    except ValueError:
        logger.warning(f"Unknown tier '{tier}' in checkout metadata, using {DEFAULT_TIER}")
        return MembershipTier(DEFAULT_TIER)


class WebhookService:
    """Dispatches Stripe events to their handlers."""

    def __init__(
        self,
        gateway: StripeGateway,
        users: UserRepository,
        donations: DonationRepository,
        memberships: MembershipRepository,
        referrals: ReferralRepository,
    ):
        self.gateway = gateway
        self.users = users
        self.donations = donations
        self.memberships = memberships
        self.referrals = referrals
        self._handlers = {
            "checkout.session.completed": self._checkout_completed,
            "payment_intent.succeeded": self._payment_intent_succeeded,
            "payment_intent.payment_failed": self._payment_intent_failed,
            "customer.subscription.updated": self._subscription_changed,
            "customer.subscription.deleted": self._subscription_changed,
            "invoice.payment_succeeded": self._invoice_paid,
            "invoice.payment_failed": self._invoice_failed,
        }

    def handle(self, event) -> bool:
        """Apply one event; returns False when the type is not handled."""
        event_type = event["type"]
        handler = self._handlers.get(event_type)
        if handler is None:
            logger.info(f"Unhandled event type: {event_type}", extra={"event_type": event_type})
            return False
        logger.info(
            "Processing Stripe event",
            extra={"event_type": event_type, "stripe_id": event.get("id")},
        )
        handler(event["data"]["object"])
        return True

    # ─── Checkout ───────────────────────────────────────────────

    def _checkout_completed(self, session) -> None:
        metadata = session.get("metadata") or {}
        user_id = metadata.get("userId") or None
        mode = session.get("mode")
        checkout_type = metadata.get("type")
        if mode == "subscription" and checkout_type != CheckoutType.DONATION.value:
            self._record_subscription(session, metadata, user_id)
        elif mode == "payment" and checkout_type == CheckoutType.MEMBERSHIP.value:
            self._record_one_time_membership(session, metadata, user_id)
        elif mode in ("payment", "subscription"):
            self._record_checkout_donation(session, metadata, user_id)
        else:
            logger.info(f"Ignoring checkout session in mode {mode}", extra={"stripe_id": session.get("id")})

    def _record_checkout_donation(self, session, metadata: dict, user_id: str | None) -> None:
        payment_intent_id = session.get("payment_intent")
        existing = (
            payment_intent_id and self.donations.find_by_payment_intent(payment_intent_id)
        ) or self.donations.find_by_checkout_session(session["id"])
        if existing:
            if existing.get("status") != PaymentStatus.SUCCEEDED.value:
                self.donations.update_status(existing["id"], PaymentStatus.SUCCEEDED)
            return
        details = session.get("customer_details") or {}
        self.donations.create(
            user_id=user_id,
            amount=from_minor_units(session.get("amount_total")),
            currency=session.get("currency") or "usd",
            status=PaymentStatus.SUCCEEDED,
            description=metadata.get("description"),
            payment_intent_id=payment_intent_id,
            checkout_session_id=session.get("id"),
            customer_email=details.get("email") or session.get("customer_email"),
        )
        if user_id:
            logger.info("Donation recorded", extra={"user_id": user_id})

    def _record_one_time_membership(self, session, metadata: dict, user_id: str | None) -> None:
        payment_intent_id = session.get("payment_intent")
        if payment_intent_id and self.memberships.find_by_payment_intent(payment_intent_id):
            return
        if self.memberships.find_by_checkout_session(session["id"]):
            return
        tier = _tier_or_default(metadata.get("tier"))
        self.memberships.create(
            user_id=user_id,
            tier=tier.value,
            status=SubscriptionStatus.ACTIVE.value,
            amount=from_minor_units(session.get("amount_total")),
            currency=session.get("currency") or "usd",
            payment_intent_id=payment_intent_id,
            checkout_session_id=session["id"],
            customer_id=session.get("customer"),
        )
        self._activate_tier(user_id, tier)

    def _record_subscription(self, session, metadata: dict, user_id: str | None) -> None:
        subscription_id = session.get("subscription")
        if not subscription_id:
            logger.warning("Subscription checkout without subscription id", extra={"stripe_id": session.get("id")})
            return
        if self.memberships.find_by_subscription(subscription_id):
            return
        subscription = self.gateway.retrieve_subscription(subscription_id)
        start, end = subscription_period(subscription)
        tier = _tier_or_default(metadata.get("tier"))
        self.memberships.create(
            user_id=user_id,
            tier=tier.value,
            status=subscription.get("status") or SubscriptionStatus.ACTIVE.value,
            amount=from_minor_units(session.get("amount_total")),
            currency=session.get("currency") or "usd",
            subscription_id=subscription["id"],
            customer_id=session.get("customer"),
            start_date=start,
            end_date=end,
            cancel_at_period_end=bool(subscription.get("cancel_at_period_end")),
        )
        self._activate_tier(user_id, tier)

    def _activate_tier(self, user_id: str | None, tier: MembershipTier) -> None:
        if not user_id:
            return
        self.users.set_tier(user_id, tier)
        advance_referral(self.referrals, user_id, ReferralStatus.PAID)

    # ─── Payment intents ────────────────────────────────────────

    def _payment_intent_succeeded(self, intent) -> None:
        metadata = intent.get("metadata") or {}
        if metadata.get("type") != CheckoutType.DONATION.value:
            logger.info(f"Payment succeeded: {intent['id']}", extra={"stripe_id": intent["id"]})
            return
        existing = self.donations.find_by_payment_intent(intent["id"])
        if existing:
            if existing.get("status") != PaymentStatus.SUCCEEDED.value:
                self.donations.update_status(existing["id"], PaymentStatus.SUCCEEDED)
            return
        self.donations.create(
            user_id=metadata.get("userId") or None,
            amount=from_minor_units(intent.get("amount_received") or intent.get("amount")),
            currency=intent.get("currency") or "usd",
            status=PaymentStatus.SUCCEEDED,
            description=metadata.get("description"),
            payment_intent_id=intent["id"],
            customer_email=intent.get("receipt_email"),
        )

    def _payment_intent_failed(self, intent) -> None:
        donation = self.donations.find_by_payment_intent(intent["id"])
        if donation is None:
            logger.info(f"Payment failed: {intent['id']}", extra={"stripe_id": intent["id"]})
            return
        self.donations.update_status(donation["id"], PaymentStatus.FAILED)

    # ─── Subscriptions / invoices ───────────────────────────────

    def _subscription_changed(self, subscription) -> None:
        membership = self.memberships.find_by_subscription(subscription["id"])
        if membership is None:
            logger.info(
                "No membership for subscription", extra={"stripe_id": subscription["id"]},
            )
            return
        status = subscription.get("status")
        fields = {
            "status": status,
            "cancelAtPeriodEnd": bool(subscription.get("cancel_at_period_end")),
        }
        _, end = subscription_period(subscription)
        if end:
            fields["endDate"] = end
        self.memberships.update(membership["id"], fields)

        user_id = membership.get("userId")
        if status == SubscriptionStatus.CANCELED.value and user_id:
            self.users.set_tier(user_id, MembershipTier.FREE)

    def _invoice_paid(self, invoice) -> None:
        self._set_membership_status(invoice, SubscriptionStatus.ACTIVE)

    def _invoice_failed(self, invoice) -> None:
        self._set_membership_status(invoice, SubscriptionStatus.PAST_DUE)

    def _set_membership_status(self, invoice, status: SubscriptionStatus) -> None:
        subscription_id = invoice_subscription_id(invoice)
        if not subscription_id:
            return
        membership = self.memberships.find_by_subscription(subscription_id)
        if membership:
            self.memberships.update(membership["id"], {"status": status.value})
