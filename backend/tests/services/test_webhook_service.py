"""Webhook Service — Stripe event handling against the in-memory Firestore.

Invariants:
    - Redelivered events never create duplicate donations or memberships,
      even when the session has no payment intent
    - A subscription-mode checkout tagged as a donation never grants a tier
    - Paid membership checkout sets the purchased tier and marks the referral paid
    - A canceled subscription drops the user to `free`
    - Unknown event types are acknowledged (handle() returns False)

Design Decisions:
    - Events are plain dicts, the shape StripeGateway.construct_event returns;
      the signed-payload tests run real SDK verification to produce them
    - StripeGateway mocked with spec: only retrieve_subscription is exercised
"""

import hashlib
import hmac
import json
import time
from unittest.mock import MagicMock, patch

import pytest
import stripe

from diaspora_connect.infrastructure.stripe_gateway import StripeGateway
from diaspora_connect.repositories.engagement import ReferralRepository
from diaspora_connect.repositories.payments import DonationRepository, MembershipRepository
from diaspora_connect.repositories.users import UserRepository
from diaspora_connect.services.webhook_service import (
    WebhookService,
    invoice_subscription_id,
    subscription_period,
)

PERIOD_START = 1767225600  # 2026-01-01T00:00:00Z
PERIOD_END = 1769904000  # 2026-02-01T00:00:00Z


def _event(event_type, obj):
    return {"id": "evt_1", "type": event_type, "data": {"object": obj}}


@pytest.fixture
def gateway():
    gateway = MagicMock(spec=StripeGateway)
    gateway.retrieve_subscription.return_value = {
        "id": "sub_1",
        "status": "active",
        "cancel_at_period_end": False,
        "current_period_start": PERIOD_START,
        "current_period_end": PERIOD_END,
    }
    return gateway


@pytest.fixture
def service(seed_users, gateway):
    db = seed_users
    return WebhookService(
        gateway,
        UserRepository(db),
        DonationRepository(db),
        MembershipRepository(db),
        ReferralRepository(db),
    )


def _donation_session(**overrides):
    session = {
        "id": "cs_1",
        "mode": "payment",
        "payment_intent": "pi_1",
        "amount_total": 2500,
        "currency": "usd",
        "customer_details": {"email": "tendai@dc.test"},
        "metadata": {"userId": "user-1", "type": "donation", "description": "Gift"},
    }
    session.update(overrides)
    return session


# ─── checkout.session.completed: donations ───────────────────────

def test_checkout_donation_recorded(service, fake_db):
    assert service.handle(_event("checkout.session.completed", _donation_session()))

    [donation] = fake_db.docs("donations")
    assert donation["amount"] == 25.0
    assert donation["status"] == "succeeded"
    assert donation["userId"] == "user-1"
    assert donation["description"] == "Gift"
    assert donation["stripeCheckoutSessionId"] == "cs_1"
    assert donation["customerEmail"] == "tendai@dc.test"


def test_checkout_donation_is_idempotent(service, fake_db):
    event = _event("checkout.session.completed", _donation_session())
    service.handle(event)
    service.handle(event)
    assert len(fake_db.docs("donations")) == 1


def test_checkout_completes_pending_donation(service, fake_db):
    fake_db.seed("donations", "d1", {
        "stripePaymentIntentId": "pi_1", "status": "pending", "amount": 25.0,
    })
    service.handle(_event("checkout.session.completed", _donation_session()))

    assert len(fake_db.docs("donations")) == 1
    assert fake_db.doc("donations", "d1")["status"] == "succeeded"


def test_guest_donation_has_no_user(service, fake_db):
    session = _donation_session(metadata={"userId": "", "type": "donation"})
    service.handle(_event("checkout.session.completed", session))
    assert fake_db.docs("donations")[0]["userId"] is None


def test_donation_without_payment_intent_deduplicated_by_session(service, fake_db):
    event = _event("checkout.session.completed", _donation_session(payment_intent=None))
    service.handle(event)
    service.handle(event)

    [donation] = fake_db.docs("donations")
    assert donation["stripePaymentIntentId"] is None
    assert donation["stripeCheckoutSessionId"] == "cs_1"


def test_recurring_donation_checkout_is_not_a_membership(service, fake_db, gateway):
    fake_db.seed("referrals", "r1", {
        "referrerId": "admin-1", "referredUserId": "user-1", "status": "signed_up",
    })
    session = _donation_session(
        id="cs_r1", mode="subscription", subscription="sub_d1", payment_intent=None,
        amount_total=1000,
    )
    event = _event("checkout.session.completed", session)
    service.handle(event)
    service.handle(event)

    [donation] = fake_db.docs("donations")
    assert donation["amount"] == 10.0
    assert donation["status"] == "succeeded"
    assert fake_db.docs("memberships") == []
    assert fake_db.doc("users", "user-1")["membershipTier"] == "free"
    assert fake_db.doc("referrals", "r1")["status"] == "signed_up"
    gateway.retrieve_subscription.assert_not_called()


# ─── checkout.session.completed: memberships ─────────────────────

def test_one_time_membership_sets_tier(service, fake_db):
    fake_db.seed("referrals", "r1", {
        "referrerId": "admin-1", "referredUserId": "user-1", "status": "applied",
    })
    session = _donation_session(
        payment_intent="pi_m1", amount_total=2500,
        metadata={"userId": "user-1", "type": "membership", "tier": "premium"},
    )
    service.handle(_event("checkout.session.completed", session))

    [membership] = fake_db.docs("memberships")
    assert membership["tier"] == "premium"
    assert membership["status"] == "active"
    assert membership["stripePaymentIntentId"] == "pi_m1"
    assert fake_db.doc("users", "user-1")["membershipTier"] == "premium"
    assert fake_db.doc("referrals", "r1")["status"] == "paid"
    assert fake_db.docs("donations") == []


def test_subscription_checkout_records_period(service, fake_db, gateway):
    session = {
        "id": "cs_2",
        "mode": "subscription",
        "subscription": "sub_1",
        "customer": "cus_1",
        "amount_total": 1000,
        "currency": "usd",
        "metadata": {"userId": "user-1", "type": "membership", "tier": "basic"},
    }
    event = _event("checkout.session.completed", session)
    service.handle(event)
    service.handle(event)

    [membership] = fake_db.docs("memberships")
    assert membership["stripeSubscriptionId"] == "sub_1"
    assert membership["stripeCustomerId"] == "cus_1"
    assert membership["startDate"].year == 2026
    assert membership["endDate"].month == 2
    assert fake_db.doc("users", "user-1")["membershipTier"] == "basic"
    gateway.retrieve_subscription.assert_called_once_with("sub_1")


def test_one_time_membership_without_payment_intent_is_idempotent(service, fake_db):
    session = _donation_session(
        payment_intent=None,
        metadata={"userId": "user-1", "type": "membership", "tier": "champion"},
    )
    event = _event("checkout.session.completed", session)
    service.handle(event)
    service.handle(event)

    [membership] = fake_db.docs("memberships")
    assert membership["stripeCheckoutSessionId"] == "cs_1"
    assert membership["tier"] == "champion"


def test_unknown_tier_falls_back_to_basic(service, fake_db):
    session = _donation_session(
        payment_intent="pi_m2",
        metadata={"userId": "user-1", "type": "membership", "tier": "gold"},
    )
    service.handle(_event("checkout.session.completed", session))
    assert fake_db.docs("memberships")[0]["tier"] == "basic"


# ─── payment_intent.* ────────────────────────────────────────────

def test_payment_intent_donation_recorded_once(service, fake_db):
    intent = {
        "id": "pi_9", "amount": 1500, "amount_received": 1500, "currency": "usd",
        "receipt_email": "g@dc.test",
        "metadata": {"userId": "", "type": "donation", "description": ""},
    }
    service.handle(_event("payment_intent.succeeded", intent))
    service.handle(_event("payment_intent.succeeded", intent))

    [donation] = fake_db.docs("donations")
    assert donation["amount"] == 15.0
    assert donation["customerEmail"] == "g@dc.test"


def test_payment_intent_non_donation_ignored(service, fake_db):
    intent = {"id": "pi_10", "amount": 500, "metadata": {"type": "merch"}}
    service.handle(_event("payment_intent.succeeded", intent))
    assert fake_db.docs("donations") == []


def test_payment_failed_marks_donation(service, fake_db):
    fake_db.seed("donations", "d1", {"stripePaymentIntentId": "pi_1", "status": "pending"})
    service.handle(_event("payment_intent.payment_failed", {"id": "pi_1"}))
    assert fake_db.doc("donations", "d1")["status"] == "failed"


# ─── Subscriptions / invoices ────────────────────────────────────

def _seed_membership(fake_db):
    fake_db.seed("memberships", "m1", {
        "userId": "user-1", "tier": "basic", "status": "active",
        "stripeSubscriptionId": "sub_1",
    })
    fake_db.data["users"]["user-1"]["membershipTier"] = "basic"


def test_subscription_updated(service, fake_db):
    _seed_membership(fake_db)
    subscription = {
        "id": "sub_1", "status": "active", "cancel_at_period_end": True,
        "items": {"data": [{"current_period_start": PERIOD_START, "current_period_end": PERIOD_END}]},
    }
    service.handle(_event("customer.subscription.updated", subscription))

    membership = fake_db.doc("memberships", "m1")
    assert membership["cancelAtPeriodEnd"] is True
    assert membership["endDate"].month == 2
    assert fake_db.doc("users", "user-1")["membershipTier"] == "basic"


def test_subscription_deleted_downgrades_user(service, fake_db):
    _seed_membership(fake_db)
    service.handle(_event("customer.subscription.deleted", {"id": "sub_1", "status": "canceled"}))

    assert fake_db.doc("memberships", "m1")["status"] == "canceled"
    assert fake_db.doc("users", "user-1")["membershipTier"] == "free"


def test_invoice_failed_and_paid(service, fake_db):
    _seed_membership(fake_db)
    service.handle(_event("invoice.payment_failed", {"id": "in_1", "subscription": "sub_1"}))
    assert fake_db.doc("memberships", "m1")["status"] == "past_due"

    invoice = {"id": "in_2", "parent": {"subscription_details": {"subscription": "sub_1"}}}
    service.handle(_event("invoice.payment_succeeded", invoice))
    assert fake_db.doc("memberships", "m1")["status"] == "active"


def test_unhandled_event_type(service):
    assert service.handle(_event("customer.created", {"id": "cus_1"})) is False


# ─── Helpers ─────────────────────────────────────────────────────

def test_subscription_period_prefers_top_level():
    start, end = subscription_period({
        "current_period_start": PERIOD_START, "current_period_end": PERIOD_END,
    })
    assert start.isoformat() == "2026-01-01T00:00:00+00:00"
    assert end.isoformat() == "2026-02-01T00:00:00+00:00"


def test_subscription_period_missing():
    assert subscription_period({}) == (None, None)


def test_invoice_subscription_id_shapes():
    assert invoice_subscription_id({"subscription": "sub_1"}) == "sub_1"
    assert invoice_subscription_id({"subscription": {"id": "sub_2"}}) == "sub_2"
    assert invoice_subscription_id({}) is None


# ─── Signed payloads through the real gateway ────────────────────

WEBHOOK_SECRET = "whsec_e2e"


def _signed(event: dict) -> tuple[bytes, str]:
    payload = json.dumps(event).encode()
    timestamp = int(time.time())
    digest = hmac.new(
        WEBHOOK_SECRET.encode(), f"{timestamp}.".encode() + payload, hashlib.sha256,
    ).hexdigest()
    return payload, f"t={timestamp},v1={digest}"


@pytest.fixture
def live_service(seed_users):
    db = seed_users
    return WebhookService(
        StripeGateway("sk_test_123", WEBHOOK_SECRET),
        UserRepository(db),
        DonationRepository(db),
        MembershipRepository(db),
        ReferralRepository(db),
    )


def test_signed_recurring_donation_recorded_as_donation(live_service, fake_db):
    session = _donation_session(
        id="cs_live", object="checkout.session", mode="subscription",
        subscription="sub_live", payment_intent=None, amount_total=1500,
    )
    payload, header = _signed({
        "id": "evt_live", "object": "event", "type": "checkout.session.completed",
        "data": {"object": session},
    })

    event = live_service.gateway.construct_event(payload, header)
    assert live_service.handle(event)

    [donation] = fake_db.docs("donations")
    assert donation["amount"] == 15.0
    assert donation["stripeCheckoutSessionId"] == "cs_live"
    assert fake_db.docs("memberships") == []
    assert fake_db.doc("users", "user-1")["membershipTier"] == "free"


def test_signed_membership_subscription_with_sdk_subscription(live_service, fake_db):
    session = {
        "id": "cs_sub", "object": "checkout.session", "mode": "subscription",
        "subscription": "sub_live", "customer": "cus_1", "amount_total": 2500,
        "currency": "usd",
        "metadata": {"userId": "user-1", "type": "membership", "tier": "premium"},
    }
    payload, header = _signed({
        "id": "evt_sub", "object": "event", "type": "checkout.session.completed",
        "data": {"object": session},
    })
    subscription = stripe.Subscription.construct_from({
        "id": "sub_live", "object": "subscription", "status": "active",
        "cancel_at_period_end": False,
        "items": {"object": "list", "data": [{
            "id": "si_1", "object": "subscription_item",
            "current_period_start": PERIOD_START, "current_period_end": PERIOD_END,
        }]},
    }, "sk_test_123")

    with patch.object(stripe.Subscription, "retrieve", return_value=subscription):
        live_service.handle(live_service.gateway.construct_event(payload, header))

    [membership] = fake_db.docs("memberships")
    assert membership["tier"] == "premium"
    assert membership["stripeSubscriptionId"] == "sub_live"
    assert membership["endDate"].month == 2
    assert fake_db.doc("users", "user-1")["membershipTier"] == "premium"
