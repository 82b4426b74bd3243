"""Stripe Gateway — tests for SDK pass-through, customer dedup and error mapping.

Tests cover:
    - api_key is passed per call
    - find_or_create_customer reuses an existing customer by email
    - create_customer falls back to lookup on resource_already_exists
    - StripeError maps to PaymentProviderError; missing key to ServiceNotConfiguredError
    - construct_event maps payload/signature failures to WebhookSignatureError
    - StripeObject results (lists, sessions, verified events) come back as plain dicts

Design Decisions:
    - stripe resources patched with unittest.mock: no network
    - SDK return values built with construct_from, the way the SDK builds API responses
    - Webhook payloads signed with the real v1 HMAC scheme
"""

import hashlib
import hmac
import json
import time
from unittest.mock import patch

import pytest
import stripe

from diaspora_connect.core.errors import (
    PaymentProviderError,
    ServiceNotConfiguredError,
    WebhookSignatureError,
)
from diaspora_connect.infrastructure.stripe_gateway import StripeGateway


@pytest.fixture
def gateway():
    return StripeGateway("sk_test_123", "whsec_123")


# ─── Customers ───────────────────────────────────────────────────

def test_find_or_create_reuses_existing_customer(gateway):
    with patch.object(stripe.Customer, "list", return_value={"data": [{"id": "cus_1"}]}) as list_, \
            patch.object(stripe.Customer, "create") as create:
        customer = gateway.find_or_create_customer("a@b.test", "user-1")

    assert customer["id"] == "cus_1"
    list_.assert_called_once_with(email="a@b.test", limit=1, api_key="sk_test_123")
    create.assert_not_called()


def test_find_or_create_creates_when_missing(gateway):
    with patch.object(stripe.Customer, "list", return_value={"data": []}), \
            patch.object(stripe.Customer, "create", return_value={"id": "cus_new"}) as create:
        customer = gateway.find_or_create_customer("a@b.test", "user-1")

    assert customer["id"] == "cus_new"
    create.assert_called_once_with(
        email="a@b.test", metadata={"userId": "user-1"}, api_key="sk_test_123",
    )


def test_create_customer_includes_name(gateway):
    with patch.object(stripe.Customer, "create", return_value={"id": "cus_2"}) as create:
        gateway.create_customer("a@b.test", "user-1", "Tendai")

    assert create.call_args.kwargs["name"] == "Tendai"


def test_create_customer_falls_back_on_already_exists(gateway):
    error = stripe.InvalidRequestError(
        "Customer exists", "email", code="resource_already_exists",
    )
    with patch.object(stripe.Customer, "create", side_effect=error), \
            patch.object(stripe.Customer, "list", return_value={"data": [{"id": "cus_old"}]}):
        customer = gateway.create_customer("a@b.test", "user-1")

    assert customer["id"] == "cus_old"


def test_create_customer_other_errors_map(gateway):
    error = stripe.InvalidRequestError("Bad email", "email", code="email_invalid")
    with patch.object(stripe.Customer, "create", side_effect=error):
        with pytest.raises(PaymentProviderError) as exc:
            gateway.create_customer("not-an-email", "user-1")

    assert exc.value.stripe_code == "email_invalid"


# ─── Checkout / intents ──────────────────────────────────────────

def test_checkout_session_passes_params(gateway):
    session = {"id": "cs_1", "url": "https://checkout.stripe.test/cs_1"}
    with patch.object(stripe.checkout.Session, "create", return_value=session) as create:
        result = gateway.create_checkout_session({"mode": "payment"})

    assert result["url"].endswith("cs_1")
    create.assert_called_once_with(mode="payment", api_key="sk_test_123")


def test_stripe_error_maps_to_payment_provider_error(gateway):
    error = stripe.CardError("Your card was declined.", "card", code="card_declined")
    with patch.object(stripe.PaymentIntent, "create", side_effect=error):
        with pytest.raises(PaymentProviderError) as exc:
            gateway.create_payment_intent({"amount": 500})

    assert exc.value.http_status == 502
    assert exc.value.stripe_code == "card_declined"


def test_missing_key_raises_not_configured():
    gateway = StripeGateway("")
    assert gateway.configured is False
    with pytest.raises(ServiceNotConfiguredError):
        gateway.retrieve_payment_intent("pi_1")


# ─── Webhooks ────────────────────────────────────────────────────

def test_construct_event_requires_signature(gateway):
    with pytest.raises(WebhookSignatureError, match="No signature provided"):
        gateway.construct_event(b"{}", None)


def test_construct_event_requires_secret():
    with pytest.raises(ServiceNotConfiguredError):
        StripeGateway("sk_test_123").construct_event(b"{}", "t=1,v1=abc")


def test_construct_event_invalid_payload(gateway):
    with patch.object(stripe.Webhook, "construct_event", side_effect=ValueError("bad json")):
        with pytest.raises(WebhookSignatureError, match="Invalid payload"):
            gateway.construct_event(b"not json", "t=1,v1=abc")


def test_construct_event_invalid_signature(gateway):
    error = stripe.SignatureVerificationError("mismatch", "t=1,v1=abc")
    with patch.object(stripe.Webhook, "construct_event", side_effect=error):
        with pytest.raises(WebhookSignatureError, match="Invalid signature"):
            gateway.construct_event(b"{}", "t=1,v1=abc")


def test_construct_event_returns_event(gateway):
    event = {"type": "checkout.session.completed"}
    with patch.object(stripe.Webhook, "construct_event", return_value=event) as construct:
        assert gateway.construct_event(b"{}", "sig") == event

    construct.assert_called_once_with(b"{}", "sig", "whsec_123")


# ─── SDK objects become plain dicts ──────────────────────────────

def _customer_list(*customers):
    return stripe.ListObject.construct_from(
        {"object": "list", "url": "/v1/customers", "has_more": False, "data": list(customers)},
        "sk_test_123",
    )


def test_customer_lookup_converts_list_object(gateway):
    listing = _customer_list({
        "id": "cus_1", "object": "customer", "email": "a@b.test",
        "metadata": {"userId": "user-1"},
    })
    with patch.object(stripe.Customer, "list", return_value=listing):
        customer = gateway.find_customer_by_email("a@b.test")

    assert type(customer) is dict
    assert customer["id"] == "cus_1"
    assert type(customer["metadata"]) is dict
    assert customer["metadata"].get("userId") == "user-1"


def test_customer_lookup_empty_list_object(gateway):
    with patch.object(stripe.Customer, "list", return_value=_customer_list()):
        assert gateway.find_customer_by_email("nobody@b.test") is None


def test_created_customer_is_plain_dict(gateway):
    created = stripe.Customer.construct_from(
        {"id": "cus_9", "object": "customer", "email": "a@b.test", "name": None}, "sk_test_123",
    )
    with patch.object(stripe.Customer, "create", return_value=created):
        customer = gateway.create_customer("a@b.test", "user-1")

    assert type(customer) is dict
    assert customer.get("name") is None


def test_checkout_session_object_converted(gateway):
    session = stripe.checkout.Session.construct_from({
        "id": "cs_live", "object": "checkout.session", "mode": "payment",
        "url": "https://checkout.stripe.test/cs_live", "payment_intent": None,
        "customer_details": {"email": "a@b.test"},
        "metadata": {"type": "donation", "userId": "user-1"},
    }, "sk_test_123")
    with patch.object(stripe.checkout.Session, "create", return_value=session):
        created = gateway.create_checkout_session({"mode": "payment"})
    with patch.object(stripe.checkout.Session, "retrieve", return_value=session):
        fetched = gateway.retrieve_checkout_session("cs_live")

    for result in (created, fetched):
        assert type(result) is dict
        assert result.get("payment_intent") is None
        assert result["customer_details"].get("email") == "a@b.test"
        assert type(result["metadata"]) is dict


def test_subscription_items_converted(gateway):
    subscription = stripe.Subscription.construct_from({
        "id": "sub_1", "object": "subscription", "status": "active",
        "items": {"object": "list", "data": [
            {"id": "si_1", "object": "subscription_item", "current_period_end": 1769904000},
        ]},
    }, "sk_test_123")
    with patch.object(stripe.Subscription, "retrieve", return_value=subscription):
        result = gateway.retrieve_subscription("sub_1")

    assert type(result["items"]) is dict
    assert result["items"]["data"][0].get("current_period_end") == 1769904000


# ─── Signed webhook payloads ─────────────────────────────────────

def signed_header(payload: bytes, secret: str, timestamp: int | None = None) -> str:
    timestamp = timestamp or int(time.time())
    signed = f"{timestamp}.".encode() + payload
    digest = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


def _event_payload() -> bytes:
    return json.dumps({
        "id": "evt_signed", "object": "event", "type": "checkout.session.completed",
        "data": {"object": {
            "id": "cs_signed", "object": "checkout.session", "mode": "payment",
            "payment_intent": "pi_signed", "amount_total": 1200, "currency": "usd",
            "metadata": {"userId": "user-1", "type": "donation"},
        }},
    }).encode()


def test_signed_event_verified_and_converted(gateway):
    payload = _event_payload()
    event = gateway.construct_event(payload, signed_header(payload, "whsec_123"))

    assert type(event) is dict
    assert event["type"] == "checkout.session.completed"
    session = event["data"]["object"]
    assert type(session) is dict
    assert session.get("payment_intent") == "pi_signed"
    assert session["metadata"].get("type") == "donation"


def test_signature_with_wrong_secret_rejected(gateway):
    payload = _event_payload()
    with pytest.raises(WebhookSignatureError, match="Invalid signature"):
        gateway.construct_event(payload, signed_header(payload, "whsec_other"))


def test_stale_signature_rejected(gateway):
    payload = _event_payload()
    header = signed_header(payload, "whsec_123", timestamp=int(time.time()) - 3600)
    with pytest.raises(WebhookSignatureError, match="Invalid signature"):
        gateway.construct_event(payload, header)
