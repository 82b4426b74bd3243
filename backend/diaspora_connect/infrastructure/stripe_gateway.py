"""Stripe Gateway: pass-through to the Stripe SDK with error mapping.

Invariants:
    - Every stripe.StripeError surfaces as PaymentProviderError (message + Stripe code)
    - Calls pass api_key explicitly; the SDK's global api_key is never mutated
    - Missing secret key raises ServiceNotConfiguredError before any network call
    - Webhook verification failures raise WebhookSignatureError
    - Every returned object (resources, lists, events) is a plain dict:
      StripeObject is not a dict and is converted once, here

Design Decisions:
    - Synchronous SDK calls: routes run them in FastAPI's threadpool
    - Customer lookup is by email (Stripe does not deduplicate customers itself)
"""

import logging
from collections.abc import Callable
from typing import Any

import stripe

from diaspora_connect.core.errors import (
    PaymentProviderError,
    ServiceNotConfiguredError,
    WebhookSignatureError,
)

logger = logging.getLogger(__name__)

RESOURCE_ALREADY_EXISTS = "resource_already_exists"


def to_plain(obj: Any) -> Any:
    """Recursively convert a StripeObject (ListObject, Event, Session, ...) to dicts."""
    if isinstance(obj, stripe.StripeObject):
        return obj.to_dict()
    return obj


class StripeGateway:
    """Wraps the Stripe resources this service uses."""

    def __init__(self, secret_key: str, webhook_secret: str = ""):
        self.secret_key = secret_key
        self.webhook_secret = webhook_secret

    @property
    def configured(self) -> bool:
        return bool(self.secret_key)

    # ─── Customers ──────────────────────────────────────────────

    def find_customer_by_email(self, email: str) -> dict | None:
        customers = self._call("customer.list", stripe.Customer.list, email=email, limit=1)
        data = customers.get("data") if customers else None
        return data[0] if data else None

    def find_or_create_customer(self, email: str, user_id: str) -> dict:
        """Reuse the first customer with this email, else create one."""
        existing = self.find_customer_by_email(email)
        if existing is not None:
            return existing
        return self._call(
            "customer.create", stripe.Customer.create,
            email=email, metadata={"userId": user_id},
        )

    def create_customer(
        self, email: str, user_id: str, name: str | None = None,
    ) -> dict:
        """Create a customer; on resource_already_exists fall back to lookup by email."""
        self._require_key()
        params: dict[str, Any] = {"email": email, "metadata": {"userId": user_id}}
        if name:
            params["name"] = name
        try:
            return to_plain(stripe.Customer.create(api_key=self.secret_key, **params))
        except stripe.StripeError as e:
            if e.code == RESOURCE_ALREADY_EXISTS:
                existing = self.find_customer_by_email(email)
                if existing is not None:
                    return existing
            raise self._map_error("customer.create", e)

    def retrieve_customer(self, customer_id: str) -> dict:
        return self._call("customer.retrieve", stripe.Customer.retrieve, customer_id)

    # ─── Checkout / Payment Intents / Subscriptions ─────────────

    def create_checkout_session(self, params: dict) -> dict:
        session = self._call(
            "checkout.session.create", stripe.checkout.Session.create, **params,
        )
        logger.info("Created checkout session", extra={"stripe_id": session["id"]})
        return session

    def retrieve_checkout_session(self, session_id: str) -> dict:
        return self._call(
            "checkout.session.retrieve", stripe.checkout.Session.retrieve, session_id,
        )

    def create_payment_intent(self, params: dict) -> dict:
        intent = self._call(
            "payment_intent.create", stripe.PaymentIntent.create, **params,
        )
        logger.info("Created payment intent", extra={"stripe_id": intent["id"]})
        return intent

    def retrieve_payment_intent(self, payment_intent_id: str) -> dict:
        return self._call(
            "payment_intent.retrieve", stripe.PaymentIntent.retrieve, payment_intent_id,
        )

    def retrieve_subscription(self, subscription_id: str) -> dict:
        return self._call(
            "subscription.retrieve", stripe.Subscription.retrieve, subscription_id,
        )

    # ─── Webhooks ───────────────────────────────────────────────

    def construct_event(self, payload: bytes, signature: str | None) -> dict:
        """Verify the Stripe-Signature header and parse the event."""
        if not self.webhook_secret:
            raise ServiceNotConfiguredError("Stripe webhooks", "stripe_webhook_secret")
        if not signature:
            raise WebhookSignatureError("No signature provided")
        try:
            event = stripe.Webhook.construct_event(
                payload, signature, self.webhook_secret,
            )
        except ValueError as e:
            logger.warning(f"Invalid webhook payload: {e}")
            raise WebhookSignatureError("Invalid payload")
        except stripe.SignatureVerificationError as e:
            logger.warning(f"Webhook signature verification failed: {e}")
            raise WebhookSignatureError("Invalid signature")
        return to_plain(event)

    # ─── Internals ──────────────────────────────────────────────

    def _require_key(self) -> None:
        if not self.secret_key:
            raise ServiceNotConfiguredError("Stripe", "stripe_secret_key")

    def _call(self, operation: str, fn: Callable[..., Any], *args, **kwargs) -> Any:
        self._require_key()
        try:
            return to_plain(fn(*args, api_key=self.secret_key, **kwargs))
        except stripe.StripeError as e:
            raise self._map_error(operation, e)

    def _map_error(self, operation: str, e: stripe.StripeError) -> PaymentProviderError:
        logger.error(
            f"Stripe {operation} failed: {e}",
            extra={"error_code": e.code},
        )
        return PaymentProviderError(e.user_message or str(e), e.code)
