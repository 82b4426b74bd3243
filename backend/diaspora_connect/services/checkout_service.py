"""Checkout Service: Stripe Checkout sessions, payment intents and customers.

Invariants:
    - Customer lookup/creation before checkout or payment intent is best-effort;
      a Stripe failure there never blocks the payment itself
    - Membership amounts come from settings.membership_tier_prices
    - Lookup responses keep Stripe's snake_case field names
"""

import logging

from diaspora_connect.config import Settings
from diaspora_connect.core.errors import PaymentProviderError
from diaspora_connect.core.payments import (
    build_checkout_params, build_payment_intent_params,
)
from diaspora_connect.infrastructure.stripe_gateway import StripeGateway
from diaspora_connect.repositories.users import UserRepository
from diaspora_connect.schemas.payments import CheckoutRequest, PaymentIntentRequest

logger = logging.getLogger(__name__)


class CheckoutService:
    """Creates Stripe payment objects for donations and memberships."""

    def __init__(self, gateway: StripeGateway, settings: Settings):
        self.gateway = gateway
        self.settings = settings

    def create_checkout_session(self, request: CheckoutRequest) -> dict:
        customer_id = None
        if request.user_id and request.user_email:
            try:
                customer = self.gateway.find_or_create_customer(
                    request.user_email, request.user_id,
                )
                customer_id = customer["id"]
            except PaymentProviderError as e:
                logger.warning(
                    f"Could not create/retrieve Stripe customer: {e.message}",
                    extra={"user_id": request.user_id},
                )

        params = build_checkout_params(
            checkout_type=request.type,
            amount=request.amount or 0,
            base_url=self.settings.base_url,
            currency=self.settings.stripe_currency,
            tier_prices=self.settings.membership_tier_prices,
            tier=request.tier,
            description=request.description,
            user_id=request.user_id,
            customer_id=customer_id,
            customer_email=request.user_email,
            interval=request.interval,
        )
        session = self.gateway.create_checkout_session(params)
        return {"sessionId": session["id"], "url": session.get("url")}

    def create_payment_intent(self, request: PaymentIntentRequest) -> dict:
        customer_id = None
        if request.user_id and request.user_email:
            try:
                customer = self.gateway.create_customer(
                    request.user_email, request.user_id, request.user_name,
                )
                customer_id = customer["id"]
            except PaymentProviderError as e:
                logger.warning(
                    f"Could not create/retrieve Stripe customer: {e.message}",
                    extra={"user_id": request.user_id},
                )

        params = build_payment_intent_params(
            amount=request.amount,
            payment_type=request.type,
            currency=self.settings.stripe_currency,
            user_id=request.user_id,
            customer_id=customer_id,
            receipt_email=request.user_email,
            description=request.description,
        )
        intent = self.gateway.create_payment_intent(params)
        return {
            "clientSecret": intent.get("client_secret"),
            "paymentIntentId": intent["id"],
        }

    def ensure_customer(self, users: UserRepository, user_id: str) -> str:
        """Return the user's Stripe customer id, creating and storing one if needed."""
        profile = users.require(user_id)
        existing = profile.get("stripeCustomerId")
        if existing:
            return self.gateway.retrieve_customer(existing)["id"]
        customer = self.gateway.create_customer(
            profile.get("email"), user_id, profile.get("name") or None,
        )
        users.set_stripe_customer_id(user_id, customer["id"])
        logger.info(
            "Linked Stripe customer",
            extra={"user_id": user_id, "stripe_id": customer["id"]},
        )
        return customer["id"]

    def describe_session(self, session_id: str) -> dict:
        session = self.gateway.retrieve_checkout_session(session_id)
        return {
            "id": session["id"],
            "amount_total": session.get("amount_total"),
            "currency": session.get("currency"),
            "metadata": _plain(session.get("metadata")),
            "payment_status": session.get("payment_status"),
        }

    def describe_payment_intent(self, payment_intent_id: str) -> dict:
        intent = self.gateway.retrieve_payment_intent(payment_intent_id)
        amount = intent.get("amount")
        return {
            "id": intent["id"],
            "amount": amount,
            "amount_total": amount,
            "currency": intent.get("currency"),
            "metadata": _plain(intent.get("metadata")),
            "status": intent.get("status"),
        }


def _plain(metadata) -> dict:
    return dict(metadata) if metadata else {}

