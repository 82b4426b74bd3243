"""Stripe Routes: checkout, customers, payment intents, lookups and the webhook.

Invariants:
    - Checkout and payment-intent creation are open to guests (userId optional)
    - Customer creation is limited to the caller's own profile (admins: any)
    - The webhook reads the raw body; signature failures answer 400,
      processing failures answer 500 so Stripe redelivers
"""

import logging

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from diaspora_connect.api.dependencies import (
    get_current_profile, get_stripe_gateway, repository,
)
from diaspora_connect.config import Settings, get_settings
from diaspora_connect.core.access import role_at_least
from diaspora_connect.core.domain_types import UserRole
from diaspora_connect.core.errors import (
    DiasporaConnectError, ErrorSeverity, InvalidRequestError, PermissionDeniedError,
)
from diaspora_connect.infrastructure.stripe_gateway import StripeGateway
from diaspora_connect.repositories.engagement import ReferralRepository
from diaspora_connect.repositories.payments import DonationRepository, MembershipRepository
from diaspora_connect.repositories.users import UserRepository
from diaspora_connect.schemas.payments import (
    CheckoutRequest,
    CheckoutResponse,
    CreateCustomerRequest,
    CustomerResponse,
    PaymentIntentRequest,
    PaymentIntentResponse,
    WebhookAck,
)
from diaspora_connect.services.checkout_service import CheckoutService
from diaspora_connect.services.webhook_service import WebhookService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/stripe", tags=["stripe"])


@router.post("/create-checkout", response_model=CheckoutResponse)
def create_checkout(
    body: CheckoutRequest,
    gateway: StripeGateway = Depends(get_stripe_gateway),
    settings: Settings = Depends(get_settings),
):
    """Create a hosted Checkout session for a donation or membership."""
    return CheckoutService(gateway, settings).create_checkout_session(body)


@router.post("/create-customer", response_model=CustomerResponse)
def create_customer(
    body: CreateCustomerRequest,
    profile: dict = Depends(get_current_profile),
    gateway: StripeGateway = Depends(get_stripe_gateway),
    settings: Settings = Depends(get_settings),
    users: UserRepository = Depends(repository(UserRepository)),
):
    """Return the user's Stripe customer, creating and linking one if needed."""
    if body.user_id != profile["uid"] and not role_at_least(profile.get("role"), UserRole.ADMIN):
        raise PermissionDeniedError(UserRole.ADMIN.value)
    customer_id = CheckoutService(gateway, settings).ensure_customer(users, body.user_id)
    return {"customerId": customer_id}


@router.post("/create-payment-intent", response_model=PaymentIntentResponse)
def create_payment_intent(
    body: PaymentIntentRequest,
    gateway: StripeGateway = Depends(get_stripe_gateway),
    settings: Settings = Depends(get_settings),
):
    return CheckoutService(gateway, settings).create_payment_intent(body)


@router.get("/payment-intent")
def get_payment_intent(
    payment_intent: str | None = Query(None),
    gateway: StripeGateway = Depends(get_stripe_gateway),
    settings: Settings = Depends(get_settings),
):
    """Payment intent summary for the success page (Stripe field names)."""
    if not payment_intent:
        raise InvalidRequestError("Payment Intent ID is required", field="payment_intent")
    return CheckoutService(gateway, settings).describe_payment_intent(payment_intent)


@router.get("/session")
def get_checkout_session(
    session_id: str | None = Query(None),
    gateway: StripeGateway = Depends(get_stripe_gateway),
    settings: Settings = Depends(get_settings),
):
    """Checkout session summary for the success page (Stripe field names)."""
    if not session_id:
        raise InvalidRequestError("Session ID is required", field="session_id")
    return CheckoutService(gateway, settings).describe_session(session_id)


@router.post("/webhook", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    gateway: StripeGateway = Depends(get_stripe_gateway),
    users: UserRepository = Depends(repository(UserRepository)),
    donations: DonationRepository = Depends(repository(DonationRepository)),
    memberships: MembershipRepository = Depends(repository(MembershipRepository)),
    referrals: ReferralRepository = Depends(repository(ReferralRepository)),
):
    payload = await request.body()
    event = gateway.construct_event(payload, request.headers.get("stripe-signature"))

    service = WebhookService(gateway, users, donations, memberships, referrals)
    try:
        await run_in_threadpool(service.handle, event)
    except Exception as e:
        code = e.code if isinstance(e, DiasporaConnectError) else "INTERNAL_ERROR"
        logger.error(
            f"Error processing webhook: {e}",
            exc_info=True,
            extra={"event_type": event["type"], "error_code": code},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "WEBHOOK_PROCESSING_FAILED",
                    "message": "Webhook processing failed",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )
    return {"received": True}
