"""Payment Schemas: checkout, customer and payment-intent request/response models.

Invariants:
    - Donation checkouts require a positive amount and are always one-time;
      membership checkouts require a tier
    - Responses use the camelCase keys the web client reads (sessionId, clientSecret, ...)
"""

from typing import Literal

from pydantic import Field, model_validator

from diaspora_connect.core.domain_types import CheckoutType
from diaspora_connect.schemas.base import CamelModel


class CheckoutRequest(CamelModel):
    """Hosted checkout for a donation or a membership tier."""
    type: CheckoutType
    amount: float | None = None
    tier: str | None = None
    description: str | None = Field(None, max_length=500)
    user_id: str | None = None
    user_email: str | None = None
    interval: Literal["month", "year"] | None = None

    @model_validator(mode="after")
    def check_type_fields(self) -> "CheckoutRequest":
        if self.type is CheckoutType.DONATION:
            if self.amount is None or self.amount <= 0:
                raise ValueError("Amount must be greater than zero")
            if self.interval:
                raise ValueError("Recurring billing is only available for memberships")
        elif not self.tier:
            raise ValueError("Membership tier is required")
        return self


class CheckoutResponse(CamelModel):
    session_id: str
    url: str | None = None


class CreateCustomerRequest(CamelModel):
    """Customer details come from the stored profile, not the request."""
    user_id: str = Field(min_length=1)


class CustomerResponse(CamelModel):
    customer_id: str


class PaymentIntentRequest(CamelModel):
    amount: float = Field(gt=0)
    type: str = Field("donation", min_length=1)
    user_id: str | None = None
    user_email: str | None = None
    user_name: str | None = None
    description: str | None = Field(None, max_length=500)


class PaymentIntentResponse(CamelModel):
    client_secret: str | None
    payment_intent_id: str


class WebhookAck(CamelModel):
    received: bool = True
