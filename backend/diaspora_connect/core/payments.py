"""Payments Core: pricing, minor-unit conversion and Stripe Checkout parameter assembly.

Invariants:
    - Amounts cross the Stripe boundary in minor units (cents), rounded half up
    - Membership checkout price always comes from the tier price table, never the client
    - Checkout params carry either `customer` or `customer_email`, never both
    - Only memberships may recur (subscription mode); donations are one-time payments
    - metadata.userId is always present (empty string for guests)

Design Decisions:
    - Pure dict builders: the Stripe gateway stays a dumb pass-through and the
      parameter shape is testable without the SDK
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Literal

from diaspora_connect.core.domain_types import (
    CheckoutType, MembershipTier, PaymentStatus, PAID_TIERS,
)
from diaspora_connect.core.errors import InvalidRequestError

DONATION_PRODUCT_NAME = "Donation to We The People"
DONATION_DEFAULT_DESCRIPTION = "Support Zimbabwe's diaspora intelligence platform"
CHECKOUT_SESSION_PLACEHOLDER = "{CHECKOUT_SESSION_ID}"

Interval = Literal["month", "year"]


def to_minor_units(amount: float | int | Decimal) -> int:
    """Convert a major-unit amount (dollars) to minor units (cents)."""
    value = Decimal(str(amount)) * 100
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(amount: int | None) -> float:
    if amount is None:
        return 0.0
    return amount / 100


def tier_price(tier: str, prices: dict[str, float]) -> float:
    """Price of a paid membership tier in major units."""
    try:
        parsed = MembershipTier(tier)
    except ValueError:
        raise InvalidRequestError(f"Invalid membership tier: {tier}", field="tier")
    if parsed not in PAID_TIERS or parsed.value not in prices:
        raise InvalidRequestError(
            f"Membership tier '{tier}' cannot be purchased", field="tier",
        )
    return prices[parsed.value]


def tier_display_name(tier: str) -> str:
    return f"{tier[:1].upper()}{tier[1:]} Membership"


def checkout_urls(base_url: str) -> tuple[str, str]:
    """(success_url, cancel_url) for hosted checkout."""
    return (
        f"{base_url}/success?session_id={CHECKOUT_SESSION_PLACEHOLDER}",
        f"{base_url}/cancel",
    )


def build_checkout_params(
    *,
    checkout_type: CheckoutType,
    amount: float,
    base_url: str,
    currency: str,
    tier_prices: dict[str, float],
    tier: str | None = None,
    description: str | None = None,
    user_id: str | None = None,
    customer_id: str | None = None,
    customer_email: str | None = None,
    interval: Interval | None = None,
) -> dict:
    """Assemble stripe.checkout.Session.create kwargs for a donation or membership."""
    metadata = {
        "userId": user_id or "",
        "type": checkout_type.value,
    }
    if checkout_type is CheckoutType.DONATION:
        if interval:
            raise InvalidRequestError(
                "Recurring billing is only available for memberships", field="interval",
            )
        product_data = {
            "name": DONATION_PRODUCT_NAME,
            "description": description or DONATION_DEFAULT_DESCRIPTION,
        }
        unit_amount = to_minor_units(amount)
        if description:
            metadata["description"] = description
    else:
        if not tier:
            raise InvalidRequestError("Membership tier is required", field="tier")
        price = tier_price(tier, tier_prices)
        product_data = {
            "name": tier_display_name(tier),
            "description": f"We The People - {tier} tier membership",
        }
        unit_amount = to_minor_units(price)
        metadata["tier"] = tier

    price_data: dict = {
        "currency": currency,
        "product_data": product_data,
        "unit_amount": unit_amount,
    }
    if interval:
        price_data["recurring"] = {"interval": interval}

    success_url, cancel_url = checkout_urls(base_url)
    params: dict = {
        "payment_method_types": ["card"],
        "line_items": [{"price_data": price_data, "quantity": 1}],
        "mode": "subscription" if interval else "payment",
        "success_url": success_url,
        "cancel_url": cancel_url,
        "metadata": metadata,
    }
    if interval:
        # Subscription objects do not inherit session metadata.
        params["subscription_data"] = {"metadata": dict(metadata)}

    if customer_id:
        params["customer"] = customer_id
    elif customer_email:
        params["customer_email"] = customer_email
    return params


def build_payment_intent_params(
    *,
    amount: float,
    payment_type: str,
    currency: str,
    user_id: str | None = None,
    customer_id: str | None = None,
    receipt_email: str | None = None,
    description: str | None = None,
) -> dict:
    """Assemble stripe.PaymentIntent.create kwargs."""
    params: dict = {
        "amount": to_minor_units(amount),
        "currency": currency,
        "automatic_payment_methods": {"enabled": True},
        "metadata": {
            "userId": user_id or "",
            "type": payment_type,
            "description": description or "",
        },
        "description": description or f"Payment for {payment_type}",
    }
    if customer_id:
        params["customer"] = customer_id
    if receipt_email:
        params["receipt_email"] = receipt_email
    return params


def summarize_donations(donations: list[dict]) -> dict:
    """Totals for the admin dashboard; only succeeded donations count toward amount."""
    by_status: dict[str, int] = {status.value: 0 for status in PaymentStatus}
    total = Decimal("0")
    for donation in donations:
        status = donation.get("status") or PaymentStatus.PENDING.value
        by_status[status] = by_status.get(status, 0) + 1
        if status == PaymentStatus.SUCCEEDED.value:
            total += Decimal(str(donation.get("amount") or 0))
    return {
        "count": len(donations),
        "totalAmount": float(total),
        "byStatus": by_status,
    }
