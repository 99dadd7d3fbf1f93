import logging
from dataclasses import dataclass, field
from typing import Optional

import stripe

from clubero import config
from clubero.errors import GatewayLookupError, GatewaySessionError

logger = logging.getLogger(__name__)


def _field(obj, name, default=None):
    # Webhook payloads arrive as dicts, SDK responses as StripeObjects
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


@dataclass
class CheckoutSession:
    id: str
    payment_status: Optional[str]
    amount_total: int
    customer_email: Optional[str]
    payment_intent: Optional[str]
    url: Optional[str] = None
    metadata: dict = field(default_factory=dict)

    @property
    def is_paid(self):
        return self.payment_status == "paid"

    @property
    def email(self):
        return self.customer_email or self.metadata.get("userEmail")

    @classmethod
    def from_stripe(cls, obj):
        metadata = _field(obj, "metadata") or {}
        details = _field(obj, "customer_details")
        intent = _field(obj, "payment_intent")
        if intent is not None and not isinstance(intent, str):
            intent = _field(intent, "id")
        return cls(
            id=_field(obj, "id"),
            payment_status=_field(obj, "payment_status"),
            amount_total=_field(obj, "amount_total") or 0,
            customer_email=_field(obj, "customer_email") or _field(details, "email"),
            payment_intent=intent,
            url=_field(obj, "url"),
            metadata={
                key: _field(metadata, key)
                for key in ("clubId", "clubName", "userEmail")
                if _field(metadata, key) is not None
            },
        )


class StripeGateway:
    """Creates and retrieves Stripe Checkout sessions for club memberships."""

    def __init__(self, api_key=None, currency=None, client_domain=None):
        self.api_key = api_key
        self.currency = currency or config.DEFAULT_CURRENCY
        self.client_domain = client_domain or config.DEFAULT_CLIENT_DOMAIN

    def create_checkout_session(self, club_id: str, club_name: str, amount: int, email: str) -> CheckoutSession:
        try:
            session = stripe.checkout.Session.create(
                api_key=self.api_key,
                mode="payment",
                customer_email=email,
                line_items=[{
                    "price_data": {
                        "currency": self.currency,
                        "unit_amount": amount,
                        "product_data": {"name": club_name},
                    },
                    "quantity": 1,
                }],
                metadata={
                    "clubId": club_id,
                    "clubName": club_name,
                    "userEmail": email,
                },
                success_url=f"{self.client_domain}/payment-success?session_id={{CHECKOUT_SESSION_ID}}",
                cancel_url=f"{self.client_domain}/payment-cancelled",
            )
        except stripe.StripeError as exc:
            logger.error("Stripe checkout creation failed for club %s: %s", club_id, exc)
            raise GatewaySessionError() from exc
        return CheckoutSession.from_stripe(session)

    def retrieve_session(self, session_id: str) -> CheckoutSession:
        try:
            session = stripe.checkout.Session.retrieve(session_id, api_key=self.api_key)
        except stripe.StripeError as exc:
            logger.error("Stripe session lookup failed for %s: %s", session_id, exc)
            raise GatewayLookupError() from exc
        if session is None:
            raise GatewayLookupError(f"Checkout session {session_id} not found")
        return CheckoutSession.from_stripe(session)


def get_gateway():
    return StripeGateway(
        api_key=config.stripe_secret_key(),
        currency=config.currency(),
        client_domain=config.client_domain(),
    )
