"""
Payment gateway client.

The gateway hosts the checkout page and later reports the outcome through
signed webhook events. ``PaymentGateway`` is the seam the payment service
talks to; ``StripePaymentGateway`` implements it on the Stripe SDK.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
import stripe
from pydantic import BaseModel, Field

from coursehub_backend.model.course import Course
from coursehub_backend.model.payment import Payment

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"
PAYMENT_FAILED = "payment_intent.payment_failed"

SIGNATURE_TOLERANCE_SECONDS = 300


class PaymentGatewayError(Exception):
    """Gateway unreachable or answered with an error."""
    pass


class WebhookSignatureError(PaymentGatewayError):
    """Webhook payload could not be authenticated."""
    pass


class CheckoutSession(BaseModel):
    session_id: str
    url: str


class GatewayEvent(BaseModel):
    id: Optional[str] = None
    type: str
    object_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def payment_id(self) -> Optional[str]:
        return self.metadata.get("payment_id")


class PaymentGateway(ABC):

    provider: str = "stripe"

    @abstractmethod
    async def create_checkout_session(
        self,
        payment: Payment,
        course: Course,
        success_url: str,
        cancel_url: str
    ) -> CheckoutSession:
        pass

    @abstractmethod
    def parse_event(self, payload: bytes, signature: Optional[str]) -> GatewayEvent:
        pass


def gateway_event(event: stripe.Event) -> GatewayEvent:
    data_object = event["data"]["object"]
    metadata = data_object.get("metadata") or {}
    return GatewayEvent(
        id=event.get("id"),
        type=event["type"],
        object_id=data_object.get("id"),
        metadata={key: metadata[key] for key in metadata.keys()}
    )


class StripePaymentGateway(PaymentGateway):

    provider = "stripe"

    def __init__(
        self,
        api_key: str,
        webhook_secret: str,
        timeout: float = 10.0,
        tolerance: int = SIGNATURE_TOLERANCE_SECONDS
    ):
        self.api_key = api_key
        self.webhook_secret = webhook_secret
        self.timeout = timeout
        self.tolerance = tolerance

    def _client(self) -> stripe.StripeClient:
        return stripe.StripeClient(
            self.api_key,
            http_client=stripe.HTTPXClient(timeout=self.timeout)
        )

    async def create_checkout_session(
        self,
        payment: Payment,
        course: Course,
        success_url: str,
        cancel_url: str
    ) -> CheckoutSession:

        params = {
            "mode": "payment",
            "payment_method_types": ["card"],
            "line_items": [{
                "price_data": {
                    "currency": payment.currency.lower(),
                    "product_data": {
                        "name": course.title,
                        "description": course.description[:500],
                    },
                    "unit_amount": int(round(payment.amount * 100)),
                },
                "quantity": 1,
            }],
            "success_url": success_url,
            "cancel_url": cancel_url,
            "client_reference_id": payment.id,
            "metadata": {
                "course_id": course.id,
                "student_id": payment.student_id,
                "payment_id": payment.id,
            },
        }

        try:
            session = await self._client().checkout.sessions.create_async(params=params)
        except stripe.StripeError as e:
            logger.error(f"Checkout session creation failed for payment {payment.id}: {e}")
            raise PaymentGatewayError(str(e))

        return CheckoutSession(session_id=session.id, url=session.url)

    def parse_event(self, payload: bytes, signature: Optional[str]) -> GatewayEvent:
        """
        Authenticate a webhook delivery and extract the event.

        Raises:
            WebhookSignatureError: missing, stale or mismatching signature
            PaymentGatewayError: payload is not a valid event
        """
        if not signature:
            raise WebhookSignatureError("Missing signature")

        try:
            event = stripe.Webhook.construct_event(
                payload, signature, self.webhook_secret, tolerance=self.tolerance
            )
        except stripe.SignatureVerificationError as e:
            raise WebhookSignatureError(str(e))
        except ValueError as e:
            raise PaymentGatewayError(f"Malformed webhook payload: {e}")

        try:
            return gateway_event(event)
        except (KeyError, AttributeError) as e:
            raise PaymentGatewayError(f"Malformed webhook payload: {e}")
