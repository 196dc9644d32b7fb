import asyncio
import logging
from dataclasses import dataclass

import stripe

from dental_booking.core.config import settings
from dental_booking.core.exceptions import UpstreamFailure

logger = logging.getLogger(__name__)

INTENT_SUCCEEDED = "succeeded"


@dataclass
class PaymentIntentResult:
    id: str
    status: str
    client_secret: str | None = None
    # bookingId from the intent metadata set at creation
    booking_id: str | None = None


class StripeGateway:
    """Thin async wrapper around the Stripe PaymentIntent API.

    The SDK is blocking, so calls run in a worker thread.
    """

    def __init__(self, secret_key: str) -> None:
        self.configured = bool(secret_key)
        if self.configured:
            stripe.api_key = secret_key

    def _require_configured(self) -> None:
        if not self.configured:
            raise UpstreamFailure("Payment provider is not configured")

    async def create_intent(self, amount_minor: int, currency: str, booking_id: int) -> PaymentIntentResult:
        self._require_configured()
        try:
            intent = await asyncio.to_thread(
                stripe.PaymentIntent.create,
                amount=amount_minor,
                currency=currency,
                metadata={"bookingId": str(booking_id)},
            )
        except stripe.StripeError as exc:
            logger.exception("Stripe intent creation failed for booking %s", booking_id)
            raise UpstreamFailure("Failed to create payment intent") from exc
        return PaymentIntentResult(id=intent.id, status=intent.status, client_secret=intent.client_secret)

    async def retrieve_intent(self, payment_id: str) -> PaymentIntentResult:
        self._require_configured()
        try:
            intent = await asyncio.to_thread(stripe.PaymentIntent.retrieve, payment_id)
        except stripe.StripeError as exc:
            logger.exception("Stripe intent lookup failed for %s", payment_id)
            raise UpstreamFailure("Failed to retrieve payment status") from exc
        logger.info("Payment intent %s status: %s", payment_id, intent.status)
        meta = getattr(intent, "metadata", None) or {}
        return PaymentIntentResult(
            id=intent.id,
            status=intent.status,
            booking_id=meta.get("bookingId"),
        )


payment_gateway = StripeGateway(settings.stripe_secret_key)


def get_payment_gateway() -> StripeGateway:
    return payment_gateway
