import logging
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from dental_booking.core.exceptions import NotFound, PaymentNotComplete, ValidationFailed
from dental_booking.models.booking import PAYMENT_COMPLETED, Booking
from dental_booking.services.blocked_date_service import block_around
from dental_booking.services.booking_service import get_booking
from dental_booking.services.payment_gateway import INTENT_SUCCEEDED, PaymentIntentResult, StripeGateway

logger = logging.getLogger(__name__)


def to_minor_units(amount: Decimal) -> int:
    """Major currency units to the provider's integer minor units (pounds to pence)."""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


async def create_payment_intent(
    session: AsyncSession,
    gateway: StripeGateway,
    booking_id: int,
    amount: Decimal,
    currency: str,
) -> PaymentIntentResult:
    if amount <= 0:
        raise ValidationFailed("Amount must be greater than zero")
    await get_booking(session, booking_id)
    return await gateway.create_intent(to_minor_units(amount), currency.lower(), booking_id)


async def confirm_payment(
    session: AsyncSession,
    gateway: StripeGateway,
    booking_id: int,
    payment_id: str,
) -> tuple[Booking, bool]:
    """Mark a booking paid once the provider reports success, and block its window.

    Returns (booking, newly_confirmed). A repeat confirmation of a paid booking is
    a no-op so the blocked window is never inserted twice.
    """
    intent = await gateway.retrieve_intent(payment_id)
    if intent.status != INTENT_SUCCEEDED:
        raise PaymentNotComplete(f"Payment not completed yet (status: {intent.status})")
    if intent.booking_id != str(booking_id):
        logger.warning("Payment intent %s belongs to booking %s, not %s", payment_id, intent.booking_id, booking_id)
        raise PaymentNotComplete(f"Payment {payment_id} was not made for booking {booking_id}")

    booking = await get_booking(session, booking_id)
    if booking.is_paid:
        logger.info("Booking %s already paid, skipping confirmation", booking_id)
        return booking, False
    if booking.is_canceled:
        raise ValidationFailed(f"Booking {booking_id} is canceled")

    booking.payment_status = PAYMENT_COMPLETED
    booking.payment_id = payment_id
    booking.updated_at = datetime.now(UTC).replace(tzinfo=None)
    session.add(booking)
    try:
        await session.flush()
    except StaleDataError as exc:
        # Swept between the read and the update
        raise NotFound(f"Booking {booking_id} not found") from exc
    await block_around(session, booking_id, booking.date)
    logger.info("Booking %s paid with %s", booking_id, payment_id)
    return booking, True
