import logging

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from dental_booking.api.deps import get_payment_gateway, get_session
from dental_booking.api.schemas.payment import (
    ConfirmPaymentRequest,
    ConfirmPaymentResponse,
    CreatePaymentRequest,
    CreatePaymentResponse,
)
from dental_booking.core.config import settings
from dental_booking.models.booking import BookingPublic
from dental_booking.services.email_service import (
    send_ops_payment_notification_email,
    send_payment_confirmation_email,
)
from dental_booking.services.payment_gateway import StripeGateway
from dental_booking.services.payment_service import confirm_payment, create_payment_intent

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/payment", tags=["payment"])


@router.post("/createPayment", response_model=CreatePaymentResponse)
async def create_payment(
    body: CreatePaymentRequest,
    session: AsyncSession = Depends(get_session),
    gateway: StripeGateway = Depends(get_payment_gateway),
) -> CreatePaymentResponse:
    intent = await create_payment_intent(
        session,
        gateway,
        booking_id=body.booking_id,
        amount=body.amount,
        currency=body.currency or settings.stripe_currency,
    )
    return CreatePaymentResponse(client_secret=intent.client_secret, payment_intent_id=intent.id)


@router.post("/confirmPayment", response_model=ConfirmPaymentResponse)
async def confirm(
    body: ConfirmPaymentRequest,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_session),
    gateway: StripeGateway = Depends(get_payment_gateway),
) -> ConfirmPaymentResponse:
    booking, newly_confirmed = await confirm_payment(session, gateway, body.booking_id, body.payment_id)
    if not newly_confirmed:
        return ConfirmPaymentResponse(
            message="Payment already confirmed",
            booking_id=booking.id,
            payment_status=booking.payment_status,
        )
    await session.commit()
    # Emails go out after the response and never touch the committed transaction
    background_tasks.add_task(send_payment_confirmation_email, BookingPublic.model_validate(booking))
    background_tasks.add_task(send_ops_payment_notification_email, booking.id, body.payment_id)
    return ConfirmPaymentResponse(
        message="Payment confirmed and booking updated",
        booking_id=booking.id,
        payment_status=booking.payment_status,
    )
