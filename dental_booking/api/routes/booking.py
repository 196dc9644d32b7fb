import logging
from datetime import date

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from dental_booking.api.deps import get_optional_user, get_session
from dental_booking.api.schemas.booking import (
    CreateBookingRequest,
    CreateBookingResponse,
    MessageResponse,
    ReleasedBlockedDatesResponse,
    RescheduleRequest,
)
from dental_booking.models.blocked_date import BlockedDatePublic
from dental_booking.models.booking import Booking, BookingCreate, BookingPublic
from dental_booking.models.user import User
from dental_booking.services.blocked_date_service import list_blocked_dates
from dental_booking.services.booking_service import (
    cancel_booking,
    create_booking,
    get_booking,
    list_bookings,
    release_blocked_window,
    reschedule_booking,
)
from dental_booking.services.email_service import send_cancellation_email, send_reschedule_email
from dental_booking.services.slot_service import get_available_times

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/booking", tags=["booking"])


def _to_public(b: Booking) -> BookingPublic:
    return BookingPublic.model_validate(b)


@router.get("/availability", response_model=list[str])
async def available_times(
    date_param: date = Query(..., alias="date"),
    session: AsyncSession = Depends(get_session),
) -> list[str]:
    """Free slot times (HH:MM:SS) on the given date (YYYY-MM-DD)."""
    times = await get_available_times(session, date_param)
    return [t.strftime("%H:%M:%S") for t in times]


@router.post("/booking", response_model=CreateBookingResponse)
async def book(
    body: CreateBookingRequest,
    session: AsyncSession = Depends(get_session),
    current_user: User | None = Depends(get_optional_user),
) -> CreateBookingResponse:
    data = BookingCreate(
        dentist_name=body.name,
        patient_name=body.patient_name,
        email=body.email,
        phone=body.phone,
        address=body.address,
        date=body.date,
        time=body.time,
    )
    booking = await create_booking(session, data, user_id=current_user.id if current_user else None)
    return CreateBookingResponse(booking_id=booking.id)


@router.get("/bookings", response_model=list[BookingPublic])
async def all_bookings(session: AsyncSession = Depends(get_session)) -> list[BookingPublic]:
    return [_to_public(b) for b in await list_bookings(session)]


@router.get("/block", response_model=list[BlockedDatePublic])
async def blocked_dates(session: AsyncSession = Depends(get_session)) -> list[BlockedDatePublic]:
    rows = await list_blocked_dates(session)
    return [BlockedDatePublic.model_validate(r) for r in rows]


@router.patch("/reschedule/{booking_id}", response_model=MessageResponse)
async def reschedule(
    booking_id: int,
    body: RescheduleRequest,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    booking = await reschedule_booking(session, booking_id, body.date, body.time)
    # Commit before queuing so the email describes durable state
    await session.commit()
    background_tasks.add_task(send_reschedule_email, _to_public(booking))
    return MessageResponse(message="Booking rescheduled successfully!")


@router.delete("/cancel/{booking_id}", response_model=MessageResponse)
async def cancel(
    booking_id: int,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    booking = await cancel_booking(session, booking_id)
    await session.commit()
    background_tasks.add_task(send_cancellation_email, _to_public(booking))
    return MessageResponse(message="Booking canceled successfully!")


@router.delete("/blocked/{booking_id}", response_model=ReleasedBlockedDatesResponse)
async def release_blocked(
    booking_id: int,
    session: AsyncSession = Depends(get_session),
) -> ReleasedBlockedDatesResponse:
    removed = await release_blocked_window(session, booking_id)
    return ReleasedBlockedDatesResponse(message="Blocked dates removed", removed=removed)


@router.get("/{booking_id}", response_model=BookingPublic)
async def booking_details(
    booking_id: int,
    session: AsyncSession = Depends(get_session),
) -> BookingPublic:
    return _to_public(await get_booking(session, booking_id))
