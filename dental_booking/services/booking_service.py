import logging
from datetime import UTC, date, datetime, time, timedelta

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from dental_booking.core.exceptions import NotFound, SlotConflict, ValidationFailed
from dental_booking.models.booking import (
    PAYMENT_PENDING,
    STATUS_ACTIVE,
    STATUS_CANCELED,
    STATUS_RESCHEDULED,
    Booking,
    BookingCreate,
)
from dental_booking.services.blocked_date_service import block_around, unblock_around
from dental_booking.services.slot_service import is_catalog_time

logger = logging.getLogger(__name__)


def _utc_naive_now() -> datetime:
    """Naive UTC for comparison with TIMESTAMP WITHOUT TIME ZONE."""
    return datetime.now(UTC).replace(tzinfo=None)


def _normalize_time(t: time) -> time:
    return t.replace(microsecond=0, tzinfo=None)


def _check_slot(t: time) -> time:
    t = _normalize_time(t)
    if not is_catalog_time(t):
        raise ValidationFailed(f"{t.isoformat()} is not a bookable time")
    return t


async def find_live_booking_at(
    session: AsyncSession, d: date, t: time, exclude_id: int | None = None
) -> Booking | None:
    """Non-canceled booking holding (d, t), other than `exclude_id`."""
    q = select(Booking).where(
        Booking.date == d,
        Booking.time == t,
        Booking.status != STATUS_CANCELED,
    )
    if exclude_id is not None:
        q = q.where(Booking.id != exclude_id)
    result = await session.execute(q.limit(1))
    return result.scalar_one_or_none()


async def _flush_slot_change(session: AsyncSession, d: date, t: time) -> None:
    # The partial unique index on (date, time) settles races the read check can't see
    try:
        await session.flush()
    except IntegrityError as exc:
        raise SlotConflict(f"Slot {d.isoformat()} {t.isoformat()} is already booked") from exc


async def create_booking(
    session: AsyncSession, data: BookingCreate, user_id: int | None = None
) -> Booking:
    t = _check_slot(data.time)
    if await find_live_booking_at(session, data.date, t):
        raise SlotConflict(f"Slot {data.date.isoformat()} {t.isoformat()} is already booked")
    booking = Booking(
        user_id=user_id,
        dentist_name=data.dentist_name,
        patient_name=data.patient_name,
        email=data.email,
        phone=data.phone,
        address=data.address,
        date=data.date,
        time=t,
        payment_status=PAYMENT_PENDING,
        status=STATUS_ACTIVE,
    )
    session.add(booking)
    await _flush_slot_change(session, data.date, t)
    await session.refresh(booking)
    logger.info("Booking %s created for %s %s", booking.id, booking.date, booking.time)
    return booking


async def get_booking(session: AsyncSession, booking_id: int) -> Booking:
    result = await session.execute(select(Booking).where(Booking.id == booking_id))
    booking = result.scalar_one_or_none()
    if not booking:
        raise NotFound(f"Booking {booking_id} not found")
    return booking


async def list_bookings(session: AsyncSession) -> list[Booking]:
    result = await session.execute(select(Booking).order_by(Booking.date, Booking.time, Booking.id))
    return list(result.scalars().all())


async def list_bookings_for_user(session: AsyncSession, user_id: int) -> list[Booking]:
    result = await session.execute(
        select(Booking).where(Booking.user_id == user_id).order_by(Booking.date, Booking.time)
    )
    return list(result.scalars().all())


async def reschedule_booking(
    session: AsyncSession, booking_id: int, new_date: date, new_time: time
) -> Booking:
    """Move a booking to a new slot and carry its blocked window along.

    Unpaid bookings own no window yet; theirs is created on payment confirmation.
    """
    t = _check_slot(new_time)
    booking = await get_booking(session, booking_id)
    if booking.is_canceled:
        raise ValidationFailed(f"Booking {booking_id} is canceled")
    if await find_live_booking_at(session, new_date, t, exclude_id=booking_id):
        raise SlotConflict(f"Slot {new_date.isoformat()} {t.isoformat()} is already booked")

    await unblock_around(session, booking_id)
    booking.date = new_date
    booking.time = t
    booking.status = STATUS_RESCHEDULED
    booking.updated_at = _utc_naive_now()
    session.add(booking)
    await _flush_slot_change(session, new_date, t)
    if booking.is_paid:
        await block_around(session, booking_id, new_date)
    logger.info("Booking %s rescheduled to %s %s", booking_id, new_date, t)
    return booking


async def cancel_booking(session: AsyncSession, booking_id: int) -> Booking:
    """Soft-cancel: the row stays with status Canceled and its blocked window is released."""
    booking = await get_booking(session, booking_id)
    if booking.is_canceled:
        raise ValidationFailed(f"Booking {booking_id} is already canceled")
    booking.status = STATUS_CANCELED
    booking.updated_at = _utc_naive_now()
    session.add(booking)
    await session.flush()
    removed = await unblock_around(session, booking_id)
    logger.info("Booking %s canceled (%d blocked date(s) released)", booking_id, removed)
    return booking


async def release_blocked_window(session: AsyncSession, booking_id: int) -> int:
    await get_booking(session, booking_id)
    return await unblock_around(session, booking_id)


async def expire_pending_bookings(
    session: AsyncSession, ttl_minutes: int, now: datetime | None = None
) -> int:
    """Delete bookings still awaiting payment after `ttl_minutes`. Returns count deleted.

    The payment predicate is part of the DELETE itself, so a booking confirmed
    between reads is never removed.
    """
    cutoff = (now or _utc_naive_now()) - timedelta(minutes=ttl_minutes)
    result = await session.execute(
        delete(Booking).where(
            Booking.payment_status == PAYMENT_PENDING,
            Booking.created_at < cutoff,
        )
    )
    await session.flush()
    return result.rowcount or 0
