from datetime import date, datetime, time, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dental_booking.core.config import settings
from dental_booking.models.booking import STATUS_CANCELED, Booking


def slot_catalog() -> list[time]:
    """Daily slot start times: business_start_hour up to (excluding) business_end_hour."""
    slots: list[time] = []
    day = date(2000, 1, 1)
    current = datetime.combine(day, time(settings.business_start_hour, 0))
    end = datetime.combine(day, time(0, 0)) + timedelta(hours=settings.business_end_hour)
    delta = timedelta(minutes=settings.slot_duration_minutes)
    while current < end:
        slots.append(current.time())
        current += delta
    return slots


def is_catalog_time(t: time) -> bool:
    return t.replace(microsecond=0, tzinfo=None) in slot_catalog()


async def get_booked_times(session: AsyncSession, d: date) -> set[time]:
    """Times held on `d` by any booking that is not canceled."""
    result = await session.execute(
        select(Booking.time).where(
            Booking.date == d,
            Booking.status != STATUS_CANCELED,
        )
    )
    return {row[0] for row in result.all()}


async def get_available_times(session: AsyncSession, d: date) -> list[time]:
    booked = await get_booked_times(session, d)
    return [t for t in slot_catalog() if t not in booked]
