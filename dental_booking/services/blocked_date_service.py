from datetime import date, timedelta

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from dental_booking.models.blocked_date import BlockedDate


def blocked_window(d: date) -> list[date]:
    """The day before, the day itself and the day after."""
    return [d - timedelta(days=1), d, d + timedelta(days=1)]


async def block_around(session: AsyncSession, booking_id: int, d: date) -> list[BlockedDate]:
    """Insert the blocked window for a booking, skipping days it already owns."""
    result = await session.execute(
        select(BlockedDate.date).where(BlockedDate.booking_id == booking_id)
    )
    owned = {row[0] for row in result.all()}
    rows = [
        BlockedDate(date=day, booking_id=booking_id)
        for day in blocked_window(d)
        if day not in owned
    ]
    session.add_all(rows)
    await session.flush()
    return rows


async def unblock_around(session: AsyncSession, booking_id: int) -> int:
    """Delete every blocked row owned by the booking. Returns count deleted.

    Rows are matched by owner, never by date: windows of neighbouring bookings
    overlap and must survive.
    """
    result = await session.execute(
        delete(BlockedDate).where(BlockedDate.booking_id == booking_id)
    )
    await session.flush()
    return result.rowcount or 0


async def list_blocked_dates(session: AsyncSession) -> list[BlockedDate]:
    result = await session.execute(
        select(BlockedDate).order_by(BlockedDate.date, BlockedDate.booking_id)
    )
    return list(result.scalars().all())


async def list_blocked_dates_for_booking(session: AsyncSession, booking_id: int) -> list[BlockedDate]:
    result = await session.execute(
        select(BlockedDate).where(BlockedDate.booking_id == booking_id).order_by(BlockedDate.date)
    )
    return list(result.scalars().all())
