import datetime as dt

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class BlockedDate(SQLModel, table=True):
    __tablename__ = "blocked_dates"
    __table_args__ = (UniqueConstraint("booking_id", "date", name="uq_blocked_dates_booking_date"),)

    id: int | None = Field(default=None, primary_key=True)
    date: dt.date = Field(index=True)
    booking_id: int = Field(foreign_key="bookings.id", ondelete="CASCADE", index=True)


class BlockedDatePublic(SQLModel):
    id: int
    date: dt.date
    booking_id: int
