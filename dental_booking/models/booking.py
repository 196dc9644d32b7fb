import datetime as dt

from pydantic import NaiveDatetime
from sqlalchemy import DateTime, Index, text
from sqlmodel import Field, SQLModel

PAYMENT_PENDING = "Pending"
PAYMENT_COMPLETED = "Completed"

STATUS_ACTIVE = "Active"
STATUS_RESCHEDULED = "Rescheduled"
STATUS_CANCELED = "Canceled"


def _utc_naive_now() -> dt.datetime:
    """Naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    return dt.datetime.now(dt.UTC).replace(tzinfo=None)


class Booking(SQLModel, table=True):
    __tablename__ = "bookings"
    __table_args__ = (
        # At most one live booking per slot; canceled rows are kept for audit
        Index(
            "uq_bookings_live_slot",
            "date",
            "time",
            unique=True,
            postgresql_where=text("status <> 'Canceled'"),
            sqlite_where=text("status <> 'Canceled'"),
        ),
    )

    id: int | None = Field(default=None, primary_key=True)
    user_id: int | None = Field(default=None, foreign_key="users.id", ondelete="SET NULL", index=True)
    dentist_name: str = Field(max_length=255)
    patient_name: str | None = Field(default=None, max_length=255)
    email: str = Field(max_length=255)
    phone: str = Field(max_length=20)
    address: str | None = None
    date: dt.date = Field(index=True)
    time: dt.time
    payment_status: str = Field(default=PAYMENT_PENDING, max_length=50, index=True)
    status: str = Field(default=STATUS_ACTIVE, max_length=50)
    payment_id: str | None = None
    created_at: NaiveDatetime = Field(default_factory=_utc_naive_now, index=True, sa_type=DateTime())
    updated_at: NaiveDatetime = Field(default_factory=_utc_naive_now, sa_type=DateTime())

    @property
    def is_canceled(self) -> bool:
        return self.status == STATUS_CANCELED

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PAYMENT_COMPLETED


class BookingCreate(SQLModel):
    dentist_name: str
    patient_name: str | None = None
    email: str
    phone: str
    address: str | None = None
    date: dt.date
    time: dt.time


class BookingPublic(SQLModel):
    id: int
    user_id: int | None = None
    dentist_name: str
    patient_name: str | None = None
    email: str
    phone: str
    address: str | None = None
    date: dt.date
    time: dt.time
    payment_status: str
    status: str
    payment_id: str | None = None
    created_at: NaiveDatetime
