import os
import tempfile
from datetime import date, time

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENV", "test")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="dental-uploads-"))
os.environ["SMTP_HOST"] = ""
os.environ["STRIPE_SECRET_KEY"] = ""

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

import dental_booking.models  # noqa: E402,F401 - register tables
from dental_booking.core.db import get_session  # noqa: E402
from dental_booking.main import app  # noqa: E402
from dental_booking.models.booking import BookingCreate  # noqa: E402
from dental_booking.services import email_service  # noqa: E402
from dental_booking.services.booking_service import create_booking  # noqa: E402
from dental_booking.services.payment_gateway import PaymentIntentResult, get_payment_gateway  # noqa: E402


class FakeGateway:
    """Stands in for Stripe: statuses and owning bookings are set per payment id by the test."""

    def __init__(self) -> None:
        self.statuses: dict[str, str] = {}
        self.owners: dict[str, int] = {}
        self.created: list[tuple[int, str, int]] = []

    async def create_intent(self, amount_minor: int, currency: str, booking_id: int) -> PaymentIntentResult:
        self.created.append((amount_minor, currency, booking_id))
        intent_id = f"pi_test_{booking_id}_{len(self.created)}"
        self.owners[intent_id] = booking_id
        return PaymentIntentResult(
            id=intent_id,
            status="requires_payment_method",
            client_secret=f"{intent_id}_secret",
        )

    def succeed(self, payment_id: str, booking_id: int) -> None:
        self.statuses[payment_id] = "succeeded"
        self.owners[payment_id] = booking_id

    async def retrieve_intent(self, payment_id: str) -> PaymentIntentResult:
        owner = self.owners.get(payment_id)
        return PaymentIntentResult(
            id=payment_id,
            status=self.statuses.get(payment_id, "requires_payment_method"),
            booking_id=str(owner) if owner is not None else None,
        )


class RecordingMailer:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    def send(self, to_email: str, subject: str, html_body: str) -> bool:
        self.sent.append((to_email, subject))
        return True


@pytest.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def mailer(monkeypatch: pytest.MonkeyPatch) -> RecordingMailer:
    recording = RecordingMailer()
    monkeypatch.setattr(email_service, "mailer", recording)
    monkeypatch.setattr(email_service.settings, "ops_email", "ops@dnh.dental")
    return recording


@pytest.fixture
async def client(session_maker, gateway, mailer):
    async def _override_session():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = _override_session
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_booking(session):
    async def _make(d: date = date(2025, 3, 10), t: time = time(10, 0), **overrides):
        data = BookingCreate(
            dentist_name=overrides.pop("dentist_name", "Dr. Hale"),
            patient_name=overrides.pop("patient_name", "Sam Patient"),
            email=overrides.pop("email", "clinic@example.com"),
            phone=overrides.pop("phone", "07700900123"),
            address=overrides.pop("address", "1 High Street"),
            date=d,
            time=t,
        )
        booking = await create_booking(session, data, **overrides)
        await session.commit()
        return booking

    return _make
