import smtplib
from datetime import date, datetime, time

import pytest

from dental_booking.core.config import Settings
from dental_booking.models.booking import BookingPublic
from dental_booking.services.email_service import (
    Mailer,
    build_cancellation_html,
    build_ops_payment_notification_html,
    build_payment_confirmation_html,
)


def _smtp_settings() -> Settings:
    return Settings(
        smtp_host="smtp.example.com",
        smtp_user="noreply@example.com",
        smtp_password="secret",
        from_email="noreply@example.com",
    )


def _booking() -> BookingPublic:
    return BookingPublic(
        id=7,
        dentist_name="Dr. <Hale>",
        patient_name="Sam",
        email="clinic@example.com",
        phone="07700900123",
        address="1 High Street",
        date=date(2025, 3, 10),
        time=time(10, 0),
        payment_status="Completed",
        status="Active",
        payment_id="pi_1",
        created_at=datetime(2025, 3, 1, 12, 0),
    )


def test_mailer_skips_when_smtp_not_configured(monkeypatch: pytest.MonkeyPatch) -> None:
    def _fail(*args, **kwargs):
        raise AssertionError("SMTP must not be contacted")

    monkeypatch.setattr(smtplib, "SMTP", _fail)

    assert Mailer(Settings(smtp_host="")).send("a@example.com", "Hi", "<p>x</p>") is False


def test_mailer_logs_and_swallows_transport_failure(monkeypatch: pytest.MonkeyPatch, caplog) -> None:
    def _refuse(host, port):
        raise smtplib.SMTPConnectError(421, "unavailable")

    monkeypatch.setattr(smtplib, "SMTP", _refuse)

    assert Mailer(_smtp_settings()).send("a@example.com", "Hi", "<p>x</p>") is False
    assert "Failed to send email to a@example.com" in caplog.text


def test_payment_confirmation_escapes_and_links_booking() -> None:
    html = build_payment_confirmation_html(_booking())

    assert "Dr. &lt;Hale&gt;" in html
    assert "/profile/7" in html
    assert "March 10, 2025" in html


def test_ops_notification_mentions_booking_and_payment() -> None:
    html = build_ops_payment_notification_html(7, "pi_1")

    assert "<strong>7</strong>" in html
    assert "pi_1" in html


def test_cancellation_mentions_slot() -> None:
    html = build_cancellation_html(_booking())

    assert "10:00" in html
    assert "canceled" in html
