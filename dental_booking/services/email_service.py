import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from dental_booking.core.config import Settings, settings
from dental_booking.models.booking import BookingPublic

logger = logging.getLogger(__name__)


class Mailer:
    """SMTP sender built once per process; opens one connection per message.

    Sending never raises: failures are logged, the booking they describe is
    already committed.
    """

    def __init__(self, config: Settings) -> None:
        self.config = config

    @property
    def enabled(self) -> bool:
        return self.config.email_enabled

    def send(self, to_email: str, subject: str, html_body: str) -> bool:
        if not self.enabled:
            logger.debug("Email disabled (SMTP not configured), skipping send")
            return False
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self.config.from_name} <{self.config.from_email}>"
        msg["To"] = to_email
        msg.attach(MIMEText(html_body, "html", "utf-8"))
        try:
            with smtplib.SMTP(self.config.smtp_host, self.config.smtp_port) as server:
                server.starttls()
                server.login(self.config.smtp_user, self.config.smtp_password)
                server.sendmail(self.config.from_email, [to_email], msg.as_string())
            logger.info("Email sent to %s", to_email)
            return True
        except Exception as e:
            logger.exception("Failed to send email to %s: %s", to_email, e)
            return False


mailer = Mailer(settings)


def _html_escape(s: str) -> str:
    return (
        s.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def _manage_link(booking: BookingPublic) -> str:
    return f"{settings.frontend_url.rstrip('/')}/profile/{booking.id}"


def _details_rows(booking: BookingPublic, payment_status: str | None = None) -> str:
    rows = [
        ("Booking ID", str(booking.id)),
        ("Dentist", booking.dentist_name),
        ("Patient Name", booking.patient_name or ""),
        ("Email", booking.email),
        ("Phone", booking.phone),
        ("Date", booking.date.strftime("%B %d, %Y")),
        ("Time", booking.time.strftime("%H:%M")),
        ("Address", booking.address or ""),
    ]
    if payment_status:
        rows.append(("Payment Status", payment_status))
    return "\n".join(
        f"      <li><strong>{label}:</strong> {_html_escape(value)}</li>" for label, value in rows
    )


def _wrap(title: str, body: str) -> str:
    return f"""
<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>{title}</title>
</head>
<body style="margin:0;padding:24px;font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,sans-serif;color:#111827;">
{body}
  <p style="margin-top:24px;font-size:13px;color:#6b7280;">Best regards,<br>The {_html_escape(settings.site_name)} Team</p>
</body>
</html>
"""


def build_payment_confirmation_html(booking: BookingPublic) -> str:
    name = _html_escape(booking.dentist_name or "there")
    body = f"""
  <p>Dear {name},</p>
  <p>Your payment for booking ID: <strong>{booking.id}</strong> has been successfully processed.</p>
  <p>Here are your booking details:</p>
    <ul>
{_details_rows(booking, payment_status="Completed")}
    </ul>
  <p>If you would like to cancel or reschedule your booking, please use the link below:</p>
  <p><a href="{_manage_link(booking)}">Cancel or Reschedule Booking</a></p>
"""
    return _wrap("Payment Confirmation", body)


def build_ops_payment_notification_html(booking_id: int, payment_id: str) -> str:
    body = f"""
  <p>A new payment has been received for booking ID: <strong>{booking_id}</strong>.</p>
  <p><strong>Payment ID:</strong> {_html_escape(payment_id)}</p>
  <p>Please review the booking details in the admin portal.</p>
"""
    return _wrap("New Booking Payment Received", body)


def build_reschedule_html(booking: BookingPublic) -> str:
    name = _html_escape(booking.dentist_name or "there")
    body = f"""
  <p>Dear {name},</p>
  <p>Your booking <strong>{booking.id}</strong> has been moved. The new details are:</p>
    <ul>
{_details_rows(booking)}
    </ul>
  <p><a href="{_manage_link(booking)}">Manage your booking</a></p>
"""
    return _wrap("Booking Rescheduled", body)


def build_cancellation_html(booking: BookingPublic) -> str:
    name = _html_escape(booking.dentist_name or "there")
    body = f"""
  <p>Dear {name},</p>
  <p>Your booking <strong>{booking.id}</strong> on {booking.date.strftime("%B %d, %Y")} at
  {booking.time.strftime("%H:%M")} has been canceled.</p>
"""
    return _wrap("Booking Canceled", body)


def send_payment_confirmation_email(booking: BookingPublic) -> None:
    """Customer receipt (call from background task)."""
    subject = f"{settings.site_name} – Payment Confirmation and Booking Details"
    mailer.send(booking.email, subject, build_payment_confirmation_html(booking))


def send_ops_payment_notification_email(booking_id: int, payment_id: str) -> None:
    """Copy for the practice's operations inbox (call from background task)."""
    ops_email = settings.ops_email or settings.from_email
    if not ops_email:
        logger.debug("No operations address configured, skipping payment notification")
        return
    subject = f"{settings.site_name} – New Booking Payment Received"
    mailer.send(ops_email, subject, build_ops_payment_notification_html(booking_id, payment_id))


def send_reschedule_email(booking: BookingPublic) -> None:
    subject = f"{settings.site_name} – Booking Rescheduled"
    mailer.send(booking.email, subject, build_reschedule_html(booking))


def send_cancellation_email(booking: BookingPublic) -> None:
    subject = f"{settings.site_name} – Booking Canceled"
    mailer.send(booking.email, subject, build_cancellation_html(booking))
