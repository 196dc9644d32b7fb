from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env from project root so it loads regardless of cwd
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(str(_ENV_FILE), ".env", "../.env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str

    # JWT
    secret_key: str
    access_token_expire_minutes: int = 24 * 60
    algorithm: str = "HS256"

    # CORS
    cors_origins: str = "http://localhost:3000"

    # Daily slot catalog: 09:00 .. 16:30 in 30-minute steps
    slot_duration_minutes: int = 30
    business_start_hour: int = 9
    business_end_hour: int = 17  # exclusive, so last slot starts at 16:30
    # Unpaid bookings are swept after this many minutes
    pending_booking_ttl_minutes: int = 5
    expiry_sweep_interval_seconds: int = 60

    # Stripe
    stripe_secret_key: str = ""
    stripe_currency: str = "gbp"

    # Env
    env: str = "development"

    # Email (SMTP). Leave smtp_host empty to disable sending.
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    from_email: str = ""
    from_name: str = "DNH Dental"
    # Receives a copy of every confirmed payment
    ops_email: str = ""
    site_name: str = "DNH Dental"
    # Link target for "cancel or reschedule" in customer emails
    frontend_url: str = "http://localhost:3000"

    # Avatars
    upload_dir: str = str(_PROJECT_ROOT / "uploads")
    default_avatar: str = "/uploads/default-avatar.png"

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def email_enabled(self) -> bool:
        return bool(self.smtp_host and self.smtp_user and self.smtp_password and self.from_email)

    @property
    def stripe_enabled(self) -> bool:
        return bool(self.stripe_secret_key)


settings = Settings()
