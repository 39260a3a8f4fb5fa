"""Runtime configuration sourced from environment variables."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def _as_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _default_data_file() -> Path:
    env_file = os.getenv("DATA_FILE")
    if env_file:
        return Path(env_file).expanduser().resolve()
    return Path(__file__).resolve().parents[2] / "data" / "storage.json"


def _split_origins(value: str) -> list[str]:
    return [origin.strip() for origin in value.split(",") if origin.strip()]


@dataclass
class Settings:
    environment: str = "production"

    # Snapshot persistence
    data_file: Path = field(default_factory=_default_data_file)
    autosave_interval: float = 300.0

    # Contact form double-submit suppression
    duplicate_window: float = 5.0
    duplicate_retention: float = 60.0

    # Outbound mail
    smtp_host: str = "smtp.zoho.com"
    smtp_port: int = 587
    smtp_secure: bool = False
    smtp_validate_certs: bool = True
    smtp_user: str | None = None
    smtp_password: str | None = None
    ops_email: str = "contact@websutech.com"
    reply_to: str | None = None
    mail_timeout: float = 15.0

    # Branding used by the email templates
    company_name: str = "Websutech"
    site_url: str = "https://websutech.com"

    cors_origins: list[str] = field(default_factory=list)

    # Logging
    log_level: str = "INFO"
    log_file: Path | None = None
    log_max_bytes: int = 5 * 1024 * 1024
    log_backups: int = 3

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @property
    def mail_configured(self) -> bool:
        return bool(self.smtp_user and self.smtp_password)

    @classmethod
    def from_env(cls) -> "Settings":
        origins = _split_origins(os.getenv("API_CORS_ORIGINS", ""))
        if not origins:
            origins = ["http://localhost:3000", "http://localhost:5500"]
        log_file = os.getenv("LOG_FILE")
        return cls(
            environment=os.getenv("APP_ENV", "production"),
            data_file=_default_data_file(),
            autosave_interval=float(os.getenv("AUTOSAVE_INTERVAL_SECONDS", "300")),
            duplicate_window=float(os.getenv("DUPLICATE_WINDOW_SECONDS", "5")),
            duplicate_retention=float(os.getenv("DUPLICATE_RETENTION_SECONDS", "60")),
            smtp_host=os.getenv("SMTP_HOST", "smtp.zoho.com"),
            smtp_port=int(os.getenv("SMTP_PORT", "587")),
            smtp_secure=_as_bool(os.getenv("SMTP_SECURE"), False),
            smtp_validate_certs=_as_bool(os.getenv("SMTP_VALIDATE_CERTS"), True),
            smtp_user=os.getenv("SMTP_USER") or None,
            smtp_password=os.getenv("SMTP_PASS") or None,
            ops_email=os.getenv("EMAIL_FROM") or "contact@websutech.com",
            reply_to=os.getenv("EMAIL_REPLY_TO") or None,
            mail_timeout=float(os.getenv("MAIL_TIMEOUT_SECONDS", "15")),
            company_name=os.getenv("COMPANY_NAME", "Websutech"),
            site_url=os.getenv("SITE_URL", "https://websutech.com").rstrip("/"),
            cors_origins=origins,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_file=Path(log_file).expanduser() if log_file else None,
            log_max_bytes=int(os.getenv("LOG_MAX_BYTES", str(5 * 1024 * 1024))),
            log_backups=int(os.getenv("LOG_BACKUPS", "3")),
        )


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide settings, reading the environment once."""

    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
