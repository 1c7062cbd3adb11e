"""
app/config.py — Central configuration loaded from environment variables.
All modules import settings from here; never read os.environ directly elsewhere.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Database ──────────────────────────────────────────────────────────────
    database_url: str = Field(..., description="PostgreSQL connection URI")

    # ── Hot-lead notifications ────────────────────────────────────────────────
    smtp_host: str = Field(default="smtp.gmail.com", description="SMTP server host")
    smtp_port: int = Field(default=465, gt=0, description="SMTP SSL port")
    smtp_user: str = Field(default="", description="SMTP login / sender address")
    smtp_password: str = Field(default="", description="SMTP password or app password")
    notify_email: str | None = Field(
        default=None,
        description="Recipient of hot-lead alerts. Alerts are skipped when unset.",
    )
    mailer_dry_run: bool = Field(
        default=True,
        description="If True, print alert emails to stdout instead of actually sending",
    )

    # ── Site ──────────────────────────────────────────────────────────────────
    public_site_url: str = Field(
        default="http://localhost:5000",
        description="Public base URL, used for admin links in alert emails",
    )

    # ── Logging ───────────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO", description="Root log level for the API")


# Singleton: import this everywhere
settings = Settings()
