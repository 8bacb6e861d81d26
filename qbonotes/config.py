"""Centralized configuration for the qbonotes backend.

Re-exports everything from qbonotes.infrastructure.settings, then adds typed
constants for storage, reporting, rate limiting and the API. Credentials for
the optional integrations are read into a ``Settings`` object by
``load_settings()`` so the process entry point decides when the environment
is sampled.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from qbonotes.infrastructure.settings import *  # noqa: F401, F403
from qbonotes.infrastructure.settings import (
    DEFAULT_AUTH_FILE,
    DEFAULT_DB_PATH,
    DEFAULT_STORAGE_DIR,
    ENV,
    QBONOTES_API_URL,
)

# --- App ---
APP_VERSION: str = "1.0.0"

# --- Database ---
DB_CONNECT_TIMEOUT: float = float(os.getenv("QBONOTES_DB_CONNECT_TIMEOUT", "30.0"))
DB_RETRY_MAX: int = int(os.getenv("QBONOTES_DB_RETRY_MAX", "5"))
DB_RETRY_BASE_DELAY: float = float(os.getenv("QBONOTES_DB_RETRY_BASE_DELAY", "0.1"))
DB_RETRY_MAX_DELAY: float = float(os.getenv("QBONOTES_DB_RETRY_MAX_DELAY", "2.0"))
DB_RETRY_JITTER: float = float(os.getenv("QBONOTES_DB_RETRY_JITTER", "0.1"))

# --- Extraction ---
EXTRACT_MIN_AMOUNT: float = 0.01
EXTRACT_SETTLE_DELAY_SECONDS: float = 1.0
EXTRACT_MAX_HTML_CHARS: int = 5_000_000

# --- Reporting ---
DEFAULT_REPORT_TIMEZONE: str = "America/Los_Angeles"
DEFAULT_SLACK_DISPLAY_TIMEZONE: str = "America/New_York"
DEFAULT_SHEET_NAME: str = "QBO Transaction Notes"
DEFAULT_REPORT_SCHEDULE: str = "0 9 * * 1-5"

# --- Rate Limiting ---
RATE_LIMIT_RPM: int = 60
RATE_LIMIT_RPH: int = 1000
RATE_LIMIT_MAX_IPS: int = 10000

# --- Composer auth cache ---
AUTH_CACHE_SECONDS: int = 6 * 60 * 60

# --- Outbound HTTP ---
HTTP_TIMEOUT_SECONDS: float = 10.0


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() == "true"


@dataclass
class Settings:
    """Runtime configuration for one process.

    Every optional integration degrades to "disabled" when its credentials
    are missing; nothing here raises on absence.
    """

    env: str = ENV

    # Storage
    db_enabled: bool = True
    db_path: Path = DEFAULT_DB_PATH
    storage_dir: Path = Path(DEFAULT_STORAGE_DIR)
    write_fallback: bool = True

    # Slack
    slack_webhook_url: str | None = None
    slack_bot_token: str | None = None
    slack_channels: list[str] = field(default_factory=list)
    slack_display_timezone: str = DEFAULT_SLACK_DISPLAY_TIMEZONE
    slack_timeout_seconds: float = HTTP_TIMEOUT_SECONDS

    # Google Sheets
    sheets_id: str | None = None
    sheet_name: str = DEFAULT_SHEET_NAME
    service_account_email: str | None = None
    private_key: str | None = None

    # Reporting
    report_timezone: str = DEFAULT_REPORT_TIMEZONE
    report_schedule: str | None = None
    auto_start_scheduler: bool = False

    # Composer
    api_url: str = QBONOTES_API_URL
    auth_endpoint: str | None = None
    auth_bypass: bool = True
    auth_file: Path = DEFAULT_AUTH_FILE

    @property
    def sheets_configured(self) -> bool:
        return bool(self.sheets_id and self.service_account_email and self.private_key)

    @property
    def slack_configured(self) -> bool:
        return bool(self.slack_webhook_url or (self.slack_bot_token and self.slack_channels))


def load_settings() -> Settings:
    """Build Settings from the current environment."""
    private_key = os.getenv("GOOGLE_PRIVATE_KEY")
    if private_key:
        private_key = private_key.replace("\\n", "\n")

    channels = [
        channel
        for channel in (os.getenv("SLACK_CHANNEL"), os.getenv("SLACK_SHARED_CHANNEL"))
        if channel
    ]

    return Settings(
        env=os.getenv("QBONOTES_ENV", "development"),
        db_enabled=_flag("QBONOTES_DB_ENABLED", "true"),
        db_path=Path(os.getenv("QBONOTES_DB_PATH", str(DEFAULT_DB_PATH))),
        storage_dir=Path(os.getenv("NOTES_STORAGE_DIR", DEFAULT_STORAGE_DIR)),
        write_fallback=_flag("QBONOTES_WRITE_FALLBACK", "true"),
        slack_webhook_url=os.getenv("SLACK_WEBHOOK_URL") or None,
        slack_bot_token=os.getenv("SLACK_BOT_TOKEN") or None,
        slack_channels=channels,
        slack_display_timezone=os.getenv("SLACK_DISPLAY_TIMEZONE", DEFAULT_SLACK_DISPLAY_TIMEZONE),
        slack_timeout_seconds=float(os.getenv("SLACK_TIMEOUT_SECONDS", str(HTTP_TIMEOUT_SECONDS))),
        sheets_id=os.getenv("GOOGLE_SHEETS_ID") or None,
        sheet_name=os.getenv("GOOGLE_SHEET_NAME", DEFAULT_SHEET_NAME),
        service_account_email=os.getenv("GOOGLE_SERVICE_ACCOUNT_EMAIL") or None,
        private_key=private_key or None,
        report_timezone=os.getenv("REPORT_TIMEZONE", DEFAULT_REPORT_TIMEZONE),
        report_schedule=os.getenv("DAILY_REPORT_SCHEDULE") or None,
        auto_start_scheduler=_flag("AUTO_START_SCHEDULER"),
        api_url=os.getenv("QBONOTES_API_URL", QBONOTES_API_URL),
        auth_endpoint=os.getenv("QBONOTES_AUTH_ENDPOINT") or None,
        auth_bypass=_flag("QBONOTES_AUTH_BYPASS", "true"),
        auth_file=Path(os.getenv("QBONOTES_AUTH_FILE", str(DEFAULT_AUTH_FILE))),
    )
