# src/rms_reminders/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time (EmailJS keys are optional).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "RMS"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


# Real environment variables win over .env values.
load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    console_enabled: bool

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    state_path: Path
    data_path: Path

    # ---- Scan cycle ----
    scan_interval_seconds: float
    initial_delay_seconds: float
    upcoming_window_days: int
    sent_retention_days: int
    dismissed_retention_days: int  # 0 => dismissals never expire

    # ---- EmailJS ----
    emailjs_service_id: str
    emailjs_template_id: str
    emailjs_public_key: str
    emailjs_private_key: str
    emailjs_api_url: str
    email_from_name: str
    http_timeout_seconds: float

    # ---- SMS (email-to-SMS gateway) ----
    sms_default_carrier: str

    @property
    def emailjs_configured(self) -> bool:
        return bool(self.emailjs_service_id and self.emailjs_template_id and self.emailjs_public_key)

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "rms-reminders")
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/rms"))
        state_path = _env_path(_k("STATE_PATH"), data_dir / "reminder_state.json")
        data_path = _env_path(_k("DATA_PATH"), data_dir / "rms_data.json")

        # Keep the scheduler from spinning on a bad value.
        scan_interval_seconds = max(1.0, _env_float(_k("SCAN_INTERVAL_SECONDS"), 300.0))
        initial_delay_seconds = max(0.0, _env_float(_k("INITIAL_DELAY_SECONDS"), 10.0))
        upcoming_window_days = max(0, _env_int(_k("UPCOMING_WINDOW_DAYS"), 3))
        sent_retention_days = max(1, _env_int(_k("SENT_RETENTION_DAYS"), 7))
        dismissed_retention_days = max(0, _env_int(_k("DISMISSED_RETENTION_DAYS"), 0))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            data_dir=data_dir,
            state_path=state_path,
            data_path=data_path,
            scan_interval_seconds=scan_interval_seconds,
            initial_delay_seconds=initial_delay_seconds,
            upcoming_window_days=upcoming_window_days,
            sent_retention_days=sent_retention_days,
            dismissed_retention_days=dismissed_retention_days,
            emailjs_service_id=_env(_k("EMAILJS_SERVICE_ID")).strip(),
            emailjs_template_id=_env(_k("EMAILJS_TEMPLATE_ID")).strip(),
            emailjs_public_key=_env(_k("EMAILJS_PUBLIC_KEY")).strip(),
            emailjs_private_key=_env(_k("EMAILJS_PRIVATE_KEY")).strip(),
            emailjs_api_url=_env(_k("EMAILJS_API_URL"), "https://api.emailjs.com/api/v1.0/email/send"),
            email_from_name=_env(_k("EMAIL_FROM_NAME"), "RMS Notification System"),
            http_timeout_seconds=max(1.0, _env_float(_k("HTTP_TIMEOUT_SECONDS"), 10.0)),
            sms_default_carrier=_env(_k("SMS_DEFAULT_CARRIER"), "verizon").strip().lower() or "verizon",
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
