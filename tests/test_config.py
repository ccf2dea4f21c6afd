# tests/test_config.py

from __future__ import annotations

import os
from pathlib import Path

import pytest

from rms_reminders.config import Settings


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for key in list(os.environ):
        if key.startswith("RMS_"):
            monkeypatch.delenv(key)
    return monkeypatch


def test_defaults(clean_env: pytest.MonkeyPatch) -> None:
    s = Settings.from_env()

    assert s.scan_interval_seconds == 300.0
    assert s.initial_delay_seconds == 10.0
    assert s.upcoming_window_days == 3
    assert s.sent_retention_days == 7
    assert s.dismissed_retention_days == 0
    assert s.state_path == Path(".local/rms") / "reminder_state.json"
    assert s.sms_default_carrier == "verizon"
    assert not s.emailjs_configured


def test_overrides_and_bad_values(clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
    clean_env.setenv("RMS_DATA_DIR", str(tmp_path))
    clean_env.setenv("RMS_SCAN_INTERVAL_SECONDS", "0")
    clean_env.setenv("RMS_UPCOMING_WINDOW_DAYS", "five")
    clean_env.setenv("RMS_CONSOLE_ENABLED", "no")
    clean_env.setenv("RMS_SMS_DEFAULT_CARRIER", " TMobile ")

    s = Settings.from_env()

    assert s.data_path == tmp_path / "rms_data.json"
    assert s.scan_interval_seconds == 1.0
    assert s.upcoming_window_days == 3
    assert s.console_enabled is False
    assert s.sms_default_carrier == "tmobile"


def test_emailjs_configured_needs_all_three_ids(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("RMS_EMAILJS_SERVICE_ID", "svc")
    clean_env.setenv("RMS_EMAILJS_TEMPLATE_ID", "tpl")
    assert not Settings.from_env().emailjs_configured

    clean_env.setenv("RMS_EMAILJS_PUBLIC_KEY", "pub")
    assert Settings.from_env().emailjs_configured
