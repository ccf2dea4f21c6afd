# tests/conftest.py

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from types import SimpleNamespace

import pytest

from rms_reminders.reminders.engine import ReminderEngine
from rms_reminders.reminders.models import NotificationPrefs, User
from rms_reminders.storage.state_store import JsonStateStore

from .fakes import FakeDataSource, FakeSender

NOW = datetime(2024, 6, 12, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def now() -> datetime:
    return NOW


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the engine and CLI modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="rms-test",
        log_level="INFO",
        console_enabled=False,
        data_dir=tmp_path,
        state_path=tmp_path / "reminder_state.json",
        data_path=tmp_path / "rms_data.json",
        scan_interval_seconds=300.0,
        initial_delay_seconds=0.0,
        upcoming_window_days=3,
        sent_retention_days=7,
        dismissed_retention_days=0,
        emailjs_configured=False,
        sms_default_carrier="verizon",
    )


@pytest.fixture()
def user() -> User:
    return User(
        id="u1",
        name="Alice",
        email="alice@example.com",
        phone="(555) 123-4567",
        sms_carrier="att",
        notifications=NotificationPrefs(email=True, sms=False),
    )


@pytest.fixture()
def source(user: User) -> FakeDataSource:
    return FakeDataSource(user=user)


@pytest.fixture()
def sender() -> FakeSender:
    return FakeSender()


@pytest.fixture()
def store(settings: SimpleNamespace) -> JsonStateStore:
    # Real JSON store: persistence is part of what the engine tests check.
    return JsonStateStore(settings.state_path)


@pytest.fixture()
def engine(source: FakeDataSource, store: JsonStateStore, sender: FakeSender, now: datetime) -> ReminderEngine:
    return ReminderEngine(source, store, sender, clock=lambda: now)
