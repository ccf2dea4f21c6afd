# src/rms_reminders/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the reminder engine.

The engine depends on Protocols instead of concrete implementations.
This keeps data sources, persistence and transports swappable and makes testing easier.
"""

from typing import Awaitable, Protocol

from ..reminders.models import EngineState, Project, Task, User


class DataSource(Protocol):
    """Read-only view of the task manager's collections."""

    def list_tasks(self) -> list[Task]: ...
    def list_projects(self) -> list[Project]: ...
    def current_user(self) -> User | None: ...


class StateRepo(Protocol):
    """
    Whole-state persistence round-trip.

    load() must not raise (fall back to an empty EngineState);
    save() reports failure as False instead of raising.
    """

    def load(self) -> EngineState: ...
    def save(self, state: EngineState) -> bool: ...


class ChannelSender(Protocol):
    """
    Black-box transport. The engine only looks at the boolean outcome.

    SMS goes through the same port: the address is an email-to-SMS gateway address.
    """

    def send_message(self, address: str, subject: str, body: str) -> Awaitable[bool]: ...
