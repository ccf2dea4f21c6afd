# src/rms_reminders/channels/offline.py

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class LoggingSender:
    """
    Offline sender used when no email provider is configured.

    Writes the message to the log and reports success, so local runs exercise
    the whole cycle (dedup, quota, persistence) without external services.
    """

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []

    async def send_message(self, address: str, subject: str, body: str) -> bool:
        self.sent.append((address, subject, body))
        logger.info("Offline send to=%s subject=%r\n%s", address, subject, body)
        return True
