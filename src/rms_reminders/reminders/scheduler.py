# src/rms_reminders/reminders/scheduler.py

from __future__ import annotations

"""
Reminder scheduler.

A small polling loop:
- waits a short initial delay after startup, then runs one scan cycle,
- keeps running a scan cycle every interval_seconds.

To stop the scheduler, cancel the coroutine/task.
"""

import asyncio
import logging

from .engine import ReminderEngine
from .models import ScanCycleReport

logger = logging.getLogger(__name__)


def _log_report(report: ScanCycleReport) -> None:
    if report.skipped:
        logger.debug("Scan cycle skipped: %s", report.skipped)
        return
    logger.info(
        "Scan cycle: overdue=%d upcoming=%d email=%s sms=%s sent=%d/%d saved=%s",
        len(report.new_overdue),
        len(report.new_upcoming),
        report.email_allowed,
        report.sms_allowed,
        report.dispatch.succeeded,
        report.dispatch.attempted,
        report.saved,
    )


async def run_reminder_scheduler(
        engine: ReminderEngine,
        *,
        interval_seconds: float = 300.0,
        initial_delay_seconds: float = 10.0,
) -> None:
    sleep_s = max(0.01, float(interval_seconds))
    delay_s = max(0.0, float(initial_delay_seconds))

    logger.info("Reminder scheduler started (initial_delay=%.1fs interval=%.1fs)", delay_s, sleep_s)
    await asyncio.sleep(delay_s)

    while True:
        try:
            report = await engine.run_scan_cycle()
            _log_report(report)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Scan cycle failed")

        await asyncio.sleep(sleep_s)
