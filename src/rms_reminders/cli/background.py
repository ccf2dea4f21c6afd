# src/rms_reminders/cli/background.py

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from dataclasses import dataclass

from ..core.state import AppState
from ..reminders.scheduler import run_reminder_scheduler

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SchedulerRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    task_holder: dict[str, asyncio.Task]

    def stop(self) -> None:
        task = self.task_holder.get("task")
        if task is None:
            return
        try:
            self.loop.call_soon_threadsafe(task.cancel)
        except RuntimeError:
            logger.debug("Scheduler loop already closed.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_scheduler_in_background(state: AppState) -> SchedulerRunner | None:
    """
    Start the reminder scheduler in a background thread with its own event loop.

    The console REPL is blocking (input()), so the periodic scan cycle runs beside it.
    """
    settings = state.settings
    ready = threading.Event()
    holder: dict[str, object] = {}
    task_holder: dict[str, asyncio.Task] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        holder["loop"] = loop

        task = loop.create_task(
            run_reminder_scheduler(
                state.engine,
                interval_seconds=settings.scan_interval_seconds,
                initial_delay_seconds=settings.initial_delay_seconds,
            )
        )
        task_holder["task"] = task
        ready.set()

        try:
            loop.run_until_complete(task)
        except asyncio.CancelledError:
            logger.info("Reminder scheduler stopped.")
        finally:
            close = getattr(state.sender, "close", None)
            if close is not None:
                with contextlib.suppress(Exception):
                    loop.run_until_complete(close())
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="reminder-scheduler", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    if not isinstance(loop, asyncio.AbstractEventLoop) or "task" not in task_holder:
        logger.error("Scheduler thread did not initialize properly.")
        return None

    state.loop = loop
    logger.info("Reminder scheduler thread started.")
    return SchedulerRunner(thread=t, loop=loop, task_holder=task_holder)
