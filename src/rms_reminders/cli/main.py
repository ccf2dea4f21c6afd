# src/rms_reminders/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then:
- `--once`: runs a single scan cycle and exits (cron-friendly),
- otherwise starts the reminder scheduler in a background thread and runs the
  console REPL in the main thread (or just waits when the console is disabled).
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
import threading

from ..config import get_settings
from ..logging_setup import setup_logging
from .background import start_scheduler_in_background
from .bootstrap import create_initial_state
from .commands import format_scan_report
from .console import run_console_loop

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="rms-reminders", description="Deadline notification & reminder engine")
    parser.add_argument("--once", action="store_true", help="Run one scan cycle and exit.")
    return parser.parse_args(argv)


async def _run_once(state) -> None:
    try:
        report = await state.engine.run_scan_cycle()
        print(format_scan_report(report))
    finally:
        close = getattr(state.sender, "close", None)
        if close is not None:
            await close()


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    # IMPORTANT: reuse same settings object
    state = create_initial_state(settings=settings)

    if args.once:
        asyncio.run(_run_once(state))
        return

    runner = start_scheduler_in_background(state)

    try:
        if settings.console_enabled:
            run_console_loop(state)
        else:
            # Use an Event so main can wait without a busy while-loop.
            stop_main = threading.Event()

            def _handle_signal(signum, _frame) -> None:
                logger.info("Signal %s received, shutting down...", signum)
                stop_main.set()

            # Some platforms may not support SIGTERM.
            with contextlib.suppress(ValueError, OSError, AttributeError):
                signal.signal(signal.SIGINT, _handle_signal)
                signal.signal(signal.SIGTERM, _handle_signal)

            logger.info("Console disabled. Running the scheduler only. Press Ctrl+C to stop.")
            stop_main.wait()
    finally:
        if runner is not None:
            runner.stop()
            runner.join(timeout=10.0)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
