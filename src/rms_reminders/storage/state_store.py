# src/rms_reminders/storage/state_store.py

from __future__ import annotations

import contextlib
import json
import logging
import os
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from ..reminders.models import EngineState, utcnow

logger = logging.getLogger(__name__)


class JsonStateStore:
    """
    Reminder state persisted as one JSON document.

    - load(): missing or unreadable file -> empty EngineState (logged, never raises);
      entries that had no timestamp are stamped once and written back
    - save(): write to a temp file, then os.replace() over the real one;
      returns False on failure instead of raising
    """

    def __init__(self, path: str | Path = "reminder_state.json", *, clock: Callable[[], datetime] = utcnow) -> None:
        self._path = Path(path)
        self._clock = clock
        self._path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("JsonStateStore ready path=%s", self._path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> EngineState:
        if not self._path.exists():
            return EngineState()
        try:
            data = json.loads(self._path.read_text("utf-8"))
        except (OSError, ValueError):
            logger.exception("Failed to load reminder state from %s; starting empty", self._path)
            return EngineState()

        if not isinstance(data, dict):
            logger.warning("Reminder state in %s is not an object; starting empty", self._path)
            return EngineState()
        state, filled = EngineState.parse(data, now=self._clock())
        if filled:
            logger.info("Stamped reminder state entries without timestamps in %s", self._path)
            self.save(state)
        return state

    def save(self, state: EngineState) -> bool:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(".tmp")
            tmp.write_text(json.dumps(state.to_dict(), ensure_ascii=False, indent=2), "utf-8")
            os.replace(tmp, self._path)
        except (OSError, TypeError, ValueError):
            logger.exception("Failed to save reminder state to %s", self._path)
            return False

        with contextlib.suppress(OSError):
            # Contains user email addresses.
            os.chmod(self._path, 0o600)
        return True
