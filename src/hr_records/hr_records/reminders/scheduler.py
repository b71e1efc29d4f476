from __future__ import annotations

import logging
import threading
from datetime import datetime, time, timedelta
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)


def parse_run_time(value: str) -> time:
    try:
        return datetime.strptime((value or "").strip(), "%H:%M").time()
    except ValueError:
        raise ValidationError(f"Invalid reminder time: {value!r} (HH:MM)")


def next_run_after(now: datetime, at: time) -> datetime:
    candidate = datetime.combine(now.date(), at)
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate


class DailyScheduler:
    """Runs ``job`` once per day at a fixed server-local time on a daemon thread."""

    def __init__(self, job: Callable[[], object], *, at: time, clock: Callable[[], datetime] = now_local):
        self._job = job
        self._at = at
        self._clock = clock
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="attendance-reminders", daemon=True)
        self._thread.start()
        logger.info("Attendance reminder scheduler started (daily at %s)", self._at.strftime("%H:%M"))

    def stop(self) -> None:
        self._stop.set()

    def _run(self) -> None:
        while not self._stop.is_set():
            now = self._clock()
            wait = (next_run_after(now, self._at) - now).total_seconds()
            if self._stop.wait(wait):
                return
            try:
                self._job()
            except Exception:
                logger.exception("Scheduled attendance reminder sweep failed")
