from __future__ import annotations

from datetime import date, datetime
from typing import Protocol


class ReminderRepository(Protocol):
    """Persisted "reminder sent" markers, one per (employee, day)."""

    def claim(self, *, user_id: int, work_date: date, sent_at: datetime) -> bool:
        """Insert the marker; False when it already exists."""

        raise NotImplementedError

    def release(self, *, user_id: int, work_date: date) -> None:
        raise NotImplementedError
