from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.exceptions import ValidationError
from .base import WorkHoursCalculator


class StandardWorkHoursCalculator(WorkHoursCalculator):
    """Standard rule: (out - in) in hours, rounded to 2 decimals; undefined unless both are set."""

    def work_hours(self, check_in: Optional[datetime], check_out: Optional[datetime]) -> Optional[float]:
        if not check_in or not check_out:
            return None
        seconds = (check_out - check_in).total_seconds()
        if seconds < 0:
            raise ValidationError("Check-out cannot be earlier than check-in")
        return round(seconds / 3600, 2)
