from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional


class WorkHoursCalculator(ABC):
    """Calculator interface (Strategy Pattern for derived work hours)."""

    @abstractmethod
    def work_hours(self, check_in: Optional[datetime], check_out: Optional[datetime]) -> Optional[float]:
        raise NotImplementedError
