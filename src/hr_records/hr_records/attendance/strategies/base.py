from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from ...core.enums import AttendanceStatus
from ..model import AttendanceRecord

# Keys a Mark call may supply. A key that is present carries a value (possibly
# None, which clears the field); an absent key means "not supplied".
MARK_FIELDS = ("status", "check_in", "check_out", "note")


@dataclass(frozen=True)
class AttendanceDraft:
    """Field values a Mark call resolves to, before work hours are derived."""

    status: AttendanceStatus
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    note: Optional[str] = None


class MarkStrategy(ABC):
    """Strategy Pattern: how supplied fields combine with the stored record."""

    @abstractmethod
    def resolve(self, *, existing: Optional[AttendanceRecord], supplied: Mapping[str, Any]) -> AttendanceDraft:
        raise NotImplementedError
