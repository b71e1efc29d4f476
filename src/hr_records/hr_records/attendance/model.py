from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee's attendance for one calendar day."""

    id: int
    user_id: int
    work_date: date
    status: AttendanceStatus
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    work_hours: Optional[float] = None
    note: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "date": self.work_date.isoformat(),
            "status": self.status.value,
            "check_in": self.check_in.isoformat() if self.check_in else None,
            "check_out": self.check_out.isoformat() if self.check_out else None,
            "work_hours": self.work_hours,
            "note": self.note,
        }


@dataclass(frozen=True)
class AttendanceReportRow:
    """Read-model for payroll exports: a record joined with its owner's identity."""

    user_id: int
    employee_id: str
    name: Optional[str]
    department: Optional[str]
    work_date: date
    status: AttendanceStatus
    work_hours: Optional[float] = None
