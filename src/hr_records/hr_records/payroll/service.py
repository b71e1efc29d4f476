from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..audit.model import RequestMeta
from ..audit.service import AuditService
from ..common.datetime_utils import day_string, parse_day
from ..common.spreadsheets import XLSX_MIMETYPE, write_xlsx
from ..core.enums import AttendanceStatus, AuditAction
from ..core.exceptions import ValidationError
from ..core.permissions import Permission, require_permission
from ..employees.model import Employee

PAYROLL_COLUMNS = (
    ("employee_id", "Employee ID"),
    ("name", "Name"),
    ("department", "Department"),
    ("present", "Present"),
    ("absent", "Absent"),
    ("leave", "Leave"),
    ("halfday", "Half Day"),
    ("total_hours", "Total Hours"),
)


@dataclass(frozen=True)
class PayrollExport:
    filename: str
    content: bytes
    mimetype: str = XLSX_MIMETYPE


class PayrollReportService:
    def __init__(self, attendance: AttendanceRepository, audit: AuditService):
        self._attendance = attendance
        self._audit = audit

    def summarize(self, *, start: date, end: date) -> list[dict]:
        """Per-employee status counts and summed work hours over [start, end]."""

        summary_map: dict[int, dict] = {}
        for r in self._attendance.get_report_rows(start_date=start, end_date=end):
            s = summary_map.get(r.user_id)
            if not s:
                s = {
                    "user_id": r.user_id,
                    "employee_id": r.employee_id,
                    "name": r.name or "",
                    "department": r.department or "",
                    "total_hours": 0.0,
                }
                s.update({st.value: 0 for st in AttendanceStatus})
                summary_map[r.user_id] = s
            s[r.status.value] += 1
            s["total_hours"] += float(r.work_hours or 0)

        summary = []
        for s in summary_map.values():
            s["total_hours"] = round(s["total_hours"], 2)
            summary.append(s)

        summary.sort(key=lambda x: x["employee_id"])
        return summary

    def export_payroll(
        self,
        *,
        actor: Employee,
        start: str | date | None,
        end: str | date | None,
        meta: Optional[RequestMeta] = None,
        now: Optional[datetime] = None,
    ) -> PayrollExport:
        require_permission(actor.role, Permission.EXPORT_PAYROLL)
        if not start or not end:
            raise ValidationError("from and to are required (YYYY-MM-DD)")
        start_day = parse_day(start)
        end_day = parse_day(end)
        if start_day > end_day:
            raise ValidationError("from must not be after to")

        rows = self.summarize(start=start_day, end=end_day)
        content = write_xlsx(rows, columns=PAYROLL_COLUMNS, sheet_name="Payroll")

        self._audit.log(
            actor=actor,
            action=AuditAction.PAYROLL_EXPORTED,
            target_type="Attendance",
            target_id=f"{day_string(start_day)}..{day_string(end_day)}",
            details={"employees": len(rows)},
            meta=meta,
            now=now,
        )
        return PayrollExport(
            filename=f"payroll_attendance_{day_string(start_day)}_to_{day_string(end_day)}.xlsx",
            content=content,
        )
