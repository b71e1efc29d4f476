from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Optional

from ..audit.model import RequestMeta
from ..audit.service import AuditService
from ..common.datetime_utils import now_local, parse_clock, parse_day
from ..core.constants import DEFAULT_HISTORY_LIMIT, MAX_HISTORY_LIMIT
from ..core.enums import AttendanceStatus, AuditAction, MarkMode
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.permissions import Permission, is_allowed, require_permission
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..payroll.calculator.base import WorkHoursCalculator
from ..payroll.calculator.standard_calculator import StandardWorkHoursCalculator
from .factory import MarkStrategyFactory
from .model import AttendanceRecord
from .repository import AttendanceRepository
from .strategies.base import MARK_FIELDS


@dataclass(frozen=True)
class HistoryPage:
    records: list[AttendanceRecord]
    page: int
    limit: int
    total: int

    def to_dict(self) -> dict:
        return {
            "records": [r.to_dict() for r in self.records],
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
        }


def _parse_mode(value: Any) -> MarkMode:
    if isinstance(value, MarkMode):
        return value
    try:
        return MarkMode(str(value or MarkMode.PARTIAL.value).strip().lower())
    except ValueError:
        raise ValidationError("mode must be 'partial' or 'replace'")


def _parse_status(value: Any) -> Optional[AttendanceStatus]:
    if value is None or value == "":
        return None
    try:
        return AttendanceStatus(str(value).strip().lower())
    except ValueError:
        raise ValidationError("status must be one of present, absent, leave, halfday")


def _as_int(value: Any, name: str, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer")


class AttendanceService:
    """One record per (employee, calendar day), written by upsert."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        audit: AuditService,
        *,
        strategy_factory: MarkStrategyFactory | None = None,
        calculator: WorkHoursCalculator | None = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._audit = audit
        self._factory = strategy_factory or MarkStrategyFactory()
        self._calculator = calculator or StandardWorkHoursCalculator()

    def _parse_supplied(self, payload: Mapping[str, Any], day: date) -> dict[str, Any]:
        supplied: dict[str, Any] = {}
        if "status" in payload:
            supplied["status"] = _parse_status(payload["status"])
        if "check_in" in payload:
            supplied["check_in"] = parse_clock(payload["check_in"], day=day)
        if "check_out" in payload:
            supplied["check_out"] = parse_clock(payload["check_out"], day=day)
        if "note" in payload:
            note = payload["note"]
            supplied["note"] = str(note).strip() if note not in (None, "") else None
        return {k: v for k, v in supplied.items() if k in MARK_FIELDS}

    def _write(self, user_id: int, payload: Mapping[str, Any], *, now: datetime) -> AttendanceRecord:
        day = parse_day(payload.get("date"), default=now.date())
        mode = _parse_mode(payload.get("mode"))
        supplied = self._parse_supplied(payload, day)

        existing = self._attendance.get_for_user_and_date(user_id, day)
        draft = self._factory.for_mode(mode).resolve(existing=existing, supplied=supplied)
        hours = self._calculator.work_hours(draft.check_in, draft.check_out)

        return self._attendance.upsert(
            user_id=user_id,
            work_date=day,
            status=draft.status,
            check_in=draft.check_in,
            check_out=draft.check_out,
            work_hours=hours,
            note=draft.note,
        )

    def mark(
        self,
        *,
        employee: Employee,
        payload: Mapping[str, Any],
        meta: Optional[RequestMeta] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        """Upsert the caller's own record.

        ``payload`` keys: date, check_in, check_out, status, note, mode.
        Omitted keys are "not supplied"; in partial mode they keep stored values.
        """

        now = now or now_local()
        record = self._write(employee.id, payload, now=now)
        self._audit.log(
            actor=employee,
            action=AuditAction.ATTENDANCE_MARKED,
            target_type="Attendance",
            target_id=record.id,
            details={"date": record.work_date.isoformat(), "status": record.status.value},
            meta=meta,
            now=now,
        )
        return record

    def mark_for(
        self,
        *,
        actor: Employee,
        user_id: Any,
        payload: Mapping[str, Any],
        meta: Optional[RequestMeta] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        require_permission(actor.role, Permission.MARK_ATTENDANCE_FOR)
        if user_id is None or user_id == "":
            raise ValidationError("userId is required")
        target = self._employees.get_by_id(_as_int(user_id, "userId", 0))
        if not target:
            raise NotFoundError("Employee not found")

        now = now or now_local()
        record = self._write(target.id, payload, now=now)
        self._audit.log(
            actor=actor,
            action=AuditAction.ATTENDANCE_MARKED_FOR,
            target_type="Attendance",
            target_id=record.id,
            details={
                "employee_id": target.employee_id,
                "date": record.work_date.isoformat(),
                "status": record.status.value,
            },
            meta=meta,
            now=now,
        )
        return record

    def history(
        self,
        *,
        requester: Employee,
        user_id: Any = None,
        start: Any = None,
        end: Any = None,
        page: Any = 1,
        limit: Any = DEFAULT_HISTORY_LIMIT,
    ) -> HistoryPage:
        target_id = requester.id
        if user_id not in (None, "") and _as_int(user_id, "userId", requester.id) != requester.id:
            if not is_allowed(requester.role, Permission.VIEW_ANY_ATTENDANCE):
                raise AuthorizationError("Forbidden: you may only view your own attendance")
            target_id = _as_int(user_id, "userId", requester.id)

        start_day = parse_day(start) if start else None
        end_day = parse_day(end) if end else None
        if start_day and end_day and start_day > end_day:
            raise ValidationError("from must not be after to")

        page_no = _as_int(page, "page", 1)
        size = _as_int(limit, "limit", DEFAULT_HISTORY_LIMIT)
        if page_no < 1:
            raise ValidationError("page must be at least 1")
        if not 1 <= size <= MAX_HISTORY_LIMIT:
            raise ValidationError(f"limit must be between 1 and {MAX_HISTORY_LIMIT}")

        records = self._attendance.list_for_user(
            target_id,
            start_date=start_day,
            end_date=end_day,
            offset=(page_no - 1) * size,
            limit=size,
        )
        total = self._attendance.count_for_user(target_id, start_date=start_day, end_date=end_day)
        return HistoryPage(records=list(records), page=page_no, limit=size, total=total)

