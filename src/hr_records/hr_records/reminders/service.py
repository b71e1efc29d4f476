from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import day_string, now_local
from ..core.enums import Role
from ..employees.repository import EmployeeRepository
from ..mail.sender import EmailSender
from .repository import ReminderRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepResult:
    day: date
    sent: int = 0
    skipped: int = 0
    failed: int = 0

    def to_dict(self) -> dict:
        return {"day": day_string(self.day), "sent": self.sent, "skipped": self.skipped, "failed": self.failed}


class ReminderService:
    """Daily sweep: remind employees who have not marked attendance.

    Idempotent per (employee, day): the marker is claimed before the e-mail
    goes out, and released again if sending fails so a later run can retry.
    """

    def __init__(
        self,
        employees: EmployeeRepository,
        attendance: AttendanceRepository,
        reminders: ReminderRepository,
        mailer: EmailSender,
    ):
        self._employees = employees
        self._attendance = attendance
        self._reminders = reminders
        self._mailer = mailer

    def sweep(self, *, day: Optional[date] = None, now: Optional[datetime] = None) -> SweepResult:
        now = now or now_local()
        day = day or now.date()
        label = day_string(day)

        marked = self._attendance.users_with_record_on(day)
        sent = skipped = failed = 0
        for employee in self._employees.list_by_role(Role.EMPLOYEE):
            if employee.id in marked:
                continue
            claimed = False
            try:
                claimed = self._reminders.claim(user_id=employee.id, work_date=day, sent_at=now)
                if not claimed:
                    skipped += 1
                    continue
                self._mailer.send(
                    to=employee.email,
                    subject="Reminder: Mark your attendance",
                    text=f"Hi, please mark your attendance for {label}.",
                    html=f"<p>Hi, please mark your attendance for <b>{label}</b>.</p>",
                )
            except Exception:
                logger.exception("Attendance reminder failed for employee %s", employee.employee_id)
                if claimed:
                    self._release(employee.employee_id, employee.id, day)
                failed += 1
                continue
            sent += 1

        logger.info("Attendance reminders for %s: sent=%s skipped=%s failed=%s", label, sent, skipped, failed)
        return SweepResult(day=day, sent=sent, skipped=skipped, failed=failed)

    def _release(self, employee_id: str, user_id: int, day: date) -> None:
        try:
            self._reminders.release(user_id=user_id, work_date=day)
        except Exception:
            logger.exception("Releasing reminder marker failed for employee %s", employee_id)
