from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, AttendanceReportRow


class AttendanceRepository(Protocol):
    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def upsert(
        self,
        *,
        user_id: int,
        work_date: date,
        status: AttendanceStatus,
        check_in: Optional[datetime],
        check_out: Optional[datetime],
        work_hours: Optional[float],
        note: Optional[str],
    ) -> AttendanceRecord:
        """Write the whole (user_id, work_date) record in one statement."""

        raise NotImplementedError

    def list_for_user(
        self,
        user_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        offset: int = 0,
        limit: int = 50,
    ) -> Sequence[AttendanceRecord]:
        """Newest day first."""

        raise NotImplementedError

    def count_for_user(
        self,
        user_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> int:
        raise NotImplementedError

    def users_with_record_on(self, work_date: date) -> set[int]:
        raise NotImplementedError

    def get_report_rows(self, *, start_date: date, end_date: date) -> Sequence[AttendanceReportRow]:
        raise NotImplementedError
