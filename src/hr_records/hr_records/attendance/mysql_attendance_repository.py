from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord, AttendanceReportRow
from .repository import AttendanceRepository

_COLUMNS = "id, user_id, work_date, status, check_in, check_out, work_hours, note"


def _hours(value: Any) -> Optional[float]:
    # DECIMAL columns come back as Decimal.
    return float(value) if value is not None else None


def _row_to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        id=int(r["id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        status=AttendanceStatus(r["status"]),
        check_in=r.get("check_in"),
        check_out=r.get("check_out"),
        work_hours=_hours(r.get("work_hours")),
        note=r.get("note"),
    )


def _range_filter(user_id: int, start_date: Optional[date], end_date: Optional[date]) -> tuple[str, list]:
    where = ["user_id=%s"]
    params: list[Any] = [int(user_id)]
    if start_date:
        where.append("work_date >= %s")
        params.append(start_date)
    if end_date:
        where.append("work_date <= %s")
        params.append(end_date)
    return " AND ".join(where), params


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE user_id=%s AND work_date=%s",
                (int(user_id), work_date),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(user_id, work_date, status, check_in, check_out, work_hours, note)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    status=VALUES(status),
                    check_in=VALUES(check_in),
                    check_out=VALUES(check_out),
                    work_hours=VALUES(work_hours),
                    note=VALUES(note)
                """,
                (int(user_id), work_date, status.value, check_in, check_out, work_hours, note),
            )
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE user_id=%s AND work_date=%s",
                (int(user_id), work_date),
            )
            return _row_to_record(fetchone(cur))

    def list_for_user(
        self,
        user_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        offset: int = 0,
        limit: int = 50,
    ) -> Sequence[AttendanceRecord]:
        where, params = _range_filter(user_id, start_date, end_date)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {where}
                ORDER BY work_date DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [int(limit), int(offset)]),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def count_for_user(
        self,
        user_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> int:
        where, params = _range_filter(user_id, start_date, end_date)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM attendance_records WHERE {where}", tuple(params))
            r = fetchone(cur)
            return int(r["total"]) if r else 0

    def users_with_record_on(self, work_date: date) -> set[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT user_id FROM attendance_records WHERE work_date=%s", (work_date,))
            return {int(r["user_id"]) for r in fetchall(cur)}

    def get_report_rows(self, *, start_date: date, end_date: date) -> Sequence[AttendanceReportRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT a.user_id, e.employee_id, e.name, e.department,
                       a.work_date, a.status, a.work_hours
                FROM attendance_records a
                JOIN employees e ON e.id = a.user_id
                WHERE a.work_date BETWEEN %s AND %s
                ORDER BY e.employee_id, a.work_date
                """,
                (start_date, end_date),
            )
            return [
                AttendanceReportRow(
                    user_id=int(r["user_id"]),
                    employee_id=r["employee_id"],
                    name=r.get("name"),
                    department=r.get("department"),
                    work_date=r["work_date"],
                    status=AttendanceStatus(r["status"]),
                    work_hours=_hours(r.get("work_hours")),
                )
                for r in fetchall(cur)
            ]
