from __future__ import annotations

from datetime import date, datetime

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .repository import ReminderRepository


class MySQLReminderRepository(ReminderRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def claim(self, *, user_id: int, work_date: date, sent_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            # INSERT IGNORE affects 0 rows when the primary key already exists.
            cur.execute(
                "INSERT IGNORE INTO attendance_reminders(user_id, work_date, sent_at) VALUES(%s,%s,%s)",
                (int(user_id), work_date, sent_at),
            )
            return cur.rowcount == 1

    def release(self, *, user_id: int, work_date: date) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM attendance_reminders WHERE user_id=%s AND work_date=%s",
                (int(user_id), work_date),
            )
