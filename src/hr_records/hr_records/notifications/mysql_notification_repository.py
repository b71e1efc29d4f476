from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import Notification
from .repository import NotificationRepository


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(
        self,
        *,
        owner_pk: int,
        type: str,
        title: str,
        message: str,
        meta: Optional[dict[str, Any]],
        created_at: datetime,
    ) -> Notification:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(employee_pk, type, title, message, meta, is_read, created_at)
                VALUES(%s,%s,%s,%s,%s,0,%s)
                """,
                (int(owner_pk), type, title, message, dump_json(meta or {}), created_at),
            )
            return Notification(
                id=int(cur.lastrowid),
                owner_pk=int(owner_pk),
                type=type,
                title=title,
                message=message,
                meta=dict(meta or {}),
                created_at=created_at,
            )

    def list_for_owner(self, owner_pk: int) -> Sequence[Notification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, employee_pk, type, title, message, meta, is_read, created_at
                FROM notifications
                WHERE employee_pk=%s
                ORDER BY created_at DESC, id DESC
                """,
                (int(owner_pk),),
            )
            return [
                Notification(
                    id=int(r["id"]),
                    owner_pk=int(r["employee_pk"]),
                    type=r["type"],
                    title=r["title"],
                    message=r["message"],
                    meta=load_json(r.get("meta")) or {},
                    read=bool(r["is_read"]),
                    created_at=r["created_at"],
                )
                for r in fetchall(cur)
            ]

    def mark_read(self, *, owner_pk: int, notification_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE notifications SET is_read=1 WHERE employee_pk=%s AND id=%s",
                (int(owner_pk), int(notification_id)),
            )
            # Already-read rows report 0 affected rows; existence is what matters.
            cur.execute(
                "SELECT 1 AS ok FROM notifications WHERE employee_pk=%s AND id=%s",
                (int(owner_pk), int(notification_id)),
            )
            return fetchone(cur) is not None

    def mark_all_read(self, owner_pk: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE notifications SET is_read=1 WHERE employee_pk=%s AND is_read=0",
                (int(owner_pk),),
            )
            return int(cur.rowcount)
