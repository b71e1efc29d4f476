from __future__ import annotations

from datetime import date, datetime
from typing import Any, Mapping, Optional, Sequence

from ..core.enums import RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import PendingUpdate, PendingUpdateRow
from .repository import ProfileUpdateRepository


def _decode_data(raw: Any) -> dict[str, Any]:
    data = dict(load_json(raw) or {})
    if data.get("dob"):
        data["dob"] = date.fromisoformat(str(data["dob"])[:10])
    return data


def _row_to_update(r: dict) -> PendingUpdate:
    return PendingUpdate(
        owner_pk=int(r["employee_pk"]),
        data=_decode_data(r["data"]),
        requested_by=int(r["requested_by"]),
        requested_at=r["requested_at"],
        status=RequestStatus(r["status"]),
        remarks=r.get("remarks"),
    )


class MySQLProfileUpdateRepository(ProfileUpdateRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def put(
        self,
        *,
        owner_pk: int,
        data: Mapping[str, Any],
        requested_by: int,
        requested_at: datetime,
    ) -> PendingUpdate:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO profile_update_requests(employee_pk, data, status, requested_by, requested_at, remarks)
                VALUES(%s,%s,%s,%s,%s,NULL)
                ON DUPLICATE KEY UPDATE
                    data=VALUES(data),
                    status=VALUES(status),
                    requested_by=VALUES(requested_by),
                    requested_at=VALUES(requested_at),
                    remarks=NULL
                """,
                (int(owner_pk), dump_json(dict(data)), RequestStatus.PENDING.value, int(requested_by), requested_at),
            )
        return PendingUpdate(
            owner_pk=int(owner_pk),
            data=dict(data),
            requested_by=int(requested_by),
            requested_at=requested_at,
        )

    def get(self, owner_pk: int) -> Optional[PendingUpdate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_pk, data, status, requested_by, requested_at, remarks
                FROM profile_update_requests
                WHERE employee_pk=%s
                """,
                (int(owner_pk),),
            )
            r = fetchone(cur)
            return _row_to_update(r) if r else None

    def list_pending(self) -> Sequence[PendingUpdateRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT p.employee_pk, p.data, p.status, p.requested_by, p.requested_at, p.remarks,
                       e.employee_id, e.name, e.email
                FROM profile_update_requests p
                JOIN employees e ON e.id = p.employee_pk
                WHERE p.status=%s
                ORDER BY p.requested_at
                """,
                (RequestStatus.PENDING.value,),
            )
            return [
                PendingUpdateRow(
                    employee_id=r["employee_id"],
                    employee_name=r.get("name"),
                    email=r["email"],
                    update=_row_to_update(r),
                )
                for r in fetchall(cur)
            ]

    def clear(self, owner_pk: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM profile_update_requests WHERE employee_pk=%s", (int(owner_pk),))
            return cur.rowcount > 0
