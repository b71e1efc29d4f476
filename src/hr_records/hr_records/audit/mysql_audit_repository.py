from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, load_json
from .model import AuditEntry
from .repository import AuditRepository


class MySQLAuditRepository(AuditRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(self, entry: AuditEntry) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO audit_log(
                    actor_id, actor_email, actor_role, action, target_type, target_id,
                    details, ip, user_agent, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    entry.actor_id,
                    entry.actor_email,
                    entry.actor_role,
                    entry.action,
                    entry.target_type,
                    entry.target_id,
                    dump_json(entry.details),
                    entry.ip,
                    entry.user_agent[:512],
                    entry.created_at,
                ),
            )
            return int(cur.lastrowid)

    def list_recent(self, *, limit: int, action: Optional[str] = None) -> Sequence[AuditEntry]:
        clauses = ["1=1"]
        params: list[object] = []
        if action:
            clauses.append("action=%s")
            params.append(action)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT id, actor_id, actor_email, actor_role, action, target_type, target_id,
                       details, ip, user_agent, created_at
                FROM audit_log
                WHERE {' AND '.join(clauses)}
                ORDER BY created_at DESC, id DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [
                AuditEntry(
                    entry_id=int(r["id"]),
                    actor_id=r.get("actor_id"),
                    actor_email=r.get("actor_email") or "",
                    actor_role=r.get("actor_role") or "",
                    action=r["action"],
                    target_type=r.get("target_type") or "",
                    target_id=r.get("target_id") or "",
                    details=load_json(r.get("details")) or {},
                    ip=r.get("ip") or "",
                    user_agent=r.get("user_agent") or "",
                    created_at=r["created_at"],
                )
                for r in fetchall(cur)
            ]
