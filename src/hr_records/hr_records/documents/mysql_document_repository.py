from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import DocumentStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Document, QueuedDocument, StoredFile
from .repository import DocumentRepository

_COLUMNS = """
    d.id, d.employee_pk, d.name, d.filename, d.mimetype, d.size, d.status, d.remarks,
    d.supersedes_id, d.reviewed_by, d.reviewed_at, d.uploaded_at
"""


def _row_to_document(r: dict) -> Document:
    return Document(
        id=int(r["id"]),
        owner_pk=int(r["employee_pk"]),
        name=r["name"],
        filename=r["filename"],
        mimetype=r["mimetype"],
        size=int(r["size"]),
        status=DocumentStatus(r["status"]),
        remarks=r.get("remarks") or "",
        supersedes_id=r.get("supersedes_id"),
        reviewed_by=r.get("reviewed_by"),
        reviewed_at=r.get("reviewed_at"),
        uploaded_at=r["uploaded_at"],
    )


class MySQLDocumentRepository(DocumentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(
        self,
        *,
        owner_pk: int,
        name: str,
        stored: StoredFile,
        uploaded_at: datetime,
        supersedes_id: Optional[int] = None,
    ) -> Document:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employee_documents(
                    employee_pk, name, filename, mimetype, size, status, remarks, supersedes_id, uploaded_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(owner_pk),
                    name,
                    stored.filename,
                    stored.mimetype,
                    int(stored.size),
                    DocumentStatus.PENDING.value,
                    "",
                    supersedes_id,
                    uploaded_at,
                ),
            )
            return Document(
                id=int(cur.lastrowid),
                owner_pk=int(owner_pk),
                name=name,
                filename=stored.filename,
                mimetype=stored.mimetype,
                size=int(stored.size),
                status=DocumentStatus.PENDING,
                uploaded_at=uploaded_at,
                supersedes_id=supersedes_id,
            )

    def get(self, *, owner_pk: int, document_id: int) -> Optional[Document]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employee_documents d WHERE d.employee_pk=%s AND d.id=%s",
                (int(owner_pk), int(document_id)),
            )
            row = fetchone(cur)
            return _row_to_document(row) if row else None

    def list_for_owner(self, owner_pk: int) -> Sequence[Document]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employee_documents d WHERE d.employee_pk=%s ORDER BY d.uploaded_at, d.id",
                (int(owner_pk),),
            )
            return [_row_to_document(r) for r in fetchall(cur)]

    def statuses_by_owner(self) -> dict[int, list[DocumentStatus]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT employee_pk, status FROM employee_documents")
            out: dict[int, list[DocumentStatus]] = {}
            for r in fetchall(cur):
                out.setdefault(int(r["employee_pk"]), []).append(DocumentStatus(r["status"]))
            return out

    def list_queue(self, status: DocumentStatus) -> Sequence[QueuedDocument]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}, e.employee_id AS owner_employee_id, e.name AS owner_name
                FROM employee_documents d
                JOIN employees e ON e.id = d.employee_pk
                WHERE d.status=%s
                ORDER BY d.uploaded_at
                """,
                (status.value,),
            )
            return [
                QueuedDocument(
                    employee_id=r["owner_employee_id"],
                    employee_name=r.get("owner_name"),
                    document=_row_to_document(r),
                )
                for r in fetchall(cur)
            ]

    def transition(
        self,
        *,
        owner_pk: int,
        document_id: int,
        expected: DocumentStatus,
        new_status: DocumentStatus,
        remarks: str,
        reviewed_by: int,
        reviewed_at: datetime,
    ) -> Optional[Document]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employee_documents
                SET status=%s, remarks=%s, reviewed_by=%s, reviewed_at=%s
                WHERE employee_pk=%s AND id=%s AND status=%s
                """,
                (
                    new_status.value,
                    remarks,
                    int(reviewed_by),
                    reviewed_at,
                    int(owner_pk),
                    int(document_id),
                    expected.value,
                ),
            )
            if cur.rowcount == 0:
                return None
            cur.execute(
                f"SELECT {_COLUMNS} FROM employee_documents d WHERE d.employee_pk=%s AND d.id=%s",
                (int(owner_pk), int(document_id)),
            )
            row = fetchone(cur)
            return _row_to_document(row) if row else None
