from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = """
    id, employee_id, email, password_hash, role, name, dob, phone, address,
    emergency_contact, designation, department, reporting_manager,
    otp_code, otp_expires, otp_attempts, reset_token_hash, reset_expires, created_at
"""

# Columns writable through update_fields().
_UPDATABLE = {
    "employee_id",
    "email",
    "role",
    "name",
    "dob",
    "phone",
    "address",
    "emergency_contact",
    "designation",
    "department",
    "reporting_manager",
}


def _row_to_employee(r: dict) -> Employee:
    return Employee(
        id=int(r["id"]),
        employee_id=r["employee_id"],
        email=r["email"],
        password_hash=r["password_hash"],
        role=Role(r["role"]),
        name=r.get("name"),
        dob=r.get("dob"),
        phone=r.get("phone"),
        address=r.get("address"),
        emergency_contact=r.get("emergency_contact"),
        designation=r.get("designation"),
        department=r.get("department"),
        reporting_manager=r.get("reporting_manager"),
        otp_code=r.get("otp_code"),
        otp_expires=r.get("otp_expires"),
        otp_attempts=int(r.get("otp_attempts") or 0),
        reset_token_hash=r.get("reset_token_hash"),
        reset_expires=r.get("reset_expires"),
        created_at=r.get("created_at"),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, params: tuple) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE {where}", params)
            row = fetchone(cur)
            return _row_to_employee(row) if row else None

    def get_by_id(self, pk: int) -> Optional[Employee]:
        return self._get_one("id=%s", (int(pk),))

    def get_by_employee_id(self, employee_id: str) -> Optional[Employee]:
        return self._get_one("employee_id=%s", (employee_id,))

    def get_by_email(self, email: str) -> Optional[Employee]:
        return self._get_one("email=%s", (email.lower(),))

    def get_by_reset_token(self, token_hash: str) -> Optional[Employee]:
        return self._get_one("reset_token_hash=%s", (token_hash,))

    def create(
        self,
        *,
        employee_id: str,
        email: str,
        password_hash: str,
        role: Role,
        profile: Mapping[str, Any],
    ) -> int:
        columns = ["employee_id", "email", "password_hash", "role"]
        values: list[Any] = [employee_id, email.lower(), password_hash, role.value]
        for key, value in profile.items():
            if key in _UPDATABLE and key not in columns:
                columns.append(key)
                values.append(value)

        placeholders = ",".join(["%s"] * len(columns))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO employees({','.join(columns)}) VALUES({placeholders})",
                tuple(values),
            )
            return int(cur.lastrowid)

    def update_fields(self, pk: int, fields: Mapping[str, Any]) -> bool:
        assignments: list[str] = []
        params: list[Any] = []
        for key, value in fields.items():
            if key not in _UPDATABLE:
                raise ValueError(f"Column not updatable: {key}")
            if isinstance(value, Role):
                value = value.value
            if key == "email" and value:
                value = str(value).lower()
            assignments.append(f"{key}=%s")
            params.append(value)

        if not assignments:
            return False

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE employees SET {', '.join(assignments)} WHERE id=%s",
                tuple(params + [int(pk)]),
            )
            # MySQL reports 0 affected rows when values are unchanged.
            cur.execute("SELECT 1 AS ok FROM employees WHERE id=%s", (int(pk),))
            return fetchone(cur) is not None

    def delete_by_id(self, pk: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM employees WHERE id=%s", (int(pk),))
            return cur.rowcount > 0

    def list_all(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees ORDER BY id DESC")
            return [_row_to_employee(r) for r in fetchall(cur)]

    def list_by_role(self, role: Role) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE role=%s ORDER BY id", (role.value,))
            return [_row_to_employee(r) for r in fetchall(cur)]

    def set_otp(self, pk: int, *, code: str, expires: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employees SET otp_code=%s, otp_expires=%s, otp_attempts=0 WHERE id=%s",
                (code, expires, int(pk)),
            )

    def increment_otp_attempts(self, pk: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE employees SET otp_attempts=otp_attempts+1 WHERE id=%s", (int(pk),))
            cur.execute("SELECT otp_attempts FROM employees WHERE id=%s", (int(pk),))
            row = fetchone(cur)
            return int(row["otp_attempts"]) if row else 0

    def clear_otp(self, pk: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employees SET otp_code=NULL, otp_expires=NULL, otp_attempts=0 WHERE id=%s",
                (int(pk),),
            )

    def set_reset_token(self, pk: int, *, token_hash: str, expires: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employees SET reset_token_hash=%s, reset_expires=%s WHERE id=%s",
                (token_hash, expires, int(pk)),
            )

    def set_password(self, pk: int, *, password_hash: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employees
                SET password_hash=%s, reset_token_hash=NULL, reset_expires=NULL
                WHERE id=%s
                """,
                (password_hash, int(pk)),
            )
