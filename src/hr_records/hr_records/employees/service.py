from __future__ import annotations

import hashlib
import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import IO, Any, Mapping, Optional

from markupsafe import escape
from werkzeug.security import check_password_hash, generate_password_hash

from ..audit.model import RequestMeta
from ..audit.service import AuditService
from ..auth.tokens import TokenService
from ..common.datetime_utils import now_local
from ..common.spreadsheets import read_table, write_xlsx
from ..common.validators import require_email, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import AggregateView, AuditAction, Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    ExpiredOrInvalidTokenError,
    NotFoundError,
    ValidationError,
)
from ..core.permissions import Permission, can_grant, require_permission
from ..documents.repository import DocumentRepository
from ..documents.status import aggregate_status
from ..mail.sender import EmailSender
from .model import Employee
from .profile import clean_profile_fields
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)

EMPLOYEE_EXPORT_COLUMNS = (
    ("employee_id", "Employee ID"),
    ("name", "Name"),
    ("email", "Email"),
    ("role", "Role"),
    ("designation", "Designation"),
    ("department", "Department"),
    ("reporting_manager", "Reporting Manager"),
    ("phone", "Phone"),
    ("document_status", "Document Status"),
)


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _parse_role(value: Any) -> Role:
    if isinstance(value, Role):
        return value
    try:
        return Role(str(value or "").strip())
    except ValueError:
        raise ValidationError("Invalid role")


@dataclass(frozen=True)
class AuthResult:
    employee: Employee
    token: str


@dataclass
class ImportReport:
    created: list[str] = field(default_factory=list)
    skipped: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "created": list(self.created),
            "skipped": list(self.skipped),
            "created_count": len(self.created),
            "skipped_count": len(self.skipped),
        }


class AuthService:
    """Use case: register, sign in and reset a forgotten password."""

    def __init__(
        self,
        employees: EmployeeRepository,
        tokens: TokenService,
        mailer: EmailSender,
        *,
        frontend_url: str,
        reset_token_expires_min: int,
    ):
        self._employees = employees
        self._tokens = tokens
        self._mailer = mailer
        self._frontend_url = (frontend_url or "").rstrip("/")
        self._reset_ttl = timedelta(minutes=int(reset_token_expires_min))

    def _issue(self, employee: Employee) -> AuthResult:
        token = self._tokens.issue_access_token(employee_pk=employee.id, role=employee.role)
        return AuthResult(employee=employee, token=token)

    def register(self, *, employee_id: str, email: str, password: str, name: str) -> AuthResult:
        employee_id = require_non_empty(employee_id, "Employee ID")
        email = require_email(email)
        name = require_non_empty(name, "Name")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        if self._employees.get_by_employee_id(employee_id) or self._employees.get_by_email(email):
            raise ConflictError("Employee ID or email already exists")

        pk = self._employees.create(
            employee_id=employee_id,
            email=email,
            password_hash=generate_password_hash(password),
            role=Role.EMPLOYEE,
            profile={"name": name},
        )
        return self._issue(self._employees.get_by_id(pk))

    def login(self, *, email: str, password: str) -> AuthResult:
        employee = self._employees.get_by_email(str(email or "").strip().lower())
        if not employee:
            raise AuthenticationError("Invalid credentials")

        try:
            ok = check_password_hash(employee.password_hash, password or "")
        except Exception:
            # e.g. placeholder or corrupted hashes
            ok = False

        if not ok:
            raise AuthenticationError("Invalid credentials")
        return self._issue(employee)

    def forgot_password(self, *, email: str, now: Optional[datetime] = None) -> None:
        """Send a reset link. Unknown e-mails succeed silently."""

        email = require_email(email)
        employee = self._employees.get_by_email(email)
        if not employee:
            logger.info("Password reset requested for an unknown e-mail")
            return

        token = secrets.token_hex(20)
        expires = (now or now_local()) + self._reset_ttl
        self._employees.set_reset_token(employee.id, token_hash=hash_reset_token(token), expires=expires)

        link = f"{self._frontend_url}/reset-password/{token}"
        self._mailer.send(
            to=employee.email,
            subject="Password Reset Request",
            text=f"You requested a password reset. Open this link to continue: {link}",
            html=(
                "<p>You requested a password reset.</p>"
                f'<p><a href="{escape(link)}">Reset your password</a></p>'
                f"<p>The link expires in {int(self._reset_ttl.total_seconds() // 60)} minutes.</p>"
            ),
        )

    def reset_password(self, *, token: str, password: str, now: Optional[datetime] = None) -> None:
        token = require_non_empty(token, "Reset token")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        employee = self._employees.get_by_reset_token(hash_reset_token(token))
        now = now or now_local()
        if not employee or not employee.reset_expires or employee.reset_expires < now:
            raise ExpiredOrInvalidTokenError("Invalid or expired token")

        self._employees.set_password(employee.id, password_hash=generate_password_hash(password))


class EmployeeService:
    """Use case: HR/Admin management of employee records."""

    def __init__(
        self,
        employees: EmployeeRepository,
        documents: DocumentRepository,
        audit: AuditService,
    ):
        self._employees = employees
        self._documents = documents
        self._audit = audit

    def get_profile(self, employee: Employee) -> dict:
        data = employee.to_public_dict()
        data["documents"] = [d.to_dict() for d in self._documents.list_for_owner(employee.id)]
        return data

    def get_by_employee_id(self, *, actor: Employee, employee_id: str) -> Employee:
        require_permission(actor.role, Permission.LIST_EMPLOYEES)
        return self._get(employee_id)

    def _get(self, employee_id: str) -> Employee:
        employee = self._employees.get_by_employee_id(str(employee_id or "").strip())
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def list_employees(self, *, actor: Employee, view: AggregateView = AggregateView.HR) -> list[dict]:
        """Every employee with the aggregate status of its documents under ``view``."""

        require_permission(actor.role, Permission.LIST_EMPLOYEES)
        statuses = self._documents.statuses_by_owner()
        rows = []
        for employee in self._employees.list_all():
            data = employee.to_public_dict()
            data["document_status"] = aggregate_status(statuses.get(employee.id, []), view)
            rows.append(data)
        return rows

    def _check_role_change(self, actor: Employee, role: Role) -> None:
        if not can_grant(actor.role, role):
            raise AuthorizationError("Forbidden: cannot assign a role above your own")

    def create_employee(
        self,
        *,
        actor: Employee,
        employee_id: str,
        email: str,
        password: str,
        role: Any = Role.EMPLOYEE,
        profile: Optional[Mapping[str, Any]] = None,
        meta: Optional[RequestMeta] = None,
        now: Optional[datetime] = None,
    ) -> Employee:
        require_permission(actor.role, Permission.MANAGE_EMPLOYEES)
        employee_id = require_non_empty(employee_id, "Employee ID")
        email = require_email(email)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        role = _parse_role(role)
        self._check_role_change(actor, role)
        fields = clean_profile_fields(profile or {})

        if self._employees.get_by_employee_id(employee_id) or self._employees.get_by_email(email):
            raise ConflictError("Employee ID or email already exists")

        pk = self._employees.create(
            employee_id=employee_id,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            profile=fields,
        )
        created = self._employees.get_by_id(pk)

        self._audit.log(
            actor=actor,
            action=AuditAction.EMPLOYEE_CREATED,
            target_type="Employee",
            target_id=employee_id,
            details={"email": email, "role": role.value},
            meta=meta,
            now=now,
        )
        return created

    def update_employee(
        self,
        *,
        actor: Employee,
        employee_id: str,
        changes: Mapping[str, Any],
        meta: Optional[RequestMeta] = None,
        now: Optional[datetime] = None,
    ) -> Employee:
        require_permission(actor.role, Permission.MANAGE_EMPLOYEES)
        target = self._get(employee_id)
        self._check_role_change(actor, target.role)

        fields: dict[str, Any] = clean_profile_fields(changes)
        if "email" in changes:
            email = require_email(changes["email"])
            other = self._employees.get_by_email(email)
            if other and other.id != target.id:
                raise ConflictError("Email already exists")
            fields["email"] = email
        if "role" in changes:
            role = _parse_role(changes["role"])
            self._check_role_change(actor, role)
            fields["role"] = role

        if not fields:
            raise ValidationError("No valid fields to update")

        self._employees.update_fields(target.id, fields)
        self._audit.log(
            actor=actor,
            action=AuditAction.EMPLOYEE_UPDATED,
            target_type="Employee",
            target_id=target.employee_id,
            details={"fields": sorted(fields)},
            meta=meta,
            now=now,
        )
        return self._employees.get_by_id(target.id)

    def delete_employee(
        self,
        *,
        actor: Employee,
        employee_id: str,
        meta: Optional[RequestMeta] = None,
        now: Optional[datetime] = None,
    ) -> None:
        require_permission(actor.role, Permission.DELETE_EMPLOYEES)
        target = self._get(employee_id)
        if target.role == Role.SUPER_ADMIN:
            raise AuthorizationError("Super admin accounts cannot be deleted")
        if target.id == actor.id:
            raise ValidationError("You cannot delete your own account")

        if not self._employees.delete_by_id(target.id):
            raise NotFoundError("Employee not found")

        self._audit.log(
            actor=actor,
            action=AuditAction.EMPLOYEE_DELETED,
            target_type="Employee",
            target_id=target.employee_id,
            details={"email": target.email},
            meta=meta,
            now=now,
        )

    def bulk_import(
        self,
        *,
        actor: Employee,
        stream: IO[bytes],
        filename: str,
        meta: Optional[RequestMeta] = None,
        now: Optional[datetime] = None,
    ) -> ImportReport:
        """Create one employee per spreadsheet row.

        Required columns: employee_id, email, name. ``password`` and ``role``
        are optional; a row without a password gets a random one and must go
        through the forgot-password flow.
        """

        require_permission(actor.role, Permission.IMPORT_EMPLOYEES)
        rows = read_table(stream, filename)
        if not rows:
            raise ValidationError("The uploaded file has no rows")

        report = ImportReport()
        for line, row in enumerate(rows, start=2):
            profile = {k: v for k, v in row.items() if k not in {"employee_id", "email", "password", "role"}}
            try:
                require_non_empty(row.get("name"), "Name")
                created = self.create_employee(
                    actor=actor,
                    employee_id=row.get("employee_id", ""),
                    email=row.get("email", ""),
                    password=row.get("password") or secrets.token_urlsafe(12),
                    role=row.get("role") or Role.EMPLOYEE,
                    profile=profile,
                    meta=meta,
                    now=now,
                )
            except DomainError as e:
                report.skipped.append({"row": line, "employee_id": row.get("employee_id"), "reason": str(e)})
                continue
            report.created.append(created.employee_id)

        self._audit.log(
            actor=actor,
            action=AuditAction.EMPLOYEES_IMPORTED,
            target_type="Employee",
            target_id="*",
            details={"filename": filename, "created": len(report.created), "skipped": len(report.skipped)},
            meta=meta,
            now=now,
        )
        return report

    def export_employees(
        self,
        *,
        actor: Employee,
        meta: Optional[RequestMeta] = None,
        now: Optional[datetime] = None,
    ) -> bytes:
        require_permission(actor.role, Permission.EXPORT_EMPLOYEES)
        rows = self.list_employees(actor=actor, view=AggregateView.FINAL)
        content = write_xlsx(rows, columns=EMPLOYEE_EXPORT_COLUMNS, sheet_name="Employees")

        self._audit.log(
            actor=actor,
            action=AuditAction.EMPLOYEES_EXPORTED,
            target_type="Employee",
            target_id="*",
            details={"count": len(rows)},
            meta=meta,
            now=now,
        )
        return content
