from __future__ import annotations

import hmac
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from markupsafe import escape

from ..audit.model import RequestMeta
from ..audit.service import AuditService
from ..auth.tokens import TokenService
from ..common.datetime_utils import now_local
from ..common.validators import require_email, require_non_empty
from ..core.constants import OTP_LENGTH
from ..core.enums import AuditAction
from ..core.exceptions import (
    NotFoundError,
    OTPAttemptsExceededError,
    OTPExpiredError,
    OTPMismatchError,
    OTPNotIssuedError,
)
from ..core.permissions import Permission, require_permission
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..mail.sender import EmailSender


@dataclass(frozen=True)
class UploadGrant:
    """Client-held proof that the OTP was verified; sent back on uploads."""

    token: str
    expires_in: int


def generate_code() -> str:
    low = 10 ** (OTP_LENGTH - 1)
    return str(low + secrets.randbelow(9 * low))


class OTPService:
    """One-time code gate in front of document uploads.

    Issued -> Consumed on a match, -> Expired after the TTL, and invalidated
    after too many wrong attempts. The code is kept only on the employee row.
    """

    def __init__(
        self,
        employees: EmployeeRepository,
        mailer: EmailSender,
        tokens: TokenService,
        audit: AuditService,
        *,
        ttl_minutes: int,
        max_attempts: int,
    ):
        self._employees = employees
        self._mailer = mailer
        self._tokens = tokens
        self._audit = audit
        self._ttl = timedelta(minutes=int(ttl_minutes))
        self._max_attempts = int(max_attempts)

    def issue(
        self,
        *,
        actor: Employee,
        employee_email: str,
        meta: Optional[RequestMeta] = None,
        now: Optional[datetime] = None,
    ) -> datetime:
        """Store a fresh code for the employee and e-mail it. Returns the expiry."""

        require_permission(actor.role, Permission.ISSUE_OTP)
        email = require_email(employee_email, "Employee email")

        target = self._employees.get_by_email(email)
        if not target:
            raise NotFoundError("Employee not found")

        now = now or now_local()
        code = generate_code()
        expires = now + self._ttl
        self._employees.set_otp(target.id, code=code, expires=expires)

        self._audit.log(
            actor=actor,
            action=AuditAction.OTP_ISSUED,
            target_type="Employee",
            target_id=target.employee_id,
            details={"expires": expires.isoformat()},
            meta=meta,
            now=now,
        )

        minutes = int(self._ttl.total_seconds() // 60)
        name = target.name or ""
        self._mailer.send(
            to=target.email,
            subject="Your OTP for Employee Verification",
            text=f"Hello {name},\n\nYour OTP is: {code}. It expires in {minutes} minutes.",
            html=(
                f"<p>Hello {escape(name)},</p><p>Your OTP is: <b>{code}</b></p>"
                f"<p>It expires in {minutes} minutes.</p>"
            ),
        )
        return expires

    def verify(
        self,
        *,
        employee: Employee,
        submitted_code: str,
        meta: Optional[RequestMeta] = None,
        now: Optional[datetime] = None,
    ) -> UploadGrant:
        submitted = require_non_empty(submitted_code, "OTP")
        now = now or now_local()

        current = self._employees.get_by_id(employee.id)
        if not current:
            raise NotFoundError("Employee not found")

        if not current.otp_code or not current.otp_expires:
            raise OTPNotIssuedError("No OTP generated. Please request again.")

        if current.otp_expires < now:
            self._employees.clear_otp(current.id)
            raise OTPExpiredError("OTP expired. Please request a new one.")

        if not hmac.compare_digest(current.otp_code.encode("utf-8"), submitted.encode("utf-8")):
            attempts = self._employees.increment_otp_attempts(current.id)
            if attempts >= self._max_attempts:
                self._employees.clear_otp(current.id)
                raise OTPAttemptsExceededError("Too many invalid attempts. Please request a new OTP.")
            raise OTPMismatchError("Invalid OTP. Please check and try again.")

        self._employees.clear_otp(current.id)
        self._audit.log(
            actor=current,
            action=AuditAction.OTP_VERIFIED,
            target_type="Employee",
            target_id=current.employee_id,
            meta=meta,
            now=now,
        )
        return UploadGrant(
            token=self._tokens.issue_upload_grant(employee_pk=current.id),
            expires_in=self._tokens.upload_grant_max_age,
        )
