from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Protocol, Sequence

from ..core.enums import Role
from .model import Employee


class EmployeeRepository(Protocol):
    """Repository interface for Employee.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, pk: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_employee_id(self, employee_id: str) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_reset_token(self, token_hash: str) -> Optional[Employee]:
        raise NotImplementedError

    def create(
        self,
        *,
        employee_id: str,
        email: str,
        password_hash: str,
        role: Role,
        profile: Mapping[str, Any],
    ) -> int:
        raise NotImplementedError

    def update_fields(self, pk: int, fields: Mapping[str, Any]) -> bool:
        """Overwrite the given columns (profile fields, role, email, employee_id)."""

        raise NotImplementedError

    def delete_by_id(self, pk: int) -> bool:
        raise NotImplementedError

    def list_all(self) -> Sequence[Employee]:
        raise NotImplementedError

    def list_by_role(self, role: Role) -> Sequence[Employee]:
        raise NotImplementedError

    # OTP gate
    def set_otp(self, pk: int, *, code: str, expires: datetime) -> None:
        raise NotImplementedError

    def increment_otp_attempts(self, pk: int) -> int:
        """Atomically bump the failed-attempt counter; returns the new count."""

        raise NotImplementedError

    def clear_otp(self, pk: int) -> None:
        raise NotImplementedError

    # Password reset
    def set_reset_token(self, pk: int, *, token_hash: str, expires: datetime) -> None:
        raise NotImplementedError

    def set_password(self, pk: int, *, password_hash: str) -> None:
        """Store a new hash and clear any reset token."""

        raise NotImplementedError
