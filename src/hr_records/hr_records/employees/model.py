from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Employee:
    """Domain entity: an employee account.

    Plain data object; documents, notifications and the pending profile
    update are owned children stored by their own repositories.
    """

    id: int
    employee_id: str
    email: str
    password_hash: str
    role: Role
    name: Optional[str] = None
    dob: Optional[date] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[str] = None
    designation: Optional[str] = None
    department: Optional[str] = None
    reporting_manager: Optional[str] = None
    otp_code: Optional[str] = None
    otp_expires: Optional[datetime] = None
    otp_attempts: int = 0
    reset_token_hash: Optional[str] = None
    reset_expires: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def to_public_dict(self) -> dict:
        """Serializable view without credential, OTP or reset-token fields."""

        return {
            "id": self.id,
            "employee_id": self.employee_id,
            "email": self.email,
            "role": self.role.value,
            "name": self.name,
            "dob": self.dob.isoformat() if self.dob else None,
            "phone": self.phone,
            "address": self.address,
            "emergency_contact": self.emergency_contact,
            "designation": self.designation,
            "department": self.department,
            "reporting_manager": self.reporting_manager,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
