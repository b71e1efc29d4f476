from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from ..core.enums import RequestStatus


@dataclass(frozen=True)
class PendingUpdate:
    """At most one per employee; cleared once HR/Admin decide on it."""

    owner_pk: int
    data: dict[str, Any]
    requested_by: int
    requested_at: datetime
    status: RequestStatus = RequestStatus.PENDING
    remarks: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "data": {k: v.isoformat() if isinstance(v, date) else v for k, v in self.data.items()},
            "status": self.status.value,
            "requested_by": self.requested_by,
            "requested_at": self.requested_at.isoformat() if self.requested_at else None,
            "remarks": self.remarks,
        }


@dataclass(frozen=True)
class PendingUpdateRow:
    """Review-queue row: the request joined with its owner's identity."""

    employee_id: str
    employee_name: Optional[str]
    email: str
    update: PendingUpdate

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "name": self.employee_name,
            "email": self.email,
            "pending_update": self.update.to_dict(),
        }
