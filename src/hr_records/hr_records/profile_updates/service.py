from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from ..audit.model import RequestMeta
from ..audit.service import AuditService
from ..common.datetime_utils import now_local
from ..core.enums import AuditAction, RequestStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..core.permissions import Permission, require_permission
from ..employees.model import Employee
from ..employees.profile import clean_profile_fields
from ..employees.repository import EmployeeRepository
from ..notifications.service import NotificationService
from .model import PendingUpdate, PendingUpdateRow
from .repository import ProfileUpdateRepository


class ProfileUpdateService:
    """Employees propose profile changes; HR/Admin approve (merge) or reject (discard)."""

    def __init__(
        self,
        updates: ProfileUpdateRepository,
        employees: EmployeeRepository,
        notifications: NotificationService,
        audit: AuditService,
    ):
        self._updates = updates
        self._employees = employees
        self._notifications = notifications
        self._audit = audit

    def submit(
        self,
        *,
        employee: Employee,
        changes: Mapping[str, Any],
        meta: Optional[RequestMeta] = None,
        now: Optional[datetime] = None,
    ) -> PendingUpdate:
        data = clean_profile_fields(changes or {})
        if not data:
            raise ValidationError("No valid fields to update")

        now = now or now_local()
        pending = self._updates.put(owner_pk=employee.id, data=data, requested_by=employee.id, requested_at=now)

        fields = sorted(data)
        self._audit.log(
            actor=employee,
            action=AuditAction.PROFILE_UPDATE_REQUESTED,
            target_type="Employee",
            target_id=employee.employee_id,
            details={"fields": fields},
            meta=meta,
            now=now,
        )
        self._notifications.notify(
            owner_pk=employee.id,
            type="profile_update_requested",
            title="Profile update submitted",
            message=f"You requested changes to: {', '.join(fields)}.",
            meta={"fields": fields},
            now=now,
        )
        return pending

    def get_own(self, employee: Employee) -> Optional[PendingUpdate]:
        return self._updates.get(employee.id)

    def list_pending(self, *, actor: Employee) -> Sequence[PendingUpdateRow]:
        require_permission(actor.role, Permission.ADJUDICATE_UPDATES)
        return self._updates.list_pending()

    def adjudicate(
        self,
        *,
        actor: Employee,
        employee_id: str,
        decision: str,
        remarks: str = "",
        meta: Optional[RequestMeta] = None,
        now: Optional[datetime] = None,
    ) -> Employee:
        """Apply or discard the pending request.

        Approval merges field by field over the live profile; fields absent
        from the request are untouched. Either way the request is cleared.
        """

        require_permission(actor.role, Permission.ADJUDICATE_UPDATES)
        try:
            status = RequestStatus(str(decision or "").strip())
        except ValueError:
            status = None
        if status not in (RequestStatus.APPROVED, RequestStatus.REJECTED):
            raise ValidationError("Invalid decision")

        target = self._employees.get_by_employee_id(str(employee_id or "").strip())
        if not target:
            raise NotFoundError("Employee not found")
        pending = self._updates.get(target.id)
        if not pending or pending.status != RequestStatus.PENDING:
            raise NotFoundError("No pending update for this employee")

        if status == RequestStatus.APPROVED:
            self._employees.update_fields(target.id, pending.data)
        self._updates.clear(target.id)

        now = now or now_local()
        remarks = (remarks or "").strip()
        action = (
            AuditAction.PROFILE_UPDATE_APPROVED
            if status == RequestStatus.APPROVED
            else AuditAction.PROFILE_UPDATE_REJECTED
        )
        self._audit.log(
            actor=actor,
            action=action,
            target_type="Employee",
            target_id=target.employee_id,
            details={"fields": sorted(pending.data), "remarks": remarks},
            meta=meta,
            now=now,
        )

        message = f"Your profile update request was {status.value.lower()}."
        if remarks:
            message += f" Remarks: {remarks}"
        self._notifications.notify(
            owner_pk=target.id,
            type="profile_update",
            title=f"Profile update {status.value.lower()}",
            message=message,
            meta={"status": status.value},
            now=now,
        )
        return self._employees.get_by_id(target.id)
