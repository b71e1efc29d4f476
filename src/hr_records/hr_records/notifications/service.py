from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional, Sequence

from markupsafe import escape

from ..audit.model import RequestMeta
from ..audit.service import AuditService
from ..common.datetime_utils import now_local
from ..common.validators import require_email, require_non_empty
from ..core.enums import AuditAction
from ..core.exceptions import NotFoundError
from ..core.permissions import Permission, require_permission
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..mail.sender import EmailSender
from .model import Notification
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(
        self,
        notifications: NotificationRepository,
        employees: EmployeeRepository,
        mailer: EmailSender,
        audit: AuditService,
    ):
        self._notifications = notifications
        self._employees = employees
        self._mailer = mailer
        self._audit = audit

    def notify(
        self,
        *,
        owner_pk: int,
        type: str,
        title: str,
        message: str,
        meta: Optional[dict[str, Any]] = None,
        now: Optional[datetime] = None,
    ) -> Optional[Notification]:
        """Append an inbox entry as a workflow side effect.

        Never raises: a failed append is logged and the caller's transition stands.
        """

        try:
            return self._notifications.add(
                owner_pk=int(owner_pk),
                type=type,
                title=title,
                message=message,
                meta=meta,
                created_at=now or now_local(),
            )
        except Exception:
            logger.exception("Notification append failed (owner=%s type=%s)", owner_pk, type)
            return None

    def list_for(self, employee: Employee) -> Sequence[Notification]:
        items = list(self._notifications.list_for_owner(employee.id))
        items.sort(key=lambda n: (n.created_at, n.id), reverse=True)
        return items

    def unread_count(self, employee: Employee) -> int:
        return sum(1 for n in self._notifications.list_for_owner(employee.id) if not n.read)

    def mark_read(self, employee: Employee, notification_id: int) -> None:
        if not self._notifications.mark_read(owner_pk=employee.id, notification_id=int(notification_id)):
            raise NotFoundError("Notification not found")

    def mark_all_read(self, employee: Employee) -> int:
        return self._notifications.mark_all_read(employee.id)

    def send_message(
        self,
        *,
        actor: Employee,
        employee_email: str,
        subject: str,
        message: str,
        meta: Optional[RequestMeta] = None,
        now: Optional[datetime] = None,
    ) -> Notification | None:
        """Admin-to-employee message: inbox entry plus e-mail."""

        require_permission(actor.role, Permission.SEND_MESSAGES)
        employee_email = require_email(employee_email, "Employee email")
        subject = require_non_empty(subject, "Subject")
        message = require_non_empty(message, "Message")

        target = self._employees.get_by_email(employee_email)
        if not target:
            raise NotFoundError("Employee not found")

        now = now or now_local()
        entry = self.notify(
            owner_pk=target.id,
            type="admin_message",
            title=subject,
            message=message,
            meta={"from": actor.email},
            now=now,
        )
        self._audit.log(
            actor=actor,
            action=AuditAction.MESSAGE_SENT,
            target_type="Employee",
            target_id=target.employee_id,
            details={"subject": subject},
            meta=meta,
            now=now,
        )

        self._mailer.send(
            to=target.email,
            subject=subject,
            text=f"Hello {target.name or ''},\n\n{message}",
            html=f"<p>Hello {escape(target.name or '')},</p><p>{escape(message)}</p>",
        )
        return entry
