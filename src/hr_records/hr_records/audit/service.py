from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_AUDIT_LIMIT
from ..core.enums import AuditAction
from ..core.permissions import Permission, require_permission
from ..employees.model import Employee
from .model import AuditEntry, RequestMeta
from .repository import AuditRepository

logger = logging.getLogger(__name__)


class AuditService:
    """Writes the audit trail of privileged transitions.

    Logging is best-effort: a failing write is reported to the application log
    and never propagates into the operation that triggered it.
    """

    def __init__(self, audit: AuditRepository):
        self._audit = audit

    def log(
        self,
        *,
        actor: Optional[Employee],
        action: AuditAction,
        target_type: str,
        target_id: Any,
        details: Optional[dict] = None,
        meta: Optional[RequestMeta] = None,
        now: Optional[datetime] = None,
    ) -> None:
        meta = meta or RequestMeta()
        try:
            self._audit.add(
                AuditEntry(
                    actor_id=actor.id if actor else None,
                    actor_email=actor.email if actor else "",
                    actor_role=actor.role.value if actor else "",
                    action=action.value,
                    target_type=target_type,
                    target_id=str(target_id),
                    details=dict(details or {}),
                    ip=meta.ip,
                    user_agent=meta.user_agent,
                    created_at=now or now_local(),
                )
            )
        except Exception:
            logger.exception("Audit log write failed (action=%s target=%s:%s)", action.value, target_type, target_id)

    def list_recent(
        self,
        *,
        actor: Employee,
        limit: int = DEFAULT_AUDIT_LIMIT,
        action: Optional[str] = None,
    ) -> Sequence[AuditEntry]:
        require_permission(actor.role, Permission.VIEW_AUDIT_LOG)
        limit = max(1, min(int(limit), 500))
        return self._audit.list_recent(limit=limit, action=action or None)
