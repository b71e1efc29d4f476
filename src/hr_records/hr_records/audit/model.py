from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class RequestMeta:
    """Network metadata of the request that triggered a privileged action."""

    ip: str = ""
    user_agent: str = ""


@dataclass(frozen=True)
class AuditEntry:
    """Immutable record of a privileged state transition."""

    actor_id: Optional[int]
    actor_email: str
    actor_role: str
    action: str
    target_type: str
    target_id: str
    created_at: datetime
    details: dict[str, Any] = field(default_factory=dict)
    ip: str = ""
    user_agent: str = ""
    entry_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "id": self.entry_id,
            "actor_id": self.actor_id,
            "actor_email": self.actor_email,
            "actor_role": self.actor_role,
            "action": self.action,
            "target_type": self.target_type,
            "target_id": self.target_id,
            "details": self.details,
            "ip": self.ip,
            "user_agent": self.user_agent,
            "created_at": self.created_at.isoformat(),
        }
