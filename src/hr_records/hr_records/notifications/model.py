from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class Notification:
    """An inbox entry owned by one employee (``owner_pk``)."""

    id: int
    owner_pk: int
    type: str
    title: str
    message: str
    created_at: datetime
    meta: dict[str, Any] = field(default_factory=dict)
    read: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "message": self.message,
            "meta": self.meta,
            "read": self.read,
            "created_at": self.created_at.isoformat(),
        }
