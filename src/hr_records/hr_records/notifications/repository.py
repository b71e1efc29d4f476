from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Protocol, Sequence

from .model import Notification


class NotificationRepository(Protocol):
    """Owned child collection: append, list and mark-read, all scoped by owner."""

    def add(
        self,
        *,
        owner_pk: int,
        type: str,
        title: str,
        message: str,
        meta: Optional[dict[str, Any]],
        created_at: datetime,
    ) -> Notification:
        raise NotImplementedError

    def list_for_owner(self, owner_pk: int) -> Sequence[Notification]:
        """Newest first."""

        raise NotImplementedError

    def mark_read(self, *, owner_pk: int, notification_id: int) -> bool:
        raise NotImplementedError

    def mark_all_read(self, owner_pk: int) -> int:
        raise NotImplementedError
