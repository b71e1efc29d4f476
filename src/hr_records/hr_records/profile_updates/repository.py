from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import PendingUpdate, PendingUpdateRow


class ProfileUpdateRepository(Protocol):
    def put(
        self,
        *,
        owner_pk: int,
        data: Mapping[str, Any],
        requested_by: int,
        requested_at: datetime,
    ) -> PendingUpdate:
        """Create or overwrite the owner's pending request."""

        raise NotImplementedError

    def get(self, owner_pk: int) -> Optional[PendingUpdate]:
        raise NotImplementedError

    def list_pending(self) -> Sequence[PendingUpdateRow]:
        raise NotImplementedError

    def clear(self, owner_pk: int) -> bool:
        raise NotImplementedError
