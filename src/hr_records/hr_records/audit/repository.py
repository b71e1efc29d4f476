from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import AuditEntry


class AuditRepository(Protocol):
    """Append-only store: entries are never updated or deleted."""

    def add(self, entry: AuditEntry) -> int:
        raise NotImplementedError

    def list_recent(self, *, limit: int, action: Optional[str] = None) -> Sequence[AuditEntry]:
        raise NotImplementedError
