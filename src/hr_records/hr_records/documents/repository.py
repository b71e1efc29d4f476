from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import DocumentStatus
from .model import Document, QueuedDocument, StoredFile


class DocumentRepository(Protocol):
    """Owned child collection: every call is scoped by the owner's primary key."""

    def add(
        self,
        *,
        owner_pk: int,
        name: str,
        stored: StoredFile,
        uploaded_at: datetime,
        supersedes_id: Optional[int] = None,
    ) -> Document:
        raise NotImplementedError

    def get(self, *, owner_pk: int, document_id: int) -> Optional[Document]:
        raise NotImplementedError

    def list_for_owner(self, owner_pk: int) -> Sequence[Document]:
        raise NotImplementedError

    def statuses_by_owner(self) -> dict[int, list[DocumentStatus]]:
        """Statuses of every document, grouped by owner (for listing views)."""

        raise NotImplementedError

    def list_queue(self, status: DocumentStatus) -> Sequence[QueuedDocument]:
        raise NotImplementedError

    def transition(
        self,
        *,
        owner_pk: int,
        document_id: int,
        expected: DocumentStatus,
        new_status: DocumentStatus,
        remarks: str,
        reviewed_by: int,
        reviewed_at: datetime,
    ) -> Optional[Document]:
        """Compare-and-set the status; returns None if the current status is not ``expected``."""

        raise NotImplementedError
