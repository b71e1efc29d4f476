from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import DocumentStatus


@dataclass(frozen=True)
class StoredFile:
    """What the file storage hands back after persisting an upload."""

    filename: str
    mimetype: str
    size: int


@dataclass(frozen=True)
class Document:
    """An identity/HR document owned by exactly one employee (``owner_pk``)."""

    id: int
    owner_pk: int
    name: str
    filename: str
    mimetype: str
    size: int
    status: DocumentStatus
    uploaded_at: datetime
    remarks: str = ""
    supersedes_id: Optional[int] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "filename": self.filename,
            "mimetype": self.mimetype,
            "size": self.size,
            "status": self.status.value,
            "remarks": self.remarks,
            "supersedes_id": self.supersedes_id,
            "reviewed_by": self.reviewed_by,
            "reviewed_at": self.reviewed_at.isoformat() if self.reviewed_at else None,
            "uploaded_at": self.uploaded_at.isoformat(),
        }


@dataclass(frozen=True)
class QueuedDocument:
    """Read-model for the final verification queue (document + owner identity)."""

    employee_id: str
    employee_name: Optional[str]
    document: Document

    def to_dict(self) -> dict:
        data = self.document.to_dict()
        data["employee_id"] = self.employee_id
        data["employee_name"] = self.employee_name
        return data
