from __future__ import annotations

from typing import Any, Mapping, Optional

from ...core.enums import AttendanceStatus
from ..model import AttendanceRecord
from .base import AttendanceDraft, MarkStrategy


class ReplaceMarkStrategy(MarkStrategy):
    """Overwrite: the record becomes exactly what was supplied."""

    def resolve(self, *, existing: Optional[AttendanceRecord], supplied: Mapping[str, Any]) -> AttendanceDraft:
        return AttendanceDraft(
            status=supplied.get("status") or AttendanceStatus.PRESENT,
            check_in=supplied.get("check_in"),
            check_out=supplied.get("check_out"),
            note=supplied.get("note"),
        )
