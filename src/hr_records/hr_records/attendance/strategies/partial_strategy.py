from __future__ import annotations

from typing import Any, Mapping, Optional

from ...core.enums import AttendanceStatus
from ..model import AttendanceRecord
from .base import AttendanceDraft, MarkStrategy


class PartialMarkStrategy(MarkStrategy):
    """Merge: unsupplied fields keep their stored values."""

    def resolve(self, *, existing: Optional[AttendanceRecord], supplied: Mapping[str, Any]) -> AttendanceDraft:
        def pick(key: str, stored):
            return supplied[key] if key in supplied else stored

        if existing is None:
            status = supplied.get("status") or AttendanceStatus.PRESENT
            return AttendanceDraft(
                status=status,
                check_in=supplied.get("check_in"),
                check_out=supplied.get("check_out"),
                note=supplied.get("note"),
            )

        return AttendanceDraft(
            status=supplied.get("status") or existing.status,
            check_in=pick("check_in", existing.check_in),
            check_out=pick("check_out", existing.check_out),
            note=pick("note", existing.note),
        )
