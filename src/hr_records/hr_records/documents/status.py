"""Aggregate document status of an employee.

Two named projections over the same multiset of statuses:

- ``hr_view``: what is left for HR/Admin review.
- ``final_view``: what is left for the super admin's final verification.

Both depend only on which statuses are present, never on document order.
"""

from __future__ import annotations

from typing import Iterable

from ..core.constants import NOT_UPLOADED, PENDING_FINAL_VERIFICATION
from ..core.enums import AggregateView, DocumentStatus


def hr_view(statuses: Iterable[DocumentStatus]) -> str:
    present = set(statuses)
    if not present:
        return NOT_UPLOADED
    if DocumentStatus.REJECTED in present:
        return DocumentStatus.REJECTED.value
    if DocumentStatus.PENDING in present:
        return DocumentStatus.PENDING.value
    # Only Approved/Verified remain: nothing is waiting on HR.
    return DocumentStatus.APPROVED.value


def final_view(statuses: Iterable[DocumentStatus]) -> str:
    present = set(statuses)
    if not present:
        return NOT_UPLOADED
    if DocumentStatus.REJECTED in present:
        return DocumentStatus.REJECTED.value
    if present == {DocumentStatus.VERIFIED}:
        return DocumentStatus.VERIFIED.value
    if DocumentStatus.APPROVED in present:
        return PENDING_FINAL_VERIFICATION
    return DocumentStatus.PENDING.value


def aggregate_status(statuses: Iterable[DocumentStatus], view: AggregateView) -> str:
    if view == AggregateView.FINAL:
        return final_view(statuses)
    return hr_view(statuses)
