from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account role; determines the authorization ceiling of every operation."""

    EMPLOYEE = "employee"
    HR = "hr"
    ADMIN = "admin"
    SUPER_ADMIN = "superAdmin"


class DocumentStatus(str, Enum):
    """Lifecycle of an uploaded document."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    VERIFIED = "Verified"


class RequestStatus(str, Enum):
    """Profile-update request adjudication states."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LEAVE = "leave"
    HALFDAY = "halfday"


class MarkMode(str, Enum):
    """How a mark call combines with an existing day record."""

    PARTIAL = "partial"
    REPLACE = "replace"


class AggregateView(str, Enum):
    """Named projections of an employee's document statuses."""

    HR = "hr"
    FINAL = "final"


class AuditAction(str, Enum):
    DOCUMENT_UPLOADED = "DOCUMENT_UPLOADED"
    DOCUMENT_APPROVED = "DOCUMENT_APPROVED"
    DOCUMENT_REJECTED = "DOCUMENT_REJECTED"
    DOCUMENT_VERIFIED = "DOCUMENT_VERIFIED"
    PROFILE_UPDATE_REQUESTED = "PROFILE_UPDATE_REQUESTED"
    PROFILE_UPDATE_APPROVED = "PROFILE_UPDATE_APPROVED"
    PROFILE_UPDATE_REJECTED = "PROFILE_UPDATE_REJECTED"
    OTP_ISSUED = "OTP_ISSUED"
    OTP_VERIFIED = "OTP_VERIFIED"
    ATTENDANCE_MARKED = "ATTENDANCE_MARKED"
    ATTENDANCE_MARKED_FOR = "ATTENDANCE_MARKED_FOR"
    PAYROLL_EXPORTED = "PAYROLL_EXPORTED"
    EMPLOYEE_CREATED = "EMPLOYEE_CREATED"
    EMPLOYEE_UPDATED = "EMPLOYEE_UPDATED"
    EMPLOYEE_DELETED = "EMPLOYEE_DELETED"
    EMPLOYEES_IMPORTED = "EMPLOYEES_IMPORTED"
    EMPLOYEES_EXPORTED = "EMPLOYEES_EXPORTED"
    MESSAGE_SENT = "MESSAGE_SENT"
