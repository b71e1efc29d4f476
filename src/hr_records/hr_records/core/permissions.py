"""Role tiers and the capability table.

HR and Admin share a tier but not an identical permission set; only the
super admin performs final document verification.
"""

from __future__ import annotations

from enum import Enum

from .enums import Role
from .exceptions import AuthorizationError


class Permission(str, Enum):
    REVIEW_DOCUMENTS = "review_documents"
    FINAL_VERIFY_DOCUMENTS = "final_verify_documents"
    ISSUE_OTP = "issue_otp"
    ADJUDICATE_UPDATES = "adjudicate_updates"
    LIST_EMPLOYEES = "list_employees"
    MANAGE_EMPLOYEES = "manage_employees"
    DELETE_EMPLOYEES = "delete_employees"
    IMPORT_EMPLOYEES = "import_employees"
    EXPORT_EMPLOYEES = "export_employees"
    MARK_ATTENDANCE_FOR = "mark_attendance_for"
    VIEW_ANY_ATTENDANCE = "view_any_attendance"
    EXPORT_PAYROLL = "export_payroll"
    SEND_MESSAGES = "send_messages"
    VIEW_AUDIT_LOG = "view_audit_log"
    RUN_REMINDERS = "run_reminders"


ROLE_RANK: dict[Role, int] = {
    Role.EMPLOYEE: 0,
    Role.HR: 1,
    Role.ADMIN: 1,
    Role.SUPER_ADMIN: 2,
}

_STAFF = frozenset({Role.HR, Role.ADMIN})
_STAFF_AND_SUPER = frozenset({Role.HR, Role.ADMIN, Role.SUPER_ADMIN})
_ADMINS = frozenset({Role.ADMIN, Role.SUPER_ADMIN})

CAPABILITIES: dict[Permission, frozenset[Role]] = {
    Permission.REVIEW_DOCUMENTS: _STAFF,
    Permission.FINAL_VERIFY_DOCUMENTS: frozenset({Role.SUPER_ADMIN}),
    Permission.ISSUE_OTP: _STAFF,
    Permission.ADJUDICATE_UPDATES: _STAFF,
    Permission.LIST_EMPLOYEES: _STAFF_AND_SUPER,
    Permission.MANAGE_EMPLOYEES: _STAFF_AND_SUPER,
    Permission.DELETE_EMPLOYEES: _ADMINS,
    Permission.IMPORT_EMPLOYEES: _ADMINS,
    Permission.EXPORT_EMPLOYEES: _ADMINS,
    Permission.MARK_ATTENDANCE_FOR: _STAFF_AND_SUPER,
    Permission.VIEW_ANY_ATTENDANCE: _STAFF_AND_SUPER,
    Permission.EXPORT_PAYROLL: _STAFF_AND_SUPER,
    Permission.SEND_MESSAGES: _ADMINS,
    Permission.VIEW_AUDIT_LOG: _ADMINS,
    Permission.RUN_REMINDERS: _ADMINS,
}


def is_allowed(role: Role, permission: Permission) -> bool:
    return role in CAPABILITIES.get(permission, frozenset())


def require_permission(role: Role, permission: Permission) -> None:
    if not is_allowed(role, permission):
        raise AuthorizationError("Forbidden: insufficient role")


def can_grant(actor_role: Role, target_role: Role) -> bool:
    """An actor may only assign roles up to its own tier."""
    return ROLE_RANK[target_role] <= ROLE_RANK[actor_role]
