import pytest

from hr_records.core.enums import Role
from hr_records.core.exceptions import AuthorizationError
from hr_records.core.permissions import Permission, can_grant, is_allowed, require_permission


@pytest.mark.parametrize(
    "role, permission, allowed",
    [
        (Role.HR, Permission.REVIEW_DOCUMENTS, True),
        (Role.ADMIN, Permission.REVIEW_DOCUMENTS, True),
        (Role.SUPER_ADMIN, Permission.REVIEW_DOCUMENTS, False),
        (Role.EMPLOYEE, Permission.REVIEW_DOCUMENTS, False),
        (Role.SUPER_ADMIN, Permission.FINAL_VERIFY_DOCUMENTS, True),
        (Role.ADMIN, Permission.FINAL_VERIFY_DOCUMENTS, False),
        (Role.HR, Permission.DELETE_EMPLOYEES, False),
        (Role.ADMIN, Permission.DELETE_EMPLOYEES, True),
        (Role.EMPLOYEE, Permission.EXPORT_PAYROLL, False),
        (Role.HR, Permission.EXPORT_PAYROLL, True),
    ],
)
def test_capability_table(role, permission, allowed):
    assert is_allowed(role, permission) is allowed


def test_require_permission_raises_forbidden():
    with pytest.raises(AuthorizationError):
        require_permission(Role.EMPLOYEE, Permission.ISSUE_OTP)


def test_roles_cannot_grant_above_their_tier():
    assert can_grant(Role.HR, Role.ADMIN)
    assert not can_grant(Role.HR, Role.SUPER_ADMIN)
    assert can_grant(Role.SUPER_ADMIN, Role.SUPER_ADMIN)
    assert not can_grant(Role.EMPLOYEE, Role.HR)
