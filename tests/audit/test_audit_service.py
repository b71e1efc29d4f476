import pytest

from hr_records.audit.model import RequestMeta
from hr_records.core.enums import AuditAction
from hr_records.core.exceptions import AuthorizationError


def test_log_records_actor_and_meta(container, repos, staff, fixed_now):
    container.audit_service.log(
        actor=staff.hr,
        action=AuditAction.OTP_ISSUED,
        target_type="Employee",
        target_id="E-1",
        meta=RequestMeta(ip="10.0.0.1", user_agent="pytest"),
        now=fixed_now,
    )

    entry = repos.audit.entries[0]
    assert (entry.actor_email, entry.actor_role, entry.action) == ("hr-1@example.com", "hr", "OTP_ISSUED")
    assert (entry.ip, entry.user_agent) == ("10.0.0.1", "pytest")
    assert entry.to_dict()["created_at"] == "2024-03-01T09:00:00"


def test_log_failure_does_not_raise(container, repos, staff):
    repos.audit.fail = True
    container.audit_service.log(actor=staff.hr, action=AuditAction.OTP_ISSUED, target_type="Employee", target_id="E-1")
    assert repos.audit.entries == []


def test_list_recent_filters_and_guards(container, staff):
    audit = container.audit_service
    audit.log(actor=staff.hr, action=AuditAction.OTP_ISSUED, target_type="Employee", target_id="E-1")
    audit.log(actor=staff.hr, action=AuditAction.OTP_VERIFIED, target_type="Employee", target_id="E-1")

    assert [e.action for e in audit.list_recent(actor=staff.admin)] == ["OTP_VERIFIED", "OTP_ISSUED"]
    assert [e.action for e in audit.list_recent(actor=staff.admin, action="OTP_ISSUED")] == ["OTP_ISSUED"]
    with pytest.raises(AuthorizationError):
        audit.list_recent(actor=staff.hr)
