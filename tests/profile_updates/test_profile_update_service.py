from datetime import date

import pytest

from hr_records.core.enums import RequestStatus
from hr_records.core.exceptions import AuthorizationError, NotFoundError, ValidationError


def test_submit_keeps_only_known_fields(container, staff, repos):
    pending = container.profile_update_service.submit(
        employee=staff.employee, changes={"phone": "+15551234", "role": "superAdmin", "salary": 1}
    )
    assert pending.data == {"phone": "+15551234"}
    assert pending.status == RequestStatus.PENDING
    assert repos.audit.actions() == ["PROFILE_UPDATE_REQUESTED"]


def test_submit_without_valid_fields(container, staff):
    with pytest.raises(ValidationError):
        container.profile_update_service.submit(employee=staff.employee, changes={"role": "admin"})


def test_submit_validates_values(container, staff):
    with pytest.raises(ValidationError):
        container.profile_update_service.submit(employee=staff.employee, changes={"phone": "call me"})


def test_second_submit_overwrites_first(container, staff):
    svc = container.profile_update_service
    svc.submit(employee=staff.employee, changes={"phone": "+15551234"})
    svc.submit(employee=staff.employee, changes={"address": "12 Main St"})

    assert svc.get_own(staff.employee).data == {"address": "12 Main St"}
    assert [r.employee_id for r in svc.list_pending(actor=staff.hr)] == ["E-1"]


def test_approve_merges_requested_fields_only(container, staff, repos):
    svc = container.profile_update_service
    svc.submit(employee=staff.employee, changes={"phone": "+15551234", "dob": "1990-05-17"})

    updated = svc.adjudicate(actor=staff.hr, employee_id="E-1", decision="Approved")

    assert updated.phone == "+15551234"
    assert updated.dob == date(1990, 5, 17)
    assert updated.department == "Finance"
    assert svc.get_own(staff.employee) is None
    note = repos.notifications.list_for_owner(staff.employee.id)[-1]
    assert note.type == "profile_update"


def test_reject_discards_and_leaves_profile(container, staff, repos):
    svc = container.profile_update_service
    svc.submit(employee=staff.employee, changes={"department": "Sales"})

    updated = svc.adjudicate(actor=staff.admin, employee_id="E-1", decision="Rejected", remarks="Not approved by manager")

    assert updated.department == "Finance"
    assert svc.get_own(staff.employee) is None
    assert repos.audit.actions()[-1] == "PROFILE_UPDATE_REJECTED"
    assert "Not approved by manager" in repos.notifications.list_for_owner(staff.employee.id)[-1].message


def test_adjudicate_without_pending_request(container, staff):
    with pytest.raises(NotFoundError):
        container.profile_update_service.adjudicate(actor=staff.hr, employee_id="E-1", decision="Approved")


def test_adjudicate_rejects_unknown_decision(container, staff):
    container.profile_update_service.submit(employee=staff.employee, changes={"phone": "+15551234"})
    with pytest.raises(ValidationError):
        container.profile_update_service.adjudicate(actor=staff.hr, employee_id="E-1", decision="Pending")


def test_only_staff_adjudicate(container, staff):
    container.profile_update_service.submit(employee=staff.employee, changes={"phone": "+15551234"})
    with pytest.raises(AuthorizationError):
        container.profile_update_service.adjudicate(actor=staff.employee, employee_id="E-1", decision="Approved")
    with pytest.raises(AuthorizationError):
        container.profile_update_service.list_pending(actor=staff.super_admin)
