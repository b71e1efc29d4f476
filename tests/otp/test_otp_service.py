from datetime import timedelta

import pytest

from hr_records.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    OTPAttemptsExceededError,
    OTPExpiredError,
    OTPMismatchError,
    OTPNotIssuedError,
    UpstreamError,
)
from hr_records.otp.service import generate_code


def _issued_code(repos, employee):
    return repos.employees.get_by_id(employee.id).otp_code


def test_generate_code_is_six_digits():
    for _ in range(50):
        code = generate_code()
        assert len(code) == 6 and code.isdigit() and code[0] != "0"


def test_issue_stores_code_and_emails_it(container, repos, staff, fixed_now):
    expires = container.otp_service.issue(actor=staff.hr, employee_email="E-1@example.com", now=fixed_now)

    assert expires == fixed_now + timedelta(minutes=10)
    code = _issued_code(repos, staff.employee)
    assert repos.mailer.sent[-1]["to"] == "e-1@example.com"
    assert code in repos.mailer.sent[-1]["text"]
    assert repos.audit.actions() == ["OTP_ISSUED"]


def test_issue_requires_staff_role(container, staff):
    with pytest.raises(AuthorizationError):
        container.otp_service.issue(actor=staff.employee, employee_email="e-1@example.com")
    with pytest.raises(AuthorizationError):
        container.otp_service.issue(actor=staff.super_admin, employee_email="e-1@example.com")


def test_issue_unknown_email(container, staff):
    with pytest.raises(NotFoundError):
        container.otp_service.issue(actor=staff.hr, employee_email="nobody@example.com")


def test_issue_email_failure_is_upstream_error(container, repos, staff):
    repos.mailer.fail_for.add("e-1@example.com")
    with pytest.raises(UpstreamError):
        container.otp_service.issue(actor=staff.hr, employee_email="e-1@example.com")


def test_verify_success_returns_grant_and_consumes_code(container, repos, staff, fixed_now):
    otp = container.otp_service
    otp.issue(actor=staff.hr, employee_email="e-1@example.com", now=fixed_now)
    code = _issued_code(repos, staff.employee)

    grant = otp.verify(employee=staff.employee, submitted_code=code, now=fixed_now + timedelta(minutes=5))

    assert grant.expires_in == 600
    container.tokens.check_upload_grant(grant.token, employee_pk=staff.employee.id)
    assert _issued_code(repos, staff.employee) is None
    with pytest.raises(OTPNotIssuedError):
        otp.verify(employee=staff.employee, submitted_code=code, now=fixed_now)


def test_verify_after_ttl_is_expired(container, repos, staff, fixed_now):
    otp = container.otp_service
    otp.issue(actor=staff.hr, employee_email="e-1@example.com", now=fixed_now)
    code = _issued_code(repos, staff.employee)

    with pytest.raises(OTPExpiredError):
        otp.verify(employee=staff.employee, submitted_code=code, now=fixed_now + timedelta(minutes=11))
    assert _issued_code(repos, staff.employee) is None


def test_verify_mismatch_then_attempts_exceeded(container, repos, staff, fixed_now):
    otp = container.otp_service
    otp.issue(actor=staff.hr, employee_email="e-1@example.com", now=fixed_now)
    code = _issued_code(repos, staff.employee)
    wrong = "000000" if code != "000000" else "111111"

    for _ in range(4):
        with pytest.raises(OTPMismatchError):
            otp.verify(employee=staff.employee, submitted_code=wrong, now=fixed_now)
    with pytest.raises(OTPAttemptsExceededError):
        otp.verify(employee=staff.employee, submitted_code=wrong, now=fixed_now)

    # Code is invalidated; even the right one no longer works.
    with pytest.raises(OTPNotIssuedError):
        otp.verify(employee=staff.employee, submitted_code=code, now=fixed_now)


def test_reissue_replaces_previous_code(container, repos, staff, fixed_now):
    otp = container.otp_service
    otp.issue(actor=staff.hr, employee_email="e-1@example.com", now=fixed_now)
    first = _issued_code(repos, staff.employee)
    otp.issue(actor=staff.admin, employee_email="e-1@example.com", now=fixed_now)
    second = _issued_code(repos, staff.employee)

    if first != second:
        with pytest.raises(OTPMismatchError):
            otp.verify(employee=staff.employee, submitted_code=first, now=fixed_now)
    otp.verify(employee=staff.employee, submitted_code=second, now=fixed_now)


def test_verify_non_ascii_code_is_a_mismatch(container, repos, staff, fixed_now):
    otp = container.otp_service
    otp.issue(actor=staff.hr, employee_email="e-1@example.com", now=fixed_now)

    with pytest.raises(OTPMismatchError):
        otp.verify(employee=staff.employee, submitted_code="１２３４５６", now=fixed_now + timedelta(minutes=1))

    assert repos.employees.get_by_id(staff.employee.id).otp_attempts == 1
