from datetime import timedelta

import pytest

from hr_records.core.enums import Role
from hr_records.core.exceptions import AuthenticationError, ConflictError, ExpiredOrInvalidTokenError, ValidationError
from hr_records.employees.service import hash_reset_token


def test_register_creates_employee_and_token(container):
    result = container.auth_service.register(
        employee_id="E-9", email="New@Example.com", password="secret123", name="New Hire"
    )
    assert result.employee.role == Role.EMPLOYEE
    assert result.employee.email == "new@example.com"
    claims = container.tokens.decode_access_token(result.token)
    assert claims.id == result.employee.id


def test_register_conflicts(container, staff):
    with pytest.raises(ConflictError):
        container.auth_service.register(employee_id="E-1", email="x@example.com", password="secret123", name="X")
    with pytest.raises(ConflictError):
        container.auth_service.register(employee_id="E-9", email="e-1@example.com", password="secret123", name="X")


def test_register_short_password(container):
    with pytest.raises(ValidationError):
        container.auth_service.register(employee_id="E-9", email="x@example.com", password="123", name="X")


def test_login(container, staff):
    result = container.auth_service.login(email="E-1@example.com", password="secret123")
    assert result.employee.employee_id == "E-1"

    with pytest.raises(AuthenticationError):
        container.auth_service.login(email="e-1@example.com", password="wrong")
    with pytest.raises(AuthenticationError):
        container.auth_service.login(email="ghost@example.com", password="secret123")


def test_forgot_password_unknown_email_is_silent(container, repos):
    container.auth_service.forgot_password(email="ghost@example.com")
    assert repos.mailer.sent == []


def test_reset_password_flow(container, repos, staff, fixed_now):
    auth = container.auth_service
    auth.forgot_password(email="e-1@example.com", now=fixed_now)

    text = repos.mailer.sent[-1]["text"]
    assert "http://frontend.test/reset-password/" in text
    token = text.rsplit("/", 1)[1]
    stored = repos.employees.get_by_id(staff.employee.id)
    assert stored.reset_token_hash == hash_reset_token(token)

    auth.reset_password(token=token, password="newpass1", now=fixed_now + timedelta(minutes=5))
    auth.login(email="e-1@example.com", password="newpass1")

    with pytest.raises(ExpiredOrInvalidTokenError):
        auth.reset_password(token=token, password="another1", now=fixed_now)


def test_reset_password_expired(container, repos, staff, fixed_now):
    container.auth_service.forgot_password(email="e-1@example.com", now=fixed_now)
    token = repos.mailer.sent[-1]["text"].rsplit("/", 1)[1]

    with pytest.raises(ExpiredOrInvalidTokenError):
        container.auth_service.reset_password(token=token, password="newpass1", now=fixed_now + timedelta(minutes=31))
