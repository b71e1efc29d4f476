from __future__ import annotations

from functools import wraps

from flask import g, request

from ..auth.tokens import TokenService
from ..core.exceptions import AuthenticationError
from ..core.permissions import Permission, require_permission
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository


def current_employee() -> Employee:
    return g.employee


class Guards:
    """Route decorators: resolve the bearer token to a live employee on every request."""

    def __init__(self, tokens: TokenService, employees: EmployeeRepository):
        self._tokens = tokens
        self._employees = employees

    def _authenticate(self) -> Employee:
        header = request.headers.get("Authorization", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            raise AuthenticationError("Not authorized, no token")

        claims = self._tokens.decode_access_token(token.strip())
        employee = self._employees.get_by_id(claims.id)
        if not employee:
            raise AuthenticationError("Not authorized: account no longer exists")
        return employee

    def login_required(self, view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            g.employee = self._authenticate()
            return view(*args, **kwargs)

        return wrapper

    def permission_required(self, permission: Permission):
        """Check the live role, not the role captured in the token."""

        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                g.employee = self._authenticate()
                require_permission(g.employee.role, permission)
                return view(*args, **kwargs)

            return wrapper

        return decorator
