from __future__ import annotations

from dataclasses import dataclass

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ExpiredOrInvalidTokenError


@dataclass(frozen=True)
class TokenClaims:
    """Bearer-token payload: which account, and the role it had at sign-in."""

    id: int
    role: Role


class TokenService:
    """Signs bearer tokens and OTP upload grants with the application secret."""

    _ACCESS_SALT = "hr-records.access"
    _UPLOAD_SALT = "hr-records.upload-grant"

    def __init__(self, secret_key: str, *, access_max_age: int, upload_grant_max_age: int):
        self._access = URLSafeTimedSerializer(secret_key, salt=self._ACCESS_SALT)
        self._upload = URLSafeTimedSerializer(secret_key, salt=self._UPLOAD_SALT)
        self._access_max_age = int(access_max_age)
        self._upload_grant_max_age = int(upload_grant_max_age)

    @property
    def upload_grant_max_age(self) -> int:
        return self._upload_grant_max_age

    def issue_access_token(self, *, employee_pk: int, role: Role) -> str:
        return self._access.dumps({"id": int(employee_pk), "role": role.value})

    def decode_access_token(self, token: str) -> TokenClaims:
        try:
            payload = self._access.loads(token, max_age=self._access_max_age)
            return TokenClaims(id=int(payload["id"]), role=Role(payload["role"]))
        except SignatureExpired:
            raise AuthenticationError("Not authorized: token expired")
        except (BadSignature, KeyError, TypeError, ValueError):
            raise AuthenticationError("Not authorized: invalid token")

    def issue_upload_grant(self, *, employee_pk: int) -> str:
        return self._upload.dumps({"id": int(employee_pk)})

    def check_upload_grant(self, token: str, *, employee_pk: int) -> None:
        try:
            payload = self._upload.loads(token, max_age=self._upload_grant_max_age)
        except SignatureExpired:
            raise ExpiredOrInvalidTokenError("Upload authorization expired. Please verify a new OTP.")
        except BadSignature:
            raise ExpiredOrInvalidTokenError("Invalid upload authorization")

        if not isinstance(payload, dict) or payload.get("id") != int(employee_pk):
            raise ExpiredOrInvalidTokenError("Invalid upload authorization")
