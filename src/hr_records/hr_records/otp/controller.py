from __future__ import annotations

from flask import Flask, jsonify

from ..container import Container
from ..core.permissions import Permission
from ..web.helpers import json_body, request_meta
from ..web.security import Guards, current_employee


def register(app: Flask, container: Container) -> None:
    guards = Guards(container.tokens, container.employees_repo)
    otp = container.otp_service

    @app.route("/api/hr/send-otp", methods=["POST"], endpoint="hr_send_otp")
    @guards.permission_required(Permission.ISSUE_OTP)
    def hr_send_otp():
        expires = otp.issue(
            actor=current_employee(),
            employee_email=json_body().get("employeeEmail", ""),
            meta=request_meta(),
        )
        return jsonify({"message": "OTP sent to employee email", "expires": expires.isoformat()})

    @app.route("/api/hr/verify-otp", methods=["POST"], endpoint="verify_otp")
    @guards.login_required
    def verify_otp():
        grant = otp.verify(
            employee=current_employee(),
            submitted_code=str(json_body().get("otp", "")).strip(),
            meta=request_meta(),
        )
        return jsonify(
            {
                "message": "OTP verified. You can now upload documents.",
                "uploadGrant": grant.token,
                "expiresIn": grant.expires_in,
            }
        )
