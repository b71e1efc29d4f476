from __future__ import annotations

from flask import Flask, jsonify

from ..container import Container
from ..core.permissions import Permission
from ..employees.profile import normalize_profile_keys
from ..web.helpers import json_body, request_meta
from ..web.security import Guards, current_employee


def register(app: Flask, container: Container) -> None:
    guards = Guards(container.tokens, container.employees_repo)
    updates = container.profile_update_service

    @app.route("/api/employee/me", methods=["PUT"], endpoint="employee_request_update")
    @guards.login_required
    def employee_request_update():
        pending = updates.submit(
            employee=current_employee(),
            changes=normalize_profile_keys(json_body()),
            meta=request_meta(),
        )
        return jsonify({"message": "Update request submitted for approval", "pendingUpdate": pending.to_dict()}), 202

    @app.route("/api/employee/me/update-request", methods=["GET"], endpoint="employee_pending_update")
    @guards.login_required
    def employee_pending_update():
        pending = updates.get_own(current_employee())
        return jsonify({"pendingUpdate": pending.to_dict() if pending else None})

    @app.route("/api/hr/update-requests", methods=["GET"], endpoint="hr_list_update_requests")
    @guards.permission_required(Permission.ADJUDICATE_UPDATES)
    def hr_list_update_requests():
        return jsonify([row.to_dict() for row in updates.list_pending(actor=current_employee())])

    @app.route("/api/hr/update-requests/<employee_id>", methods=["PATCH"], endpoint="hr_adjudicate_update")
    @guards.permission_required(Permission.ADJUDICATE_UPDATES)
    def hr_adjudicate_update(employee_id: str):
        body = json_body()
        employee = updates.adjudicate(
            actor=current_employee(),
            employee_id=employee_id,
            decision=body.get("decision", ""),
            remarks=body.get("remarks", ""),
            meta=request_meta(),
        )
        return jsonify({"message": "Update request processed", "employee": employee.to_public_dict()})
