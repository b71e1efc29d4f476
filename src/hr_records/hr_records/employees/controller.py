from __future__ import annotations

import io

from flask import Flask, jsonify, request, send_file

from ..common.spreadsheets import XLSX_MIMETYPE
from ..container import Container
from ..core.enums import AggregateView
from ..core.exceptions import ValidationError
from ..core.permissions import Permission
from ..web.helpers import json_body, request_meta
from ..web.security import Guards, current_employee
from .profile import normalize_profile_keys


def _auth_payload(result) -> dict:
    return {"token": result.token, "user": result.employee.to_public_dict()}


def _parse_view(value: str | None, default: AggregateView) -> AggregateView:
    if not value:
        return default
    try:
        return AggregateView(value.strip().lower())
    except ValueError:
        raise ValidationError("view must be 'hr' or 'final'")


def register(app: Flask, container: Container) -> None:
    guards = Guards(container.tokens, container.employees_repo)
    auth = container.auth_service
    employees = container.employee_service

    # ---- Auth ----
    @app.route("/api/auth/register", methods=["POST"], endpoint="auth_register")
    def auth_register():
        body = json_body()
        result = auth.register(
            employee_id=body.get("employeeId", ""),
            email=body.get("email", ""),
            password=body.get("password", ""),
            name=body.get("name", ""),
        )
        return jsonify(_auth_payload(result)), 201

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        body = json_body()
        result = auth.login(email=body.get("email", ""), password=body.get("password", ""))
        return jsonify(_auth_payload(result))

    @app.route("/api/auth/forgot-password", methods=["POST"], endpoint="auth_forgot_password")
    def auth_forgot_password():
        auth.forgot_password(email=json_body().get("email", ""))
        return jsonify({"message": "If that email is registered, a reset link has been sent."})

    @app.route("/api/auth/reset-password", methods=["POST"], endpoint="auth_reset_password")
    def auth_reset_password():
        body = json_body()
        auth.reset_password(token=body.get("token", ""), password=body.get("password", ""))
        return jsonify({"message": "Password has been reset successfully."})

    # ---- Self ----
    @app.route("/api/employee/me", methods=["GET"], endpoint="employee_me")
    @guards.login_required
    def employee_me():
        return jsonify(employees.get_profile(current_employee()))

    # ---- HR / Admin ----
    @app.route("/api/hr/employees", methods=["GET"], endpoint="hr_list_employees")
    @guards.permission_required(Permission.LIST_EMPLOYEES)
    def hr_list_employees():
        view = _parse_view(request.args.get("view"), AggregateView.HR)
        return jsonify(employees.list_employees(actor=current_employee(), view=view))

    @app.route("/api/superAdmin/employees", methods=["GET"], endpoint="super_list_employees")
    @guards.permission_required(Permission.LIST_EMPLOYEES)
    def super_list_employees():
        view = _parse_view(request.args.get("view"), AggregateView.FINAL)
        return jsonify(employees.list_employees(actor=current_employee(), view=view))

    @app.route("/api/hr/employees", methods=["POST"], endpoint="hr_create_employee")
    @guards.permission_required(Permission.MANAGE_EMPLOYEES)
    def hr_create_employee():
        body = json_body()
        profile = normalize_profile_keys(
            {k: v for k, v in body.items() if k not in {"employeeId", "email", "password", "role"}}
        )
        created = employees.create_employee(
            actor=current_employee(),
            employee_id=body.get("employeeId", ""),
            email=body.get("email", ""),
            password=body.get("password", ""),
            role=body.get("role") or "employee",
            profile=profile,
            meta=request_meta(),
        )
        return jsonify(created.to_public_dict()), 201

    @app.route("/api/hr/employees/<employee_id>", methods=["GET"], endpoint="hr_get_employee")
    @guards.permission_required(Permission.LIST_EMPLOYEES)
    def hr_get_employee(employee_id: str):
        target = employees.get_by_employee_id(actor=current_employee(), employee_id=employee_id)
        return jsonify(employees.get_profile(target))

    @app.route("/api/hr/employees/<employee_id>", methods=["PUT"], endpoint="hr_update_employee")
    @guards.permission_required(Permission.MANAGE_EMPLOYEES)
    def hr_update_employee(employee_id: str):
        updated = employees.update_employee(
            actor=current_employee(),
            employee_id=employee_id,
            changes=normalize_profile_keys(json_body()),
            meta=request_meta(),
        )
        return jsonify(updated.to_public_dict())

    @app.route("/api/hr/employees/<employee_id>", methods=["DELETE"], endpoint="hr_delete_employee")
    @guards.permission_required(Permission.DELETE_EMPLOYEES)
    def hr_delete_employee(employee_id: str):
        employees.delete_employee(actor=current_employee(), employee_id=employee_id, meta=request_meta())
        return jsonify({"message": "Employee deleted"})

    @app.route("/api/superAdmin/employees/bulk-upload", methods=["POST"], endpoint="super_bulk_upload")
    @guards.permission_required(Permission.IMPORT_EMPLOYEES)
    def super_bulk_upload():
        f = request.files.get("file")
        if not f or not f.filename:
            raise ValidationError("A .csv or .xlsx file is required")
        report = employees.bulk_import(
            actor=current_employee(),
            stream=f.stream,
            filename=f.filename,
            meta=request_meta(),
        )
        return jsonify(report.to_dict())

    @app.route("/api/superAdmin/employees/export", methods=["GET"], endpoint="super_export_employees")
    @guards.permission_required(Permission.EXPORT_EMPLOYEES)
    def super_export_employees():
        content = employees.export_employees(actor=current_employee(), meta=request_meta())
        return send_file(
            io.BytesIO(content),
            mimetype=XLSX_MIMETYPE,
            as_attachment=True,
            download_name="employees.xlsx",
        )
