from __future__ import annotations

import io

from flask import Flask, jsonify, request, send_file

from ..container import Container
from ..core.permissions import Permission
from ..web.helpers import json_body, request_meta
from ..web.security import Guards, current_employee

# Client field names -> service payload keys.
_MARK_KEYS = {
    "date": "date",
    "checkIn": "check_in",
    "check_in": "check_in",
    "checkOut": "check_out",
    "check_out": "check_out",
    "status": "status",
    "note": "note",
    "mode": "mode",
}


def _mark_payload(body: dict) -> dict:
    """Keep only known keys; a key the client omitted stays absent."""
    return {_MARK_KEYS[k]: v for k, v in body.items() if k in _MARK_KEYS}


def register(app: Flask, container: Container) -> None:
    guards = Guards(container.tokens, container.employees_repo)
    attendance = container.attendance_service
    payroll = container.payroll_report_service

    @app.route("/api/attendance/mark", methods=["POST"], endpoint="attendance_mark")
    @guards.login_required
    def attendance_mark():
        record = attendance.mark(employee=current_employee(), payload=_mark_payload(json_body()), meta=request_meta())
        return jsonify({"message": "Attendance saved", "attendance": record.to_dict()})

    @app.route("/api/attendance/mark-for", methods=["POST"], endpoint="attendance_mark_for")
    @guards.permission_required(Permission.MARK_ATTENDANCE_FOR)
    def attendance_mark_for():
        body = json_body()
        record = attendance.mark_for(
            actor=current_employee(),
            user_id=body.get("userId"),
            payload=_mark_payload(body),
            meta=request_meta(),
        )
        return jsonify({"message": "Attendance saved", "attendance": record.to_dict()})

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    @guards.login_required
    def attendance_history():
        args = request.args
        page = attendance.history(
            requester=current_employee(),
            user_id=args.get("userId"),
            start=args.get("from"),
            end=args.get("to"),
            page=args.get("page", 1),
            limit=args.get("limit", 50),
        )
        return jsonify(page.to_dict())

    @app.route("/api/attendance/export/payroll", methods=["GET"], endpoint="attendance_export_payroll")
    @guards.permission_required(Permission.EXPORT_PAYROLL)
    def attendance_export_payroll():
        export = payroll.export_payroll(
            actor=current_employee(),
            start=request.args.get("from"),
            end=request.args.get("to"),
            meta=request_meta(),
        )
        return send_file(
            io.BytesIO(export.content),
            mimetype=export.mimetype,
            as_attachment=True,
            download_name=export.filename,
        )
