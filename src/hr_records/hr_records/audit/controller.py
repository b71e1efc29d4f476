from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container
from ..core.permissions import Permission
from ..web.security import Guards, current_employee


def register(app: Flask, container: Container) -> None:
    guards = Guards(container.tokens, container.employees_repo)

    @app.route("/api/superAdmin/audit", methods=["GET"], endpoint="super_audit_log")
    @guards.permission_required(Permission.VIEW_AUDIT_LOG)
    def super_audit_log():
        entries = container.audit_service.list_recent(
            actor=current_employee(),
            limit=request.args.get("limit", 100, type=int),
            action=request.args.get("action") or None,
        )
        return jsonify([e.to_dict() for e in entries])
