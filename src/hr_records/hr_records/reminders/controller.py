from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_day
from ..container import Container
from ..core.permissions import Permission
from ..web.security import Guards


def register(app: Flask, container: Container) -> None:
    guards = Guards(container.tokens, container.employees_repo)

    @app.route("/api/superAdmin/reminders/run", methods=["POST"], endpoint="super_run_reminders")
    @guards.permission_required(Permission.RUN_REMINDERS)
    def super_run_reminders():
        day = request.args.get("date")
        result = container.reminder_service.sweep(day=parse_day(day) if day else None)
        return jsonify(result.to_dict())
