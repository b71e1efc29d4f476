from __future__ import annotations

from flask import Flask, jsonify

from ..container import Container
from ..core.permissions import Permission
from ..web.helpers import json_body, request_meta
from ..web.security import Guards, current_employee


def register(app: Flask, container: Container) -> None:
    guards = Guards(container.tokens, container.employees_repo)
    notifications = container.notification_service

    @app.route("/api/employee/notifications", methods=["GET"], endpoint="employee_notifications")
    @guards.login_required
    def employee_notifications():
        me = current_employee()
        items = notifications.list_for(me)
        return jsonify(
            {
                "notifications": [n.to_dict() for n in items],
                "unread": notifications.unread_count(me),
            }
        )

    @app.route(
        "/api/employee/notifications/<int:notification_id>/read",
        methods=["PATCH"],
        endpoint="employee_notification_read",
    )
    @guards.login_required
    def employee_notification_read(notification_id: int):
        notifications.mark_read(current_employee(), notification_id)
        return jsonify({"message": "Notification marked as read"})

    @app.route("/api/employee/notifications/read-all", methods=["PATCH"], endpoint="employee_notifications_read_all")
    @guards.login_required
    def employee_notifications_read_all():
        updated = notifications.mark_all_read(current_employee())
        return jsonify({"message": "All notifications marked as read", "updated": updated})

    @app.route("/api/superAdmin/messages", methods=["POST"], endpoint="super_send_message")
    @guards.permission_required(Permission.SEND_MESSAGES)
    def super_send_message():
        body = json_body()
        entry = notifications.send_message(
            actor=current_employee(),
            employee_email=body.get("employeeEmail", ""),
            subject=body.get("subject", ""),
            message=body.get("message", ""),
            meta=request_meta(),
        )
        return jsonify({"message": "Message sent", "notification": entry.to_dict() if entry else None}), 201
