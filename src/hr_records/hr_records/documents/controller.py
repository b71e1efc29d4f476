from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container
from ..core.exceptions import ValidationError
from ..core.permissions import Permission
from ..web.helpers import json_body, request_meta
from ..web.security import Guards, current_employee


def _optional_int(value, name: str):
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer")


def register(app: Flask, container: Container) -> None:
    guards = Guards(container.tokens, container.employees_repo)
    documents = container.document_service

    @app.route("/api/employee/upload", methods=["POST"], endpoint="employee_upload_document")
    @guards.login_required
    def employee_upload_document():
        doc = documents.upload(
            employee=current_employee(),
            doc_type=request.form.get("name", ""),
            upload=request.files.get("document"),
            upload_grant=request.headers.get("X-Upload-Grant"),
            supersedes_id=_optional_int(request.form.get("supersedes"), "supersedes"),
            meta=request_meta(),
        )
        return jsonify({"message": "Document uploaded", "document": doc.to_dict()}), 201

    @app.route("/api/employee/documents", methods=["GET"], endpoint="employee_documents")
    @guards.login_required
    def employee_documents():
        return jsonify([d.to_dict() for d in documents.list_own(current_employee())])

    @app.route("/api/hr/documents/<employee_id>", methods=["GET"], endpoint="hr_employee_documents")
    @guards.permission_required(Permission.REVIEW_DOCUMENTS)
    def hr_employee_documents(employee_id: str):
        docs = documents.list_for_employee(actor=current_employee(), employee_id=employee_id)
        return jsonify([d.to_dict() for d in docs])

    @app.route("/api/hr/documents/<employee_id>/<int:doc_id>", methods=["PATCH"], endpoint="hr_review_document")
    @guards.permission_required(Permission.REVIEW_DOCUMENTS)
    def hr_review_document(employee_id: str, doc_id: int):
        body = json_body()
        doc = documents.hr_review(
            actor=current_employee(),
            employee_id=employee_id,
            document_id=doc_id,
            status=body.get("status", ""),
            remarks=body.get("remarks", ""),
            meta=request_meta(),
        )
        return jsonify({"message": f"Document {doc.status.value}", "document": doc.to_dict()})

    @app.route("/api/superAdmin/verified-documents", methods=["GET"], endpoint="super_verification_queue")
    @guards.permission_required(Permission.FINAL_VERIFY_DOCUMENTS)
    def super_verification_queue():
        queue = documents.final_verification_queue(actor=current_employee())
        return jsonify([q.to_dict() for q in queue])

    @app.route(
        "/api/superAdmin/documents/<employee_id>/<int:doc_id>/verify",
        methods=["PATCH"],
        endpoint="super_final_review",
    )
    @guards.permission_required(Permission.FINAL_VERIFY_DOCUMENTS)
    def super_final_review(employee_id: str, doc_id: int):
        body = json_body()
        doc = documents.final_review(
            actor=current_employee(),
            employee_id=employee_id,
            document_id=doc_id,
            final_status=body.get("finalStatus", ""),
            remarks=body.get("remarks", ""),
            meta=request_meta(),
        )
        return jsonify({"message": f"Document {doc.status.value}", "document": doc.to_dict()})
