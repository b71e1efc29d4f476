from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from ..audit.model import RequestMeta
from ..audit.service import AuditService
from ..auth.tokens import TokenService
from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.constants import ALLOWED_DOCUMENT_MIMETYPES, MIN_FINAL_REJECT_REMARKS
from ..core.enums import AuditAction, DocumentStatus
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..core.permissions import Permission, require_permission
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..notifications.service import NotificationService
from .model import Document, QueuedDocument
from .repository import DocumentRepository
from .storage import FileStorage, UploadedFile, measure_size

HR_DECISIONS = {DocumentStatus.APPROVED, DocumentStatus.REJECTED}
FINAL_DECISIONS = {DocumentStatus.VERIFIED, DocumentStatus.REJECTED}


def _parse_decision(value: str, allowed: set[DocumentStatus]) -> DocumentStatus:
    try:
        status = DocumentStatus(str(value or "").strip())
    except ValueError:
        status = None
    if status not in allowed:
        raise ValidationError("Invalid status")
    return status


class DocumentService:
    """Document review state machine.

    Pending -> Approved (HR/Admin) -> Verified (super admin), with Rejected
    reachable from Pending (HR review) or Approved (final review). Rejected and
    Verified are terminal: any further transition raises ConflictError.
    """

    def __init__(
        self,
        documents: DocumentRepository,
        employees: EmployeeRepository,
        storage: FileStorage,
        tokens: TokenService,
        notifications: NotificationService,
        audit: AuditService,
        *,
        max_upload_bytes: int,
    ):
        self._documents = documents
        self._employees = employees
        self._storage = storage
        self._tokens = tokens
        self._notifications = notifications
        self._audit = audit
        self._max_upload_bytes = int(max_upload_bytes)

    def _get_owner(self, employee_id: str) -> Employee:
        owner = self._employees.get_by_employee_id(str(employee_id or "").strip())
        if not owner:
            raise NotFoundError("Employee not found")
        return owner

    def _get_document(self, owner: Employee, document_id: int) -> Document:
        doc = self._documents.get(owner_pk=owner.id, document_id=int(document_id))
        if not doc:
            raise NotFoundError("Document not found")
        return doc

    def _validate_file(self, upload: Optional[UploadedFile]) -> int:
        if upload is None or not (upload.filename or "").strip():
            raise ValidationError("Document file is required")

        extensions = ALLOWED_DOCUMENT_MIMETYPES.get((upload.mimetype or "").lower())
        if extensions is None or Path(upload.filename).suffix.lower() not in extensions:
            raise ValidationError("Only PDF, JPEG or PNG files are accepted")

        size = measure_size(upload)
        if size <= 0:
            raise ValidationError("Uploaded file is empty")
        if size > self._max_upload_bytes:
            raise ValidationError(f"File exceeds the {self._max_upload_bytes // 1024} KB limit")
        return size

    def upload(
        self,
        *,
        employee: Employee,
        doc_type: str,
        upload: Optional[UploadedFile],
        upload_grant: Optional[str],
        supersedes_id: Optional[int] = None,
        meta: Optional[RequestMeta] = None,
        now: Optional[datetime] = None,
    ) -> Document:
        """Append a new Pending document. Re-uploads never replace an entry."""

        if not upload_grant:
            raise AuthorizationError("OTP verification is required before uploading documents")
        self._tokens.check_upload_grant(upload_grant, employee_pk=employee.id)

        name = require_non_empty(doc_type, "Document type")
        size = self._validate_file(upload)

        if supersedes_id is not None:
            previous = self._get_document(employee, supersedes_id)
            if previous.status != DocumentStatus.REJECTED:
                raise ConflictError("Only a rejected document can be resubmitted")

        stored = self._storage.save(upload, size=size)
        now = now or now_local()
        try:
            doc = self._documents.add(
                owner_pk=employee.id,
                name=name,
                stored=stored,
                uploaded_at=now,
                supersedes_id=int(supersedes_id) if supersedes_id is not None else None,
            )
        except Exception:
            self._storage.delete(stored.filename)
            raise

        self._audit.log(
            actor=employee,
            action=AuditAction.DOCUMENT_UPLOADED,
            target_type="Document",
            target_id=doc.id,
            details={"employee_id": employee.employee_id, "name": name, "supersedes_id": doc.supersedes_id},
            meta=meta,
            now=now,
        )
        return doc

    def list_own(self, employee: Employee) -> Sequence[Document]:
        return self._documents.list_for_owner(employee.id)

    def list_for_employee(self, *, actor: Employee, employee_id: str) -> Sequence[Document]:
        require_permission(actor.role, Permission.REVIEW_DOCUMENTS)
        return self._documents.list_for_owner(self._get_owner(employee_id).id)

    def final_verification_queue(self, *, actor: Employee) -> Sequence[QueuedDocument]:
        require_permission(actor.role, Permission.FINAL_VERIFY_DOCUMENTS)
        return self._documents.list_queue(DocumentStatus.APPROVED)

    def hr_review(
        self,
        *,
        actor: Employee,
        employee_id: str,
        document_id: int,
        status: str,
        remarks: str = "",
        meta: Optional[RequestMeta] = None,
        now: Optional[datetime] = None,
    ) -> Document:
        require_permission(actor.role, Permission.REVIEW_DOCUMENTS)
        decision = _parse_decision(status, HR_DECISIONS)
        remarks = (remarks or "").strip()
        if decision == DocumentStatus.REJECTED and not remarks:
            raise ValidationError("Remarks are required when rejecting a document")

        owner = self._get_owner(employee_id)
        doc = self._get_document(owner, document_id)
        return self._transition(
            actor=actor,
            owner=owner,
            doc=doc,
            expected=DocumentStatus.PENDING,
            decision=decision,
            remarks=remarks,
            stage="hr",
            meta=meta,
            now=now,
        )

    def final_review(
        self,
        *,
        actor: Employee,
        employee_id: str,
        document_id: int,
        final_status: str,
        remarks: str = "",
        meta: Optional[RequestMeta] = None,
        now: Optional[datetime] = None,
    ) -> Document:
        require_permission(actor.role, Permission.FINAL_VERIFY_DOCUMENTS)
        decision = _parse_decision(final_status, FINAL_DECISIONS)
        remarks = (remarks or "").strip()
        if decision == DocumentStatus.REJECTED and len(remarks) < MIN_FINAL_REJECT_REMARKS:
            raise ValidationError(f"Rejection remarks must be at least {MIN_FINAL_REJECT_REMARKS} characters")

        owner = self._get_owner(employee_id)
        doc = self._get_document(owner, document_id)
        return self._transition(
            actor=actor,
            owner=owner,
            doc=doc,
            expected=DocumentStatus.APPROVED,
            decision=decision,
            remarks=remarks,
            stage="final",
            meta=meta,
            now=now,
        )

    def _transition(
        self,
        *,
        actor: Employee,
        owner: Employee,
        doc: Document,
        expected: DocumentStatus,
        decision: DocumentStatus,
        remarks: str,
        stage: str,
        meta: Optional[RequestMeta],
        now: Optional[datetime],
    ) -> Document:
        if doc.status != expected:
            raise ConflictError(f"Document is {doc.status.value}; expected {expected.value}")

        now = now or now_local()
        updated = self._documents.transition(
            owner_pk=owner.id,
            document_id=doc.id,
            expected=expected,
            new_status=decision,
            remarks=remarks,
            reviewed_by=actor.id,
            reviewed_at=now,
        )
        if updated is None:
            raise ConflictError("Document was reviewed concurrently; reload and try again")

        self._audit.log(
            actor=actor,
            action=AuditAction(f"DOCUMENT_{decision.value.upper()}"),
            target_type="Document",
            target_id=updated.id,
            details={
                "employee_id": owner.employee_id,
                "name": updated.name,
                "stage": stage,
                "from": expected.value,
                "to": decision.value,
                "remarks": remarks,
            },
            meta=meta,
            now=now,
        )

        title = "Document verified" if decision == DocumentStatus.VERIFIED else f"Document {decision.value.lower()}"
        message = f"Your document '{updated.name}' was {decision.value.lower()}."
        if remarks:
            message += f" Remarks: {remarks}"
        self._notifications.notify(
            owner_pk=owner.id,
            type="document_final_review" if stage == "final" else "document_review",
            title=title,
            message=message,
            meta={"document_id": updated.id, "status": decision.value},
            now=now,
        )
        return updated
