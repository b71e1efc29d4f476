from __future__ import annotations

import io
from dataclasses import dataclass, replace
from datetime import date, datetime
from types import SimpleNamespace
from typing import Any, Mapping, Optional

import pytest
from werkzeug.security import generate_password_hash

from hr_records.attendance.model import AttendanceRecord, AttendanceReportRow
from hr_records.audit.model import AuditEntry
from hr_records.container import assemble
from hr_records.core.enums import DocumentStatus, Role
from hr_records.core.exceptions import UpstreamError
from hr_records.documents.model import Document, QueuedDocument, StoredFile
from hr_records.employees.model import Employee
from hr_records.notifications.model import Notification
from hr_records.profile_updates.model import PendingUpdate, PendingUpdateRow

PASSWORD = "secret123"
# Cheap hash so fixtures stay fast.
PASSWORD_HASH = generate_password_hash(PASSWORD, method="pbkdf2:sha256:1000")


class InMemoryEmployees:
    def __init__(self):
        self.rows: dict[int, Employee] = {}
        self._id = 0

    def get_by_id(self, pk: int) -> Optional[Employee]:
        return self.rows.get(int(pk))

    def get_by_employee_id(self, employee_id: str) -> Optional[Employee]:
        return next((e for e in self.rows.values() if e.employee_id == employee_id), None)

    def get_by_email(self, email: str) -> Optional[Employee]:
        return next((e for e in self.rows.values() if e.email == email.lower()), None)

    def get_by_reset_token(self, token_hash: str) -> Optional[Employee]:
        return next((e for e in self.rows.values() if e.reset_token_hash == token_hash), None)

    def create(self, *, employee_id: str, email: str, password_hash: str, role: Role, profile: Mapping[str, Any]) -> int:
        self._id += 1
        self.rows[self._id] = Employee(
            id=self._id,
            employee_id=employee_id,
            email=email.lower(),
            password_hash=password_hash,
            role=role,
            created_at=datetime(2024, 1, 1),
            **dict(profile),
        )
        return self._id

    def update_fields(self, pk: int, fields: Mapping[str, Any]) -> bool:
        if pk not in self.rows:
            return False
        self.rows[pk] = replace(self.rows[pk], **dict(fields))
        return True

    def delete_by_id(self, pk: int) -> bool:
        return self.rows.pop(int(pk), None) is not None

    def list_all(self):
        return sorted(self.rows.values(), key=lambda e: e.id, reverse=True)

    def list_by_role(self, role: Role):
        return [e for e in sorted(self.rows.values(), key=lambda e: e.id) if e.role == role]

    def set_otp(self, pk: int, *, code: str, expires: datetime) -> None:
        self.rows[pk] = replace(self.rows[pk], otp_code=code, otp_expires=expires, otp_attempts=0)

    def increment_otp_attempts(self, pk: int) -> int:
        self.rows[pk] = replace(self.rows[pk], otp_attempts=self.rows[pk].otp_attempts + 1)
        return self.rows[pk].otp_attempts

    def clear_otp(self, pk: int) -> None:
        self.rows[pk] = replace(self.rows[pk], otp_code=None, otp_expires=None, otp_attempts=0)

    def set_reset_token(self, pk: int, *, token_hash: str, expires: datetime) -> None:
        self.rows[pk] = replace(self.rows[pk], reset_token_hash=token_hash, reset_expires=expires)

    def set_password(self, pk: int, *, password_hash: str) -> None:
        self.rows[pk] = replace(self.rows[pk], password_hash=password_hash, reset_token_hash=None, reset_expires=None)


class InMemoryDocuments:
    def __init__(self, employees: InMemoryEmployees):
        self._employees = employees
        self.rows: dict[int, Document] = {}
        self._id = 0
        self.fail = False

    def add(self, *, owner_pk, name, stored: StoredFile, uploaded_at, supersedes_id=None) -> Document:
        if self.fail:
            raise RuntimeError("document store down")
        self._id += 1
        doc = Document(
            id=self._id,
            owner_pk=owner_pk,
            name=name,
            filename=stored.filename,
            mimetype=stored.mimetype,
            size=stored.size,
            status=DocumentStatus.PENDING,
            uploaded_at=uploaded_at,
            supersedes_id=supersedes_id,
        )
        self.rows[doc.id] = doc
        return doc

    def get(self, *, owner_pk: int, document_id: int) -> Optional[Document]:
        doc = self.rows.get(int(document_id))
        return doc if doc and doc.owner_pk == owner_pk else None

    def list_for_owner(self, owner_pk: int):
        return [d for d in self.rows.values() if d.owner_pk == owner_pk]

    def statuses_by_owner(self) -> dict[int, list[DocumentStatus]]:
        out: dict[int, list[DocumentStatus]] = {}
        for d in self.rows.values():
            out.setdefault(d.owner_pk, []).append(d.status)
        return out

    def list_queue(self, status: DocumentStatus):
        out = []
        for d in self.rows.values():
            if d.status == status:
                owner = self._employees.get_by_id(d.owner_pk)
                out.append(QueuedDocument(employee_id=owner.employee_id, employee_name=owner.name, document=d))
        return out

    def transition(self, *, owner_pk, document_id, expected, new_status, remarks, reviewed_by, reviewed_at):
        doc = self.get(owner_pk=owner_pk, document_id=document_id)
        if not doc or doc.status != expected:
            return None
        doc = replace(doc, status=new_status, remarks=remarks, reviewed_by=reviewed_by, reviewed_at=reviewed_at)
        self.rows[doc.id] = doc
        return doc


class InMemoryNotifications:
    def __init__(self):
        self.rows: list[Notification] = []
        self.fail = False

    def add(self, *, owner_pk, type, title, message, meta, created_at) -> Notification:
        if self.fail:
            raise RuntimeError("notification store down")
        n = Notification(
            id=len(self.rows) + 1,
            owner_pk=owner_pk,
            type=type,
            title=title,
            message=message,
            meta=dict(meta or {}),
            created_at=created_at,
        )
        self.rows.append(n)
        return n

    def list_for_owner(self, owner_pk: int):
        return [n for n in self.rows if n.owner_pk == owner_pk]

    def mark_read(self, *, owner_pk: int, notification_id: int) -> bool:
        for i, n in enumerate(self.rows):
            if n.id == notification_id and n.owner_pk == owner_pk:
                self.rows[i] = replace(n, read=True)
                return True
        return False

    def mark_all_read(self, owner_pk: int) -> int:
        count = 0
        for i, n in enumerate(self.rows):
            if n.owner_pk == owner_pk and not n.read:
                self.rows[i] = replace(n, read=True)
                count += 1
        return count


class InMemoryProfileUpdates:
    def __init__(self, employees: InMemoryEmployees):
        self._employees = employees
        self.rows: dict[int, PendingUpdate] = {}

    def put(self, *, owner_pk, data, requested_by, requested_at) -> PendingUpdate:
        self.rows[owner_pk] = PendingUpdate(
            owner_pk=owner_pk, data=dict(data), requested_by=requested_by, requested_at=requested_at
        )
        return self.rows[owner_pk]

    def get(self, owner_pk: int) -> Optional[PendingUpdate]:
        return self.rows.get(owner_pk)

    def list_pending(self):
        out = []
        for pk, update in self.rows.items():
            e = self._employees.get_by_id(pk)
            out.append(PendingUpdateRow(employee_id=e.employee_id, employee_name=e.name, email=e.email, update=update))
        return out

    def clear(self, owner_pk: int) -> bool:
        return self.rows.pop(owner_pk, None) is not None


class InMemoryAttendance:
    def __init__(self, employees: InMemoryEmployees):
        self._employees = employees
        self.rows: dict[tuple[int, date], AttendanceRecord] = {}
        self._id = 0

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return self.rows.get((user_id, work_date))

    def upsert(self, *, user_id, work_date, status, check_in, check_out, work_hours, note) -> AttendanceRecord:
        existing = self.rows.get((user_id, work_date))
        if existing:
            rec_id = existing.id
        else:
            self._id += 1
            rec_id = self._id
        rec = AttendanceRecord(
            id=rec_id,
            user_id=user_id,
            work_date=work_date,
            status=status,
            check_in=check_in,
            check_out=check_out,
            work_hours=work_hours,
            note=note,
        )
        self.rows[(user_id, work_date)] = rec
        return rec

    def _in_range(self, user_id, start_date, end_date):
        items = [r for r in self.rows.values() if r.user_id == user_id]
        if start_date:
            items = [r for r in items if r.work_date >= start_date]
        if end_date:
            items = [r for r in items if r.work_date <= end_date]
        return items

    def list_for_user(self, user_id, *, start_date=None, end_date=None, offset=0, limit=50):
        items = sorted(self._in_range(user_id, start_date, end_date), key=lambda r: r.work_date, reverse=True)
        return items[offset : offset + limit]

    def count_for_user(self, user_id, *, start_date=None, end_date=None) -> int:
        return len(self._in_range(user_id, start_date, end_date))

    def users_with_record_on(self, work_date: date) -> set[int]:
        return {uid for (uid, d) in self.rows if d == work_date}

    def get_report_rows(self, *, start_date, end_date):
        out = []
        for r in sorted(self.rows.values(), key=lambda r: (r.user_id, r.work_date)):
            if start_date <= r.work_date <= end_date:
                e = self._employees.get_by_id(r.user_id)
                out.append(
                    AttendanceReportRow(
                        user_id=r.user_id,
                        employee_id=e.employee_id,
                        name=e.name,
                        department=e.department,
                        work_date=r.work_date,
                        status=r.status,
                        work_hours=r.work_hours,
                    )
                )
        return out


class InMemoryReminders:
    def __init__(self):
        self.markers: set[tuple[int, date]] = set()
        self.fail_for: set[int] = set()

    def claim(self, *, user_id, work_date, sent_at) -> bool:
        if user_id in self.fail_for:
            raise RuntimeError("reminder store down")
        if (user_id, work_date) in self.markers:
            return False
        self.markers.add((user_id, work_date))
        return True

    def release(self, *, user_id, work_date) -> None:
        self.markers.discard((user_id, work_date))


class InMemoryAudit:
    def __init__(self):
        self.entries: list[AuditEntry] = []
        self.fail = False

    def add(self, entry: AuditEntry) -> int:
        if self.fail:
            raise RuntimeError("audit store down")
        self.entries.append(replace(entry, entry_id=len(self.entries) + 1))
        return len(self.entries)

    def list_recent(self, *, limit, action=None):
        items = [e for e in self.entries if action is None or e.action == action]
        return list(reversed(items))[:limit]

    def actions(self) -> list[str]:
        return [e.action for e in self.entries]


class RecordingMailer:
    def __init__(self):
        self.sent: list[dict] = []
        self.fail_for: set[str] = set()

    def send(self, *, to, subject, text=None, html=None) -> None:
        if to in self.fail_for or "*" in self.fail_for:
            raise UpstreamError(f"Email sending failed: {to}")
        self.sent.append({"to": to, "subject": subject, "text": text, "html": html})


class InMemoryStorage:
    def __init__(self):
        self.files: dict[str, bytes] = {}

    def save(self, upload, *, size: int) -> StoredFile:
        name = f"{len(self.files) + 1}-{upload.filename}"
        upload.stream.seek(0)
        self.files[name] = upload.stream.read()
        return StoredFile(filename=name, mimetype=upload.mimetype, size=size)

    def delete(self, filename: str) -> None:
        self.files.pop(filename, None)


@dataclass
class FakeUpload:
    filename: str
    mimetype: str
    stream: io.BytesIO

    @classmethod
    def pdf(cls, name: str = "pan.pdf", content: bytes = b"%PDF-1.4 test") -> "FakeUpload":
        return cls(filename=name, mimetype="application/pdf", stream=io.BytesIO(content))


TEST_SETTINGS = SimpleNamespace(
    SECRET_KEY="test-secret",
    TOKEN_MAX_AGE_SECONDS=3600,
    UPLOAD_GRANT_MAX_AGE_SECONDS=600,
    MAX_UPLOAD_BYTES=1024,
    OTP_TTL_MINUTES=10,
    OTP_MAX_ATTEMPTS=5,
    RESET_TOKEN_EXPIRES_MIN=30,
    FRONTEND_URL="http://frontend.test",
)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 3, 1, 9, 0, 0)


@pytest.fixture
def repos():
    employees = InMemoryEmployees()
    return SimpleNamespace(
        employees=employees,
        documents=InMemoryDocuments(employees),
        notifications=InMemoryNotifications(),
        updates=InMemoryProfileUpdates(employees),
        attendance=InMemoryAttendance(employees),
        reminders=InMemoryReminders(),
        audit=InMemoryAudit(),
        mailer=RecordingMailer(),
        storage=InMemoryStorage(),
    )


@pytest.fixture
def container(repos):
    return assemble(
        employees_repo=repos.employees,
        documents_repo=repos.documents,
        notifications_repo=repos.notifications,
        updates_repo=repos.updates,
        attendance_repo=repos.attendance,
        reminders_repo=repos.reminders,
        audit_repo=repos.audit,
        mailer=repos.mailer,
        storage=repos.storage,
        settings=TEST_SETTINGS,
    )


@pytest.fixture
def make_employee(repos):
    """Create an account directly in the fake store and return it."""

    def _make(employee_id: str, role: Role = Role.EMPLOYEE, **profile) -> Employee:
        profile.setdefault("name", employee_id)
        pk = repos.employees.create(
            employee_id=employee_id,
            email=f"{employee_id.lower()}@example.com",
            password_hash=PASSWORD_HASH,
            role=role,
            profile=profile,
        )
        return repos.employees.get_by_id(pk)

    return _make


@pytest.fixture
def staff(make_employee):
    return SimpleNamespace(
        employee=make_employee("E-1", department="Finance"),
        hr=make_employee("HR-1", Role.HR),
        admin=make_employee("AD-1", Role.ADMIN),
        super_admin=make_employee("SA-1", Role.SUPER_ADMIN),
    )


@pytest.fixture
def upload_pdf():
    return FakeUpload.pdf
