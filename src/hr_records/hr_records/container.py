from __future__ import annotations

from dataclasses import dataclass
from types import ModuleType
from typing import Any, Optional

from .attendance.factory import MarkStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .audit.mysql_audit_repository import MySQLAuditRepository
from .audit.repository import AuditRepository
from .audit.service import AuditService
from .auth.tokens import TokenService
from .core import constants
from .database.connection import DBConfig, DatabaseConnection
from .documents.mysql_document_repository import MySQLDocumentRepository
from .documents.repository import DocumentRepository
from .documents.service import DocumentService
from .documents.storage import DiskFileStorage, FileStorage
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import AuthService, EmployeeService
from .mail.sender import EmailSender, LogOnlyEmailSender, SMTPEmailSender, SMTPSettings
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.repository import NotificationRepository
from .notifications.service import NotificationService
from .otp.service import OTPService
from .payroll.calculator.standard_calculator import StandardWorkHoursCalculator
from .payroll.service import PayrollReportService
from .profile_updates.mysql_profile_update_repository import MySQLProfileUpdateRepository
from .profile_updates.repository import ProfileUpdateRepository
from .profile_updates.service import ProfileUpdateService
from .reminders.mysql_reminder_repository import MySQLReminderRepository
from .reminders.repository import ReminderRepository
from .reminders.service import ReminderService


@dataclass(frozen=True)
class Container:
    employees_repo: EmployeeRepository
    documents_repo: DocumentRepository
    notifications_repo: NotificationRepository
    updates_repo: ProfileUpdateRepository
    attendance_repo: AttendanceRepository
    reminders_repo: ReminderRepository
    audit_repo: AuditRepository

    tokens: TokenService
    mailer: EmailSender
    storage: FileStorage

    audit_service: AuditService
    notification_service: NotificationService
    auth_service: AuthService
    employee_service: EmployeeService
    document_service: DocumentService
    otp_service: OTPService
    profile_update_service: ProfileUpdateService
    attendance_service: AttendanceService
    payroll_report_service: PayrollReportService
    reminder_service: ReminderService

    conn: Optional[DatabaseConnection] = None


def _setting(settings: Optional[ModuleType], name: str, default: Any) -> Any:
    return getattr(settings, name, default) if settings is not None else default


def build_mailer(settings: Optional[ModuleType]) -> EmailSender:
    host = _setting(settings, "SMTP_HOST", "")
    if not host:
        return LogOnlyEmailSender()
    return SMTPEmailSender(
        SMTPSettings(
            host=host,
            port=int(_setting(settings, "SMTP_PORT", 587)),
            user=_setting(settings, "SMTP_USER", ""),
            password=_setting(settings, "SMTP_PASS", ""),
            sender=_setting(settings, "EMAIL_FROM", "no-reply@localhost"),
            use_tls=bool(_setting(settings, "SMTP_USE_TLS", True)),
        )
    )


def assemble(
    *,
    employees_repo: EmployeeRepository,
    documents_repo: DocumentRepository,
    notifications_repo: NotificationRepository,
    updates_repo: ProfileUpdateRepository,
    attendance_repo: AttendanceRepository,
    reminders_repo: ReminderRepository,
    audit_repo: AuditRepository,
    mailer: EmailSender,
    storage: FileStorage,
    settings: Optional[ModuleType] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services over the given repositories (MySQL in production, fakes in tests)."""

    tokens = TokenService(
        _setting(settings, "SECRET_KEY", "dev-secret-key"),
        access_max_age=int(_setting(settings, "TOKEN_MAX_AGE_SECONDS", constants.DEFAULT_TOKEN_MAX_AGE_SECONDS)),
        upload_grant_max_age=int(
            _setting(settings, "UPLOAD_GRANT_MAX_AGE_SECONDS", constants.DEFAULT_UPLOAD_GRANT_MAX_AGE_SECONDS)
        ),
    )

    audit_service = AuditService(audit_repo)
    notification_service = NotificationService(notifications_repo, employees_repo, mailer, audit_service)
    auth_service = AuthService(
        employees_repo,
        tokens,
        mailer,
        frontend_url=_setting(settings, "FRONTEND_URL", "http://localhost:3000"),
        reset_token_expires_min=int(
            _setting(settings, "RESET_TOKEN_EXPIRES_MIN", constants.DEFAULT_RESET_TOKEN_EXPIRES_MIN)
        ),
    )
    employee_service = EmployeeService(employees_repo, documents_repo, audit_service)
    document_service = DocumentService(
        documents_repo,
        employees_repo,
        storage,
        tokens,
        notification_service,
        audit_service,
        max_upload_bytes=int(_setting(settings, "MAX_UPLOAD_BYTES", constants.DEFAULT_MAX_UPLOAD_BYTES)),
    )
    otp_service = OTPService(
        employees_repo,
        mailer,
        tokens,
        audit_service,
        ttl_minutes=int(_setting(settings, "OTP_TTL_MINUTES", constants.DEFAULT_OTP_TTL_MINUTES)),
        max_attempts=int(_setting(settings, "OTP_MAX_ATTEMPTS", constants.DEFAULT_OTP_MAX_ATTEMPTS)),
    )
    profile_update_service = ProfileUpdateService(updates_repo, employees_repo, notification_service, audit_service)
    attendance_service = AttendanceService(
        attendance_repo,
        employees_repo,
        audit_service,
        strategy_factory=MarkStrategyFactory(),
        calculator=StandardWorkHoursCalculator(),
    )
    payroll_report_service = PayrollReportService(attendance_repo, audit_service)
    reminder_service = ReminderService(employees_repo, attendance_repo, reminders_repo, mailer)

    return Container(
        employees_repo=employees_repo,
        documents_repo=documents_repo,
        notifications_repo=notifications_repo,
        updates_repo=updates_repo,
        attendance_repo=attendance_repo,
        reminders_repo=reminders_repo,
        audit_repo=audit_repo,
        tokens=tokens,
        mailer=mailer,
        storage=storage,
        audit_service=audit_service,
        notification_service=notification_service,
        auth_service=auth_service,
        employee_service=employee_service,
        document_service=document_service,
        otp_service=otp_service,
        profile_update_service=profile_update_service,
        attendance_service=attendance_service,
        payroll_report_service=payroll_report_service,
        reminder_service=reminder_service,
        conn=conn,
    )


def build_container(*, db_config: dict, settings: Optional[ModuleType] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return assemble(
        employees_repo=MySQLEmployeeRepository(conn),
        documents_repo=MySQLDocumentRepository(conn),
        notifications_repo=MySQLNotificationRepository(conn),
        updates_repo=MySQLProfileUpdateRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        reminders_repo=MySQLReminderRepository(conn),
        audit_repo=MySQLAuditRepository(conn),
        mailer=build_mailer(settings),
        storage=DiskFileStorage(_setting(settings, "UPLOAD_FOLDER", "uploads")),
        settings=settings,
        conn=conn,
    )
