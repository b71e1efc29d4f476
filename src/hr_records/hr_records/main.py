from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .audit.controller import register as register_audit
from .container import Container, build_container
from .database.bootstrap import apply_schema, ensure_super_admin, list_tables
from .documents.controller import register as register_documents
from .employees.controller import register as register_employees
from .notifications.controller import register as register_notifications
from .otp.controller import register as register_otp
from .profile_updates.controller import register as register_profile_updates
from .reminders.controller import register as register_reminders
from .reminders.scheduler import DailyScheduler, parse_run_time
from .web.errors import register as register_error_handlers

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(settings_module: Optional[str] = None, container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    _configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    # Leave headroom over the document limit for the multipart envelope.
    app.config["MAX_CONTENT_LENGTH"] = int(getattr(settings, "MAX_UPLOAD_BYTES", 5 * 1024 * 1024)) + 1024 * 1024

    db_config = getattr(settings, "DB_CONFIG")
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("schema ready (tables=%s)", len(list_tables(db_config)))
            password = getattr(settings, "SUPER_ADMIN_PASSWORD", "")
            if password:
                created = ensure_super_admin(
                    db_config,
                    employee_id=getattr(settings, "SUPER_ADMIN_EMPLOYEE_ID", "SA-0001"),
                    email=getattr(settings, "SUPER_ADMIN_EMAIL", "superadmin@example.com"),
                    password=password,
                )
                if created:
                    logger.info("super admin account seeded")
        container = build_container(db_config=db_config, settings=settings)

    app.extensions["hr_records.container"] = container

    register_error_handlers(app)
    register_employees(app, container)
    register_documents(app, container)
    register_otp(app, container)
    register_profile_updates(app, container)
    register_notifications(app, container)
    register_attendance(app, container)
    register_audit(app, container)
    register_reminders(app, container)

    if bool(getattr(settings, "REMINDER_ENABLED", False)) and not app.config["TESTING"]:
        scheduler = DailyScheduler(
            container.reminder_service.sweep,
            at=parse_run_time(getattr(settings, "REMINDER_TIME", "10:30")),
        )
        scheduler.start()
        app.extensions["hr_records.reminder_scheduler"] = scheduler

    return app
