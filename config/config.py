"""Settings shared by every environment, read from environment variables."""

import os


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_records"),
}

DEBUG = False
TESTING = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Apply database/schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = _flag("AUTO_INIT_DB")

TOKEN_MAX_AGE_SECONDS = int(os.getenv("TOKEN_MAX_AGE_SECONDS", str(7 * 24 * 3600)))
UPLOAD_GRANT_MAX_AGE_SECONDS = int(os.getenv("UPLOAD_GRANT_MAX_AGE_SECONDS", "3600"))
UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "uploads")
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))

OTP_TTL_MINUTES = int(os.getenv("OTP_TTL_MINUTES", "10"))
OTP_MAX_ATTEMPTS = int(os.getenv("OTP_MAX_ATTEMPTS", "5"))
RESET_TOKEN_EXPIRES_MIN = int(os.getenv("RESET_TOKEN_EXPIRES_MIN", "30"))
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

SMTP_HOST = os.getenv("SMTP_HOST", "")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER", "")
SMTP_PASS = os.getenv("SMTP_PASS", "")
SMTP_USE_TLS = _flag("SMTP_USE_TLS", "1")
EMAIL_FROM = os.getenv("EMAIL_FROM", SMTP_USER or "no-reply@localhost")

REMINDER_ENABLED = _flag("REMINDER_ENABLED")
REMINDER_TIME = os.getenv("REMINDER_TIME", "10:30")

# Seeded on startup when AUTO_INIT_DB is set and the password is non-empty
SUPER_ADMIN_EMPLOYEE_ID = os.getenv("SUPER_ADMIN_EMPLOYEE_ID", "SA-0001")
SUPER_ADMIN_EMAIL = os.getenv("SUPER_ADMIN_EMAIL", "superadmin@example.com")
SUPER_ADMIN_PASSWORD = os.getenv("SUPER_ADMIN_PASSWORD", "")
