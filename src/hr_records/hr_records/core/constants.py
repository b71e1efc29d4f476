"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

OTP_LENGTH = 6
DEFAULT_OTP_TTL_MINUTES = 10
DEFAULT_OTP_MAX_ATTEMPTS = 5
DEFAULT_RESET_TOKEN_EXPIRES_MIN = 30
DEFAULT_TOKEN_MAX_AGE_SECONDS = 7 * 24 * 3600
DEFAULT_UPLOAD_GRANT_MAX_AGE_SECONDS = 3600
DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024

MIN_PASSWORD_LENGTH = 6
MIN_FINAL_REJECT_REMARKS = 5

DEFAULT_HISTORY_LIMIT = 50
MAX_HISTORY_LIMIT = 200
DEFAULT_AUDIT_LIMIT = 100

ALLOWED_DOCUMENT_MIMETYPES = {
    "application/pdf": {".pdf"},
    "image/jpeg": {".jpg", ".jpeg"},
    "image/png": {".png"},
}

# Fields an employee may propose through a profile-update request.
PROFILE_UPDATE_FIELDS = (
    "name",
    "dob",
    "phone",
    "address",
    "emergency_contact",
    "designation",
    "department",
    "reporting_manager",
)

NOT_UPLOADED = "Not Uploaded"
PENDING_FINAL_VERIFICATION = "Pending for Final Verification"
