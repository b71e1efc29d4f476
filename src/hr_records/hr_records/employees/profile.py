from __future__ import annotations

from typing import Any, Iterable, Mapping

from ..common.datetime_utils import parse_day
from ..common.validators import require_non_empty, require_phone
from ..core.constants import PROFILE_UPDATE_FIELDS
from ..core.exceptions import ValidationError

_LABELS = {
    "name": "Name",
    "dob": "Date of birth",
    "phone": "Phone",
    "address": "Address",
    "emergency_contact": "Emergency contact",
    "designation": "Designation",
    "department": "Department",
    "reporting_manager": "Reporting manager",
}


def clean_profile_fields(
    data: Mapping[str, Any],
    *,
    allowed: Iterable[str] = PROFILE_UPDATE_FIELDS,
) -> dict[str, Any]:
    """Keep only allow-listed keys and validate each kept value.

    Unknown keys are dropped silently; a present but invalid value raises
    ValidationError.
    """

    allowed = set(allowed)
    cleaned: dict[str, Any] = {}
    for key, value in (data or {}).items():
        if key not in allowed:
            continue
        label = _LABELS.get(key, key)
        if key == "dob":
            if value is None or value == "":
                raise ValidationError(f"{label} is required")
            cleaned[key] = parse_day(value)
        elif key == "phone":
            cleaned[key] = require_phone(value, label)
        else:
            cleaned[key] = require_non_empty(value, label)
    return cleaned


# Client field names accepted for profile fields.
_CLIENT_ALIASES = {
    "emergencyContact": "emergency_contact",
    "reportingManager": "reporting_manager",
}


def normalize_profile_keys(body: Mapping[str, Any]) -> dict[str, Any]:
    return {_CLIENT_ALIASES.get(k, k): v for k, v in (body or {}).items()}
