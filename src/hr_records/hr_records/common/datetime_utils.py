from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Union

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def _to_local_naive(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def parse_day(value: Union[str, date, datetime, None], *, default: Optional[date] = None) -> date:
    """Normalize a calendar day given as YYYY-MM-DD, an ISO datetime or a date.

    Datetimes are reduced to their server-local calendar day.
    """

    if value is None or value == "":
        if default is None:
            raise ValidationError("Date is required (YYYY-MM-DD)")
        return default
    if isinstance(value, datetime):
        return _to_local_naive(value).date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    try:
        return parse_iso_date(text)
    except ValueError:
        pass
    try:
        return _to_local_naive(datetime.fromisoformat(text.replace("Z", "+00:00"))).date()
    except ValueError:
        raise ValidationError(f"Invalid date: {text!r}")


def parse_clock(value: Union[str, datetime, None], *, day: date) -> Optional[datetime]:
    """Parse a check-in/out value.

    Accepts HH:MM[:SS] (combined with ``day``) or a full ISO datetime.
    """

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return _to_local_naive(value)

    text = str(value).strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.combine(day, datetime.strptime(text, fmt).time())
        except ValueError:
            continue
    try:
        return _to_local_naive(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        raise ValidationError(f"Invalid time: {text!r} (HH:MM or ISO datetime)")


def day_string(value: date) -> str:
    return value.strftime("%Y-%m-%d")
