# =======================================================================================
# ctrlbx_admin/utils/validators.py - Normalization and Validation Helpers
# =======================================================================================
import re
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional, Union

from .exceptions import InputValidationError
from ..config import config

_HHMM = re.compile(r"^\d{1,2}:\d{2}$")
_HOUSE_ID = re.compile(r"^[A-Z]{3}_[0-9]{1,5}$")
_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


# ---------- response normalization ----------

def to_bool(value: Any) -> bool:
    """Sheets return booleans either as JSON booleans or as 'TRUE'/'true'."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return False


def to_optional_int(value: Any) -> Optional[int]:
    """Numeric cells may arrive as numbers, numeric strings, '' or '-'."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp as produced by Apps Script; None if unparseable."""
    if isinstance(value, datetime):
        return value
    if not value or not isinstance(value, str):
        return None
    s = value.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(s)
    except ValueError:
        return None


def format_time_24(value: Any, fallback: Optional[str] = None) -> str:
    """
    Normalize a time-of-day value to HH:MM (24h).

    Sheets may hand back plain "H:MM"/"HH:MM", ISO dates anchored on the
    sheet epoch ("1899-12-30T08:00:00.000Z") or a fraction of a day
    (0.333 -> 08:00). Anything else yields the fallback.
    """
    default = fallback or "00:00"
    if value is None or value == "":
        return default

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if 0 <= value < 1:
            total_min = round(value * 24 * 60)
            return f"{total_min // 60:02d}:{total_min % 60:02d}"
        return default

    s = str(value)
    if _HHMM.match(s):
        return s.zfill(5)

    if "T" in s:
        ts = parse_timestamp(s)
        if ts is not None:
            if ts.tzinfo is not None:
                ts = ts.astimezone(timezone.utc)
            return f"{ts.hour:02d}:{ts.minute:02d}"

    return default


def is_device_online(last_seen: Union[str, datetime, None], now: Optional[datetime] = None,
                     threshold_min: Optional[int] = None) -> bool:
    """A device is online when it reported within the offline threshold."""
    ts = parse_timestamp(last_seen)
    if ts is None:
        return False
    threshold = config.OFFLINE_THRESHOLD_MIN if threshold_min is None else threshold_min
    if now is None:
        now = datetime.now(timezone.utc) if ts.tzinfo else datetime.now()
    elif (now.tzinfo is None) != (ts.tzinfo is None):
        # compare like with like
        ts = ts.replace(tzinfo=None) if now.tzinfo is None else ts.replace(tzinfo=timezone.utc)
    diff_min = (now - ts).total_seconds() / 60
    return diff_min <= threshold


# ---------- form validation ----------

def require_fields(data: Mapping[str, Any], fields: Iterable[str]) -> None:
    missing = [f for f in fields if data.get(f) is None or str(data.get(f)).strip() == ""]
    if missing:
        raise InputValidationError(f"Missing required fields: {', '.join(missing)}")


def validate_email(email: Optional[str]) -> str:
    email = (email or "").strip().lower()
    if not _EMAIL.match(email):
        raise InputValidationError("Invalid email address")
    return email


def validate_house_id(house_id: Optional[str]) -> str:
    """House ids are 3 uppercase letters, '_' and up to 5 digits (e.g. BES_522)."""
    house_id = (house_id or "").strip()
    if not _HOUSE_ID.match(house_id):
        raise InputValidationError("House id must look like ABC_12345")
    return house_id


def validate_token_delta(delta: Any) -> int:
    try:
        value = int(delta)
    except (TypeError, ValueError):
        raise InputValidationError("Token adjustment must be an integer")
    if isinstance(delta, float) and value != delta:
        raise InputValidationError("Token adjustment must be an integer")
    if value == 0:
        raise InputValidationError("Token adjustment cannot be zero")
    return value


def validate_time_window(start: str, end: str) -> None:
    for value in (start, end):
        if not _HHMM.match(value or ""):
            raise InputValidationError("Time window must be HH:MM")
        hh, mm = (int(p) for p in value.split(":"))
        if hh > 23 or mm > 59:
            raise InputValidationError("Time window must be HH:MM")
