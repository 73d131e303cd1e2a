"""
Helpers shared by routes and services: response envelope, timestamps,
and stripping of sensitive user fields.
"""

from datetime import datetime, timezone
from typing import Any, Optional

# Never leave the server in a user payload
SENSITIVE_USER_FIELDS = (
    "password",
    "verificationToken",
    "verificationTokenExpires",
    "resetPasswordToken",
    "resetPasswordExpires",
)


def format_response(success: bool, message: Optional[str] = None, data: Any = None, **extra: Any) -> dict:
    """Build the standard {success, message, data} envelope."""
    body = {"success": success}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    body["timestamp"] = utc_now_iso()
    return body


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    return utc_now().isoformat()


def parse_iso(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; naive values are treated as UTC."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def sanitize_user(user: Optional[dict]) -> Optional[dict]:
    """Copy of a user document without password or token fields."""
    if user is None:
        return None
    return {k: v for k, v in user.items() if k not in SENSITIVE_USER_FIELDS}


def normalize_email(email: str) -> str:
    return email.strip().lower()


def count_by_status(docs: list, *statuses: str) -> dict:
    """Count documents per status value, e.g. {"pending": 3, "rejected": 1}."""
    return {status: sum(1 for d in docs if d.get("status") == status) for status in statuses}


def institution_id_for(user: dict) -> str:
    """Institution record an institution-role user acts for."""
    return user.get("institutionId") or user["id"]
