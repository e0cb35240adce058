from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Optional, Union

from ..core.exceptions import ValidationError

DateLike = Union[date, datetime, str]


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError("Invalid date (YYYY-MM-DD)")


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; a trailing ``Z`` is accepted. Empty -> None."""
    v = (value or "").strip()
    if not v:
        return None
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(v)
    except ValueError:
        raise ValidationError("Invalid timestamp (ISO-8601)")


def parse_hhmm(value: Optional[str], field_name: str) -> time:
    v = (value or "").strip()
    try:
        return datetime.strptime(v, "%H:%M").time()
    except ValueError:
        raise ValidationError(f"{field_name} must be HH:MM (24-hour)")


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def date_sort_key(value: DateLike) -> datetime:
    """Comparable key for the mix of dates, datetimes and ISO strings the stores return."""
    if isinstance(value, str):
        parsed = parse_iso_datetime(value)
        if parsed is None:
            raise ValidationError("Empty date")
        value = parsed
    if isinstance(value, datetime):
        return to_naive_utc(value)
    return datetime.combine(value, time.min)


def iso(value: Optional[DateLike]) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    return value.isoformat()


def utc_now() -> datetime:
    """Current time as naive UTC, the form timestamps are stored in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
