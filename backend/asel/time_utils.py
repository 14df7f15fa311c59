from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional


def local_now() -> datetime:
    """Desktop-local 'now' (naive). Invoice dates and years follow the local calendar."""
    return datetime.now()


def current_year() -> int:
    return local_now().year


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 datetime string into a naive local datetime.

    - None / "" -> None
    - "YYYY-MM-DD" -> midnight of that day
    - "...Z" or "...+/-HH:MM" is converted to local time and tzinfo is stripped
    """
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None

    # Accept trailing Z
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    dt = datetime.fromisoformat(s)

    if dt.tzinfo is None:
        return dt

    return dt.astimezone().replace(tzinfo=None)


def date_portion(value) -> Optional[str]:
    """
    Return the 'YYYY-MM-DD' part of a stored date.

    Strings are split on 'T' (time of day discarded); date/datetime
    objects are serialized first. Anything else -> None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        return s.split("T")[0]
    return None


def to_iso(dt: Optional[datetime]) -> Optional[str]:
    """Serialize a datetime as ISO-8601 without microseconds."""
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt.replace(microsecond=0).isoformat()
