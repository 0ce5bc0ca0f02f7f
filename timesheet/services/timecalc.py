"""Timestamp helpers shared by the CRUD layer, the entry form and templates.

Entries are stored as ISO-8601 UTC strings ending in ``Z``. Browsers edit them
through ``<input type="datetime-local">`` which speaks wall-clock minutes
(``YYYY-MM-DDTHH:MM``) in the user's zone, so we convert at the edges.
"""

from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

LOCAL_INPUT_FORMAT = "%Y-%m-%dT%H:%M"


def parse_iso(ts: str | None, tz: str) -> datetime | None:
    """Parse an ISO-8601 timestamp string.
    If naive, attach the provided tz. Returns None if ts is falsy.
    """
    if not ts:
        return None
    dt = datetime.fromisoformat(ts.strip().replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=ZoneInfo(tz))
    return dt


def to_utc_iso(ts: str | None, tz: str) -> str | None:
    """Normalise any ISO timestamp into the stored ``YYYY-MM-DDTHH:MM:SSZ`` form.

    Raises ``ValueError`` when the value cannot be parsed.
    """
    dt = parse_iso(ts, tz)
    if dt is None:
        return None
    return dt.astimezone(timezone.utc).replace(microsecond=0).strftime("%Y-%m-%dT%H:%M:%SZ")


def compute_minutes(start_iso: str | None, end_iso: str | None, tz: str) -> int:
    """Return whole minutes between start and end (non-negative)."""
    s = parse_iso(start_iso, tz)
    e = parse_iso(end_iso, tz)
    if not s or not e:
        return 0
    delta = int((e - s).total_seconds() // 60)
    return max(delta, 0)


def local_input_to_utc(value: str | None, tz: str) -> str | None:
    """Turn a ``datetime-local`` form value into a stored UTC instant."""

    cleaned = (value or "").strip()
    if not cleaned:
        return None
    try:
        naive = datetime.strptime(cleaned[:16], LOCAL_INPUT_FORMAT)
    except ValueError as exc:
        raise ValueError(f"Invalid date/time '{cleaned}'") from exc
    return to_utc_iso(naive.replace(tzinfo=ZoneInfo(tz)).isoformat(), tz)


def utc_to_local_input(value: str | None, tz: str) -> str:
    """Inverse of ``local_input_to_utc`` for pre-filling the entry form."""

    try:
        dt = parse_iso(value, tz)
    except ValueError:
        return ""
    if dt is None:
        return ""
    return dt.astimezone(ZoneInfo(tz)).strftime(LOCAL_INPUT_FORMAT)


def format_duration(minutes: int | None) -> str:
    if minutes is None:
        return ""
    hours, mins = divmod(int(minutes), 60)
    return f"{hours}h {mins:02d}m"
