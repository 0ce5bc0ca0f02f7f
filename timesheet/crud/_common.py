from __future__ import annotations

from datetime import datetime, timezone


def utcnow_iso() -> str:
    return datetime.now(tz=timezone.utc).replace(microsecond=0).strftime("%Y-%m-%dT%H:%M:%SZ")


def clean_text(value: object) -> str | None:
    """Trim free-text input; blank strings are stored as NULL."""

    if value is None:
        return None
    text = str(value).strip()
    return text or None


def require_name(value: object, label: str = "name") -> str:
    name = clean_text(value)
    if not name:
        raise ValueError(f"{label} is required")
    return name
