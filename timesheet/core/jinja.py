"""Template environment with the formatting filters the pages rely on."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

from fastapi.templating import Jinja2Templates

from ..services.notifications import pop_toasts
from ..services.timecalc import format_duration, parse_iso
from .config import settings

_LOCAL_TZ = ZoneInfo(settings.TZ)


def _to_dt(value: Any) -> datetime | None:
    """Convert stored UTC strings into datetimes in the display zone."""

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value:
        try:
            dt = parse_iso(value, settings.TZ)
        except ValueError:
            return None
    else:
        return None
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=_LOCAL_TZ)
    return dt.astimezone(_LOCAL_TZ)


def _fmt_dt(value: Any, fmt: str = "%b %d, %Y, %I:%M %p") -> str:
    dt = _to_dt(value)
    return dt.strftime(fmt) if dt else ""


def _fmt_duration(value: Any) -> str:
    if value is None or value == "":
        return ""
    try:
        return format_duration(int(value))
    except (TypeError, ValueError):
        return ""


def get_templates() -> Jinja2Templates:
    """Create a ``Jinja2Templates`` instance with our standard filters registered."""

    templates = Jinja2Templates(directory=str(settings.templates_dir))
    env = templates.env
    env.filters["fmt_dt"] = _fmt_dt
    env.filters["fmt_duration"] = _fmt_duration
    env.globals["pop_toasts"] = pop_toasts
    env.globals["app_name"] = settings.APP_NAME
    env.globals["search_debounce_ms"] = settings.SEARCH_DEBOUNCE_MS
    return templates
