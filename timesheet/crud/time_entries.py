from __future__ import annotations

import math
from dataclasses import dataclass

from sqlalchemy import asc, desc, func, or_, select
from sqlalchemy.orm import Session, joinedload

from ..core.config import settings
from ..core.entry_fields import (
    DEFAULT_SORT_COLUMN,
    DEFAULT_SORT_ORDER,
    SORT_ASC,
    SORT_ORDERS,
    SORTABLE_COLUMNS,
)
from ..models.task import Task
from ..models.time_entry import TimeEntry
from ..schemas.time_entry import TimeEntryOut, TimeEntryPage
from ..services.query_cache import TIME_ENTRIES, invalidate_time_entries, query_cache
from ..services.timecalc import compute_minutes, parse_iso, to_utc_iso
from ._common import clean_text, utcnow_iso
from .projects import get_project

LOGIN_REQUIRED_MESSAGE = "You must be logged in to create a time entry"
SELECT_PROJECT_MESSAGE = "Please select a project"
TASK_MISMATCH_MESSAGE = "Task does not belong to the selected project"

WRITABLE_FIELDS = ("project_id", "task_id", "description", "start_time", "end_time", "invoice_number")
LIKE_ESCAPE = "\\"


@dataclass(frozen=True)
class TimeEntryQuery:
    """Filter, sort and range of one list request."""

    search: str = ""
    project_id: int | None = None
    sort: str = DEFAULT_SORT_COLUMN
    order: str = DEFAULT_SORT_ORDER
    page: int = 1
    page_size: int = settings.PAGE_SIZE

    def cache_key(self, user_id: int) -> tuple:
        return (TIME_ENTRIES, user_id, self.page, self.page_size, self.search, self.sort, self.order, self.project_id)


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so user input matches literally."""

    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


def total_pages(count: int, page_size: int) -> int:
    return math.ceil(count / page_size) if count > 0 else 0


def _filtered(stmt, user_id: int, query: TimeEntryQuery):
    stmt = stmt.where(TimeEntry.user_id == user_id)
    term = (query.search or "").strip()
    if term:
        pattern = f"%{escape_like(term)}%"
        stmt = stmt.where(
            or_(
                TimeEntry.description.ilike(pattern, escape=LIKE_ESCAPE),
                TimeEntry.invoice_number.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
    if query.project_id is not None:
        stmt = stmt.where(TimeEntry.project_id == query.project_id)
    return stmt


def list_time_entries(db: Session, user_id: int, query: TimeEntryQuery) -> tuple[list[TimeEntry], int]:
    """Return one page of the user's entries plus the total count for the filter."""

    if query.sort not in SORTABLE_COLUMNS:
        raise ValueError(f"Cannot sort by '{query.sort}'")
    if query.order not in SORT_ORDERS:
        raise ValueError(f"Unknown sort order '{query.order}'")
    if query.page < 1 or query.page_size < 1:
        raise ValueError("page and page_size must be positive")

    count_stmt = _filtered(select(func.count()).select_from(TimeEntry), user_id, query)
    count = db.scalar(count_stmt) or 0

    column = getattr(TimeEntry, query.sort)
    direction = asc if query.order == SORT_ASC else desc
    stmt = (
        _filtered(select(TimeEntry), user_id, query)
        .options(joinedload(TimeEntry.project), joinedload(TimeEntry.task))
        .order_by(direction(column), direction(TimeEntry.id))
        .offset((query.page - 1) * query.page_size)
        .limit(query.page_size)
    )
    rows = list(db.execute(stmt).scalars().all())
    return rows, count


def fetch_time_entry_page(db: Session, user_id: int, query: TimeEntryQuery) -> TimeEntryPage:
    def load() -> TimeEntryPage:
        rows, count = list_time_entries(db, user_id, query)
        return TimeEntryPage(
            data=[TimeEntryOut.model_validate(row) for row in rows],
            count=count,
            page=query.page,
            page_size=query.page_size,
            total_pages=total_pages(count, query.page_size),
        )

    return query_cache.fetch(query.cache_key(user_id), load)


def get_time_entry(db: Session, entry_id: int, user_id: int | None = None) -> TimeEntry | None:
    entry = db.get(TimeEntry, entry_id)
    if entry is None:
        return None
    if user_id is not None and entry.user_id != user_id:
        return None
    return entry


def _optional_id(value: object, label: str) -> int | None:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{label} must be an integer") from exc


def _apply_links(db: Session, entry: TimeEntry, payload: dict) -> None:
    """Set project/task, keeping the task inside the entry's project."""

    if "project_id" in payload:
        project_id = _optional_id(payload.get("project_id"), "project_id")
        if project_id is None:
            raise ValueError(SELECT_PROJECT_MESSAGE)
        if get_project(db, project_id) is None:
            raise ValueError("Project not found")
        if project_id != entry.project_id and "task_id" not in payload:
            entry.task_id = None
        entry.project_id = project_id

    if "task_id" in payload:
        task_id = _optional_id(payload.get("task_id"), "task_id")
        if task_id is None:
            entry.task_id = None
            return
        task = db.get(Task, task_id)
        if task is None:
            raise ValueError("Task not found")
        if entry.project_id is None or task.project_id != entry.project_id:
            raise ValueError(TASK_MISMATCH_MESSAGE)
        entry.task_id = task_id


def _apply_times(entry: TimeEntry, payload: dict) -> None:
    tz = settings.TZ
    if "start_time" in payload:
        start = to_utc_iso(clean_text(payload.get("start_time")), tz)
        if not start:
            raise ValueError("start_time is required")
        entry.start_time = start
    if "end_time" in payload:
        entry.end_time = to_utc_iso(clean_text(payload.get("end_time")), tz)
    if entry.end_time and parse_iso(entry.end_time, tz) < parse_iso(entry.start_time, tz):
        raise ValueError("end_time must not be before start_time")
    entry.duration = compute_minutes(entry.start_time, entry.end_time, tz) if entry.end_time else None


def create_time_entry(db: Session, user_id: int | None, payload: dict) -> TimeEntry:
    if user_id is None:
        raise PermissionError(LOGIN_REQUIRED_MESSAGE)
    data = {key: payload.get(key) for key in WRITABLE_FIELDS if key in payload}
    if data.get("project_id") in (None, ""):
        raise ValueError(SELECT_PROJECT_MESSAGE)
    if not clean_text(data.get("start_time")):
        raise ValueError("start_time is required")
    now = utcnow_iso()
    entry = TimeEntry(
        user_id=user_id,
        description=clean_text(data.get("description")),
        invoice_number=clean_text(data.get("invoice_number")),
        created_at=now,
        updated_at=now,
    )
    _apply_links(db, entry, data)
    _apply_times(entry, data)
    db.add(entry)
    db.commit()
    db.refresh(entry)
    invalidate_time_entries()
    return entry


def update_time_entry(db: Session, entry: TimeEntry, payload: dict) -> TimeEntry:
    """Apply a partial update; a single-field payload is the inline-edit path."""

    data = {key: payload[key] for key in WRITABLE_FIELDS if key in payload}
    if not data:
        raise ValueError("Nothing to update")
    try:
        _apply_links(db, entry, data)
        _apply_times(entry, data)
        if "description" in data:
            entry.description = clean_text(data.get("description"))
        if "invoice_number" in data:
            entry.invoice_number = clean_text(data.get("invoice_number"))
    except ValueError:
        db.rollback()
        raise
    entry.updated_at = utcnow_iso()
    db.commit()
    db.refresh(entry)
    invalidate_time_entries()
    return entry


def delete_time_entry(db: Session, entry: TimeEntry) -> None:
    db.delete(entry)
    db.commit()
    invalidate_time_entries()
