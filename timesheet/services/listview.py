"""State of the time entry list screen: search, filter, sort, page and the edited cell.

The whole state travels in the query string, so every link on the page is
just ``state.url(...)`` of a derived state and a reload always re-issues the
matching query.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping
from urllib.parse import urlencode

from ..core.config import settings
from ..core.entry_fields import (
    ALL_PROJECTS,
    DEFAULT_SORT_COLUMN,
    DEFAULT_SORT_ORDER,
    INLINE_EDITABLE_FIELDS,
    SORT_ASC,
    SORT_DESC,
    SORTABLE_COLUMNS,
    normalize_sort_order,
)
from ..crud.time_entries import TimeEntryQuery

LIST_PATH = "/timesheet"


def _parse_int(value: Any) -> int | None:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class EditingCell:
    """The single (row, field) pair currently shown as an input."""

    entry_id: int
    field: str

    @property
    def token(self) -> str:
        return f"{self.entry_id}:{self.field}"

    @classmethod
    def parse(cls, token: str | None) -> "EditingCell | None":
        if not token or ":" not in token:
            return None
        raw_id, field = token.split(":", 1)
        entry_id = _parse_int(raw_id)
        if entry_id is None or field not in INLINE_EDITABLE_FIELDS:
            return None
        return cls(entry_id=entry_id, field=field)

    def matches(self, entry_id: int, field: str) -> bool:
        return self.entry_id == entry_id and self.field == field


@dataclass(frozen=True)
class CellCommit:
    entry_id: int
    payload: dict[str, Any]


def plan_cell_commit(cell: EditingCell, value: str | None, original: str | None = None) -> CellCommit | None:
    """Turn a committed cell buffer into the single update to send.

    Returns ``None`` when the buffer equals the value the cell opened with.
    A project change also clears the task in the same update.
    """
    if cell.field not in INLINE_EDITABLE_FIELDS:
        raise ValueError(f"'{cell.field}' cannot be edited inline")
    new_value = (value or "").strip()
    if original is not None and new_value == (original or "").strip():
        return None
    if cell.field == "project_id":
        payload: dict[str, Any] = {"project_id": new_value or None, "task_id": None}
    elif cell.field == "task_id":
        payload = {"task_id": new_value or None}
    else:
        payload = {cell.field: new_value}
    return CellCommit(entry_id=cell.entry_id, payload=payload)


@dataclass(frozen=True)
class ListViewState:
    page: int = 1
    search: str = ""
    sort: str = DEFAULT_SORT_COLUMN
    order: str = DEFAULT_SORT_ORDER
    project_id: int | None = None
    editing: EditingCell | None = None

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "ListViewState":
        page = _parse_int(params.get("page")) or 1
        sort = params.get("sort") or DEFAULT_SORT_COLUMN
        if sort not in SORTABLE_COLUMNS:
            sort = DEFAULT_SORT_COLUMN
        project_raw = (params.get("project") or "").strip()
        project_id = None if project_raw in ("", ALL_PROJECTS) else _parse_int(project_raw)
        return cls(
            page=max(page, 1),
            search=(params.get("q") or "").strip(),
            sort=sort,
            order=normalize_sort_order(params.get("order")),
            project_id=project_id,
            editing=EditingCell.parse(params.get("edit")),
        )

    # -- transitions -------------------------------------------------------

    def toggle_sort(self, column: str) -> "ListViewState":
        """Flip the active column, or switch to a new column ascending."""

        if column not in SORTABLE_COLUMNS:
            raise ValueError(f"Cannot sort by '{column}'")
        if column == self.sort:
            order = SORT_ASC if self.order == SORT_DESC else SORT_DESC
        else:
            order = SORT_ASC
        return replace(self, sort=column, order=order, page=1, editing=None)

    def with_search(self, term: str | None) -> "ListViewState":
        return replace(self, search=(term or "").strip(), page=1, editing=None)

    def with_project(self, value: str | int | None) -> "ListViewState":
        if value in (None, "", ALL_PROJECTS):
            project_id = None
        else:
            project_id = _parse_int(value)
        return replace(self, project_id=project_id, page=1, editing=None)

    def clamp(self, total_pages: int) -> "ListViewState":
        last = max(total_pages, 1)
        page = min(max(self.page, 1), last)
        return self if page == self.page else replace(self, page=page)

    def go_to(self, page: int, total_pages: int) -> "ListViewState":
        return replace(self, page=page, editing=None).clamp(total_pages)

    def next_page(self, total_pages: int) -> "ListViewState":
        if self.page >= total_pages:
            return self
        return self.go_to(self.page + 1, total_pages)

    def previous_page(self, total_pages: int) -> "ListViewState":
        if self.page <= 1:
            return self
        return self.go_to(self.page - 1, total_pages)

    def begin_edit(self, entry_id: int, field: str) -> "ListViewState":
        cell = EditingCell(entry_id=entry_id, field=field)
        if EditingCell.parse(cell.token) is None:
            raise ValueError(f"'{field}' cannot be edited inline")
        return replace(self, editing=cell)

    def end_edit(self) -> "ListViewState":
        return replace(self, editing=None)

    # -- rendering helpers -------------------------------------------------

    def query(self, page_size: int | None = None) -> TimeEntryQuery:
        return TimeEntryQuery(
            search=self.search,
            project_id=self.project_id,
            sort=self.sort,
            order=self.order,
            page=self.page,
            page_size=page_size or settings.PAGE_SIZE,
        )

    def to_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        if self.search:
            params["q"] = self.search
        if self.project_id is not None:
            params["project"] = str(self.project_id)
        if self.sort != DEFAULT_SORT_COLUMN or self.order != DEFAULT_SORT_ORDER:
            params["sort"] = self.sort
            params["order"] = self.order
        if self.page != 1:
            params["page"] = str(self.page)
        if self.editing is not None:
            params["edit"] = self.editing.token
        return params

    def url(self) -> str:
        params = self.to_params()
        return f"{LIST_PATH}?{urlencode(params)}" if params else LIST_PATH

    def sort_indicator(self, column: str) -> str:
        if column != self.sort:
            return ""
        return "↑" if self.order == SORT_ASC else "↓"

    def is_editing(self, entry_id: int, field: str) -> bool:
        return self.editing is not None and self.editing.matches(entry_id, field)


__all__ = ["CellCommit", "EditingCell", "LIST_PATH", "ListViewState", "plan_cell_commit"]
