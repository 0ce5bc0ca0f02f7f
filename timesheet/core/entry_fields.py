"""Shared time entry column constants and helpers."""

SORT_ASC = "asc"
SORT_DESC = "desc"
SORT_ORDERS = (SORT_ASC, SORT_DESC)

SORTABLE_COLUMNS = (
    "project_id",
    "task_id",
    "description",
    "start_time",
    "end_time",
    "duration",
    "invoice_number",
)

DEFAULT_SORT_COLUMN = "start_time"
DEFAULT_SORT_ORDER = SORT_DESC

# Cells that can be edited in place from the list view.
INLINE_EDITABLE_FIELDS = ("project_id", "task_id", "description", "invoice_number")

# Project filter value meaning "no filter".
ALL_PROJECTS = "all"


def normalize_sort_order(value: str | None) -> str:
    """Return a lowercase sort order with a safe default."""

    cleaned = (value or DEFAULT_SORT_ORDER).strip().lower()
    return cleaned if cleaned in SORT_ORDERS else DEFAULT_SORT_ORDER


__all__ = [
    "ALL_PROJECTS",
    "DEFAULT_SORT_COLUMN",
    "DEFAULT_SORT_ORDER",
    "INLINE_EDITABLE_FIELDS",
    "SORTABLE_COLUMNS",
    "SORT_ASC",
    "SORT_DESC",
    "SORT_ORDERS",
    "normalize_sort_order",
]
