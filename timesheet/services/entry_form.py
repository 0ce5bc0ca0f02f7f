"""Values behind the time entry form and their conversion to an API payload."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from ..crud.time_entries import SELECT_PROJECT_MESSAGE
from ..models.time_entry import TimeEntry
from .timecalc import local_input_to_utc, utc_to_local_input


class TimeEntryFormValues(BaseModel):
    """Raw form strings; datetimes are ``YYYY-MM-DDTHH:MM`` wall-clock values."""

    project_id: str = ""
    task_id: str = ""
    description: str = ""
    start_time: str = ""
    end_time: str = ""
    invoice_number: str = ""

    @classmethod
    def from_entry(cls, entry: TimeEntry | None, tz: str) -> "TimeEntryFormValues":
        if entry is None:
            return cls()
        return cls(
            project_id=str(entry.project_id or ""),
            task_id=str(entry.task_id or ""),
            description=entry.description or "",
            start_time=utc_to_local_input(entry.start_time, tz),
            end_time=utc_to_local_input(entry.end_time, tz),
            invoice_number=entry.invoice_number or "",
        )

    def with_project(self, project_id: str | None) -> "TimeEntryFormValues":
        """Select a project; a different project drops the chosen task."""

        new_project = (project_id or "").strip()
        if new_project == self.project_id:
            return self
        return self.model_copy(update={"project_id": new_project, "task_id": ""})

    def to_payload(self, tz: str) -> dict[str, Any]:
        if not self.project_id.strip():
            raise ValueError(SELECT_PROJECT_MESSAGE)
        start = local_input_to_utc(self.start_time, tz)
        if not start:
            raise ValueError("Start time is required")
        return {
            "project_id": self.project_id.strip(),
            "task_id": self.task_id.strip() or None,
            "description": self.description,
            "start_time": start,
            "end_time": local_input_to_utc(self.end_time, tz),
            "invoice_number": self.invoice_number,
        }


__all__ = ["TimeEntryFormValues"]
