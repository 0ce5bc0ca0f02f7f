"""Pydantic schemas for time entries and the paginated list response."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class TimeEntryCreate(BaseModel):
    project_id: int
    task_id: Optional[int] = None
    description: Optional[str] = None
    start_time: str = Field(..., min_length=1)
    end_time: Optional[str] = None
    invoice_number: Optional[str] = None


class TimeEntryUpdate(BaseModel):
    project_id: Optional[int] = None
    task_id: Optional[int] = None
    description: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    invoice_number: Optional[str] = None


class TimeEntryOut(BaseModel):
    id: int
    user_id: int
    project_id: Optional[int] = None
    task_id: Optional[int] = None
    description: Optional[str] = None
    start_time: str
    end_time: Optional[str] = None
    duration: Optional[int] = None
    invoice_number: Optional[str] = None
    project_name: Optional[str] = None
    task_name: Optional[str] = None
    created_at: str
    updated_at: str

    class Config:
        from_attributes = True


class TimeEntryPage(BaseModel):
    data: list[TimeEntryOut] = Field(default_factory=list)
    count: int = 0
    page: int = 1
    page_size: int
    total_pages: int = 0
