"""Pydantic schemas for task payloads."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class TaskBase(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    project_id: int


class TaskCreate(TaskBase):
    pass


class TaskUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    project_id: Optional[int] = None


class TaskOut(TaskBase):
    id: int
    project_name: Optional[str] = None
    created_at: str
    updated_at: str

    class Config:
        from_attributes = True
