"""CRUD helpers for tasks."""

from __future__ import annotations

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, joinedload

from ..models.task import Task
from ..models.time_entry import TimeEntry
from ..schemas.task import TaskOut
from ..services.query_cache import TASKS, invalidate_tasks, query_cache
from ._common import clean_text, require_name, utcnow_iso
from .projects import get_project

SELECT_PROJECT_MESSAGE = "Please select a project"


def list_tasks(db: Session, project_id: int | None = None) -> list[Task]:
    stmt = select(Task).options(joinedload(Task.project))
    if project_id is not None:
        stmt = stmt.where(Task.project_id == project_id)
    stmt = stmt.order_by(func.lower(Task.name), Task.id)
    return list(db.execute(stmt).scalars().all())


def fetch_tasks(db: Session, project_id: int | None = None) -> list[TaskOut]:
    """Cached task list; keyed by the parent project so pickers re-query on change."""

    return query_cache.fetch(
        (TASKS, project_id),
        lambda: [TaskOut.model_validate(task) for task in list_tasks(db, project_id)],
    )


def get_task(db: Session, task_id: int | None) -> Task | None:
    if task_id is None:
        return None
    return db.get(Task, task_id)


def _resolve_project_id(db: Session, value: object) -> int:
    if value in (None, ""):
        raise ValueError(SELECT_PROJECT_MESSAGE)
    try:
        project_id = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(SELECT_PROJECT_MESSAGE) from exc
    if get_project(db, project_id) is None:
        raise ValueError("Project not found")
    return project_id


def create_task(db: Session, payload: dict) -> Task:
    project_id = _resolve_project_id(db, payload.get("project_id"))
    now = utcnow_iso()
    task = Task(
        name=require_name(payload.get("name")),
        description=clean_text(payload.get("description")),
        project_id=project_id,
        created_at=now,
        updated_at=now,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    invalidate_tasks()
    return task


def update_task(db: Session, task: Task, payload: dict) -> Task:
    if "name" in payload:
        task.name = require_name(payload.get("name"))
    if "description" in payload:
        task.description = clean_text(payload.get("description"))
    if "project_id" in payload:
        project_id = _resolve_project_id(db, payload.get("project_id"))
        if project_id != task.project_id:
            # Entries booked on this task would now point at a foreign project.
            db.execute(
                update(TimeEntry).where(TimeEntry.task_id == task.id).values(task_id=None)
            )
        task.project_id = project_id
    task.updated_at = utcnow_iso()
    db.commit()
    db.refresh(task)
    invalidate_tasks()
    return task


def delete_task(db: Session, task: Task) -> None:
    db.execute(update(TimeEntry).where(TimeEntry.task_id == task.id).values(task_id=None))
    db.delete(task)
    db.commit()
    invalidate_tasks()
