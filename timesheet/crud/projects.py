"""CRUD helpers for projects."""

from __future__ import annotations

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from ..models.project import Project
from ..models.task import Task
from ..models.time_entry import TimeEntry
from ..schemas.project import ProjectOut
from ..services.query_cache import PROJECTS, invalidate_projects, query_cache
from ._common import clean_text, require_name, utcnow_iso


def list_projects(db: Session) -> list[Project]:
    stmt = select(Project).order_by(func.lower(Project.name), Project.id)
    return list(db.execute(stmt).scalars().all())


def fetch_projects(db: Session) -> list[ProjectOut]:
    """Cached, detached view of ``list_projects`` for pickers and dialogs."""

    return query_cache.fetch(
        (PROJECTS,),
        lambda: [ProjectOut.model_validate(project) for project in list_projects(db)],
    )


def get_project(db: Session, project_id: int | None) -> Project | None:
    if project_id is None:
        return None
    return db.get(Project, project_id)


def create_project(db: Session, payload: dict) -> Project:
    now = utcnow_iso()
    project = Project(
        name=require_name(payload.get("name")),
        description=clean_text(payload.get("description")),
        created_at=now,
        updated_at=now,
    )
    db.add(project)
    db.commit()
    db.refresh(project)
    invalidate_projects()
    return project


def update_project(db: Session, project: Project, payload: dict) -> Project:
    if "name" in payload:
        project.name = require_name(payload.get("name"))
    if "description" in payload:
        project.description = clean_text(payload.get("description"))
    project.updated_at = utcnow_iso()
    db.commit()
    db.refresh(project)
    invalidate_projects()
    return project


def delete_project(db: Session, project: Project) -> None:
    # Entries stay in the timesheet but lose their project/task link; tasks go with the project.
    task_ids = select(Task.id).where(Task.project_id == project.id)
    db.execute(
        update(TimeEntry)
        .where(TimeEntry.project_id == project.id)
        .values(project_id=None, task_id=None)
    )
    db.execute(update(TimeEntry).where(TimeEntry.task_id.in_(task_ids)).values(task_id=None))
    for task in db.execute(select(Task).where(Task.project_id == project.id)).scalars().all():
        db.delete(task)
    db.delete(project)
    db.commit()
    invalidate_projects()
