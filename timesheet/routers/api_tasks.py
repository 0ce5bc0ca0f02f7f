from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..crud.tasks import create_task, delete_task, fetch_tasks, get_task, update_task
from ..db.session import get_db
from ..deps.auth import require_api_user
from ..schemas.task import TaskCreate, TaskOut, TaskUpdate

router = APIRouter(prefix="/api/v1/tasks", tags=["tasks"], dependencies=[Depends(require_api_user)])


@router.get("", response_model=list[TaskOut])
def api_list_tasks(project_id: Optional[int] = Query(default=None), db: Session = Depends(get_db)):
    return fetch_tasks(db, project_id)


@router.post("", response_model=TaskOut, status_code=201)
def api_create_task(payload: TaskCreate, db: Session = Depends(get_db)):
    try:
        task = create_task(db, payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return TaskOut.model_validate(task)


@router.get("/{task_id}", response_model=TaskOut)
def api_get_task(task_id: int, db: Session = Depends(get_db)):
    task = get_task(db, task_id)
    if not task:
        raise HTTPException(404, "Not found")
    return TaskOut.model_validate(task)


@router.patch("/{task_id}", response_model=TaskOut)
def api_update_task(task_id: int, payload: TaskUpdate, db: Session = Depends(get_db)):
    task = get_task(db, task_id)
    if not task:
        raise HTTPException(404, "Not found")
    try:
        updated = update_task(db, task, payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return TaskOut.model_validate(updated)


@router.delete("/{task_id}")
def api_delete_task(task_id: int, db: Session = Depends(get_db)):
    task = get_task(db, task_id)
    if not task:
        raise HTTPException(404, "Not found")
    delete_task(db, task)
    return {"status": "deleted"}
