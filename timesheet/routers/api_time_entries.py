from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.entry_fields import DEFAULT_SORT_COLUMN, DEFAULT_SORT_ORDER, SORTABLE_COLUMNS
from ..crud.time_entries import (
    TimeEntryQuery,
    create_time_entry,
    delete_time_entry,
    fetch_time_entry_page,
    get_time_entry,
    update_time_entry,
)
from ..db.session import get_db
from ..deps.auth import AuthContext, optional_api_user, require_api_user
from ..schemas.time_entry import TimeEntryCreate, TimeEntryOut, TimeEntryPage, TimeEntryUpdate

router = APIRouter(prefix="/api/v1/time-entries", tags=["time-entries"])

SORT_PATTERN = f"^({'|'.join(SORTABLE_COLUMNS)})$"


@router.get("", response_model=TimeEntryPage)
def api_list_time_entries(
    q: str = Query(default="", max_length=200),
    project_id: Optional[int] = Query(default=None),
    sort: str = Query(default=DEFAULT_SORT_COLUMN, pattern=SORT_PATTERN),
    order: str = Query(default=DEFAULT_SORT_ORDER, pattern="^(asc|desc)$"),
    page: int = Query(default=1, ge=1),
    page_size: Optional[int] = Query(default=None, ge=1, le=100),
    auth: AuthContext = Depends(require_api_user),
    db: Session = Depends(get_db),
):
    query = TimeEntryQuery(
        search=q.strip(),
        project_id=project_id,
        sort=sort,
        order=order,
        page=page,
        page_size=page_size or settings.PAGE_SIZE,
    )
    return fetch_time_entry_page(db, auth.user_id, query)


@router.post("", response_model=TimeEntryOut, status_code=201)
def api_create_time_entry(
    payload: TimeEntryCreate,
    auth: AuthContext | None = Depends(optional_api_user),
    db: Session = Depends(get_db),
):
    try:
        entry = create_time_entry(db, auth.user_id if auth else None, payload.model_dump(exclude_unset=True))
    except PermissionError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return TimeEntryOut.model_validate(entry)


@router.get("/{entry_id}", response_model=TimeEntryOut)
def api_get_time_entry(entry_id: int, auth: AuthContext = Depends(require_api_user), db: Session = Depends(get_db)):
    entry = get_time_entry(db, entry_id, user_id=auth.user_id)
    if not entry:
        raise HTTPException(404, "Not found")
    return TimeEntryOut.model_validate(entry)


@router.patch("/{entry_id}", response_model=TimeEntryOut)
def api_update_time_entry(
    entry_id: int,
    payload: TimeEntryUpdate,
    auth: AuthContext = Depends(require_api_user),
    db: Session = Depends(get_db),
):
    entry = get_time_entry(db, entry_id, user_id=auth.user_id)
    if not entry:
        raise HTTPException(404, "Not found")
    try:
        updated = update_time_entry(db, entry, payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return TimeEntryOut.model_validate(updated)


@router.delete("/{entry_id}")
def api_delete_time_entry(entry_id: int, auth: AuthContext = Depends(require_api_user), db: Session = Depends(get_db)):
    entry = get_time_entry(db, entry_id, user_id=auth.user_id)
    if not entry:
        raise HTTPException(404, "Not found")
    delete_time_entry(db, entry)
    return {"status": "deleted"}
