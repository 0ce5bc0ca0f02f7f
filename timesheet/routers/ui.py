"""HTML pages: the time entry list, its forms and the project/task dialogs.

Every page sits behind ``require_ui_session``. Form posts answer with a 303
redirect and leave a toast in the session; failed submissions re-render the
same page with the submitted values so nothing typed is lost.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Form, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.entry_fields import ALL_PROJECTS, SORTABLE_COLUMNS
from ..core.jinja import get_templates
from ..crud.projects import create_project, delete_project, fetch_projects, get_project, update_project
from ..crud.tasks import SELECT_PROJECT_MESSAGE, create_task, delete_task, fetch_tasks, get_task, update_task
from ..crud.time_entries import (
    create_time_entry,
    delete_time_entry,
    fetch_time_entry_page,
    get_time_entry,
    update_time_entry,
)
from ..db.session import get_db
from ..deps.ui_auth import require_ui_session
from ..models.user import User
from ..schemas.time_entry import TimeEntryPage
from ..services.entry_form import TimeEntryFormValues
from ..services.listview import LIST_PATH, EditingCell, ListViewState, plan_cell_commit
from ..services.notifications import VARIANT_DESTRUCTIVE, push_error, push_toast

router = APIRouter(dependencies=[Depends(require_ui_session)])
templates = get_templates()
logger = logging.getLogger("timesheet.ui")

PROJECTS_PATH = "/projects"
TASKS_PATH = "/tasks"


def _state_from_form(q: str, project: str, sort: str, order: str, page: str) -> ListViewState:
    return ListViewState.from_params({"q": q, "project": project, "sort": sort, "order": order, "page": page})


def _parse_id(value: str | None) -> int | None:
    try:
        return int((value or "").strip())
    except ValueError:
        return None


def _empty_page(state: ListViewState) -> TimeEntryPage:
    return TimeEntryPage(data=[], count=0, page=state.page, page_size=settings.PAGE_SIZE, total_pages=0)


def _load_page(request: Request, db: Session, user: User, state: ListViewState) -> tuple[ListViewState, TimeEntryPage]:
    try:
        result = fetch_time_entry_page(db, user.id, state.query())
        clamped = state.clamp(result.total_pages)
        if clamped.page != state.page:
            state = clamped
            result = fetch_time_entry_page(db, user.id, state.query())
    except (SQLAlchemyError, ValueError) as exc:
        logger.exception("ui.list_failed", extra={"extra_data": {"user_id": user.id}})
        push_error(request, "Error loading time entries", exc)
        return state, _empty_page(state)
    return state, result


@router.get("/", include_in_schema=False)
def index_redirect():
    return RedirectResponse(url=LIST_PATH, status_code=302)


@router.get(LIST_PATH, response_class=HTMLResponse)
def timesheet_page(
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(require_ui_session),
):
    state = ListViewState.from_params(request.query_params)
    state, result = _load_page(request, db, user, state)

    edit_tasks = []
    if state.editing is not None and state.editing.field == "task_id":
        entry = next((row for row in result.data if row.id == state.editing.entry_id), None)
        if entry is not None and entry.project_id is not None:
            edit_tasks = fetch_tasks(db, entry.project_id)

    context = {
        "user": user,
        "state": state,
        "result": result,
        "projects": fetch_projects(db),
        "edit_tasks": edit_tasks,
        "columns": SORTABLE_COLUMNS,
        "all_projects": ALL_PROJECTS,
        "previous_url": state.previous_page(result.total_pages).url(),
        "next_url": state.next_page(result.total_pages).url(),
        "has_previous": state.page > 1,
        "has_next": state.page < result.total_pages,
    }
    return templates.TemplateResponse(request, "timesheet.html", context)


@router.post("/ui/time-entries/{entry_id}/cell")
def commit_cell(
    request: Request,
    entry_id: int,
    field: str = Form(...),
    value: str = Form(""),
    original: str | None = Form(None),
    next_edit: str = Form(""),
    q: str = Form(""),
    project: str = Form(""),
    sort: str = Form(""),
    order: str = Form(""),
    page: str = Form(""),
    db: Session = Depends(get_db),
    user: User = Depends(require_ui_session),
):
    state = _state_from_form(q, project, sort, order, page)
    cell = EditingCell.parse(f"{entry_id}:{field}")
    if cell is None:
        push_error(request, "Error updating entry", f"'{field}' cannot be edited inline")
        return RedirectResponse(url=state.url(), status_code=303)

    commit = plan_cell_commit(cell, value, original)
    if commit is not None:
        entry = get_time_entry(db, commit.entry_id, user_id=user.id)
        if entry is None:
            push_error(request, "Error updating entry", "Time entry not found")
        else:
            try:
                update_time_entry(db, entry, commit.payload)
            except (ValueError, SQLAlchemyError) as exc:
                db.rollback()
                push_error(request, "Error updating entry", exc)
            else:
                push_toast(request, "Entry updated", "The time entry has been updated successfully.")

    following = EditingCell.parse(next_edit)
    if following is not None:
        state = state.begin_edit(following.entry_id, following.field)
    return RedirectResponse(url=state.url(), status_code=303)


# -- time entry form ---------------------------------------------------------


def _render_entry_form(
    request: Request,
    db: Session,
    values: TimeEntryFormValues,
    entry_id: int | None,
    back_url: str,
    status_code: int = 200,
):
    project_id = _parse_id(values.project_id)
    context = {
        "values": values,
        "entry_id": entry_id,
        "projects": fetch_projects(db),
        "tasks": fetch_tasks(db, project_id) if project_id is not None else [],
        "back_url": back_url,
    }
    return templates.TemplateResponse(request, "entry_form.html", context, status_code=status_code)


def _back_url(back: str | None) -> str:
    value = (back or "").strip()
    return value if value.startswith(LIST_PATH) else LIST_PATH


@router.get("/ui/time-entries/new", response_class=HTMLResponse)
def new_entry_form(
    request: Request,
    project: str | None = Query(default=None),
    back: str = Query(default=LIST_PATH),
    db: Session = Depends(get_db),
):
    values = TimeEntryFormValues()
    if project is not None:
        values = values.with_project(project)
    return _render_entry_form(request, db, values, None, _back_url(back))


@router.get("/ui/time-entries/{entry_id}/edit", response_class=HTMLResponse)
def edit_entry_form(
    request: Request,
    entry_id: int,
    project: str | None = Query(default=None),
    back: str = Query(default=LIST_PATH),
    db: Session = Depends(get_db),
    user: User = Depends(require_ui_session),
):
    entry = get_time_entry(db, entry_id, user_id=user.id)
    if entry is None:
        raise HTTPException(404, "Not found")
    values = TimeEntryFormValues.from_entry(entry, settings.TZ)
    if project is not None:
        values = values.with_project(project)
    return _render_entry_form(request, db, values, entry.id, _back_url(back))


@router.post("/ui/time-entries/save")
def save_entry(
    request: Request,
    entry_id: str = Form(""),
    project_id: str = Form(""),
    task_id: str = Form(""),
    description: str = Form(""),
    start_time: str = Form(""),
    end_time: str = Form(""),
    invoice_number: str = Form(""),
    back: str = Form(LIST_PATH),
    db: Session = Depends(get_db),
    user: User = Depends(require_ui_session),
):
    values = TimeEntryFormValues(
        project_id=project_id,
        task_id=task_id,
        description=description,
        start_time=start_time,
        end_time=end_time,
        invoice_number=invoice_number,
    )
    back_url = _back_url(back)
    existing_id = _parse_id(entry_id)
    entry = None
    if existing_id is not None:
        entry = get_time_entry(db, existing_id, user_id=user.id)
        if entry is None:
            raise HTTPException(404, "Not found")

    try:
        payload = values.to_payload(settings.TZ)
        if entry is None:
            create_time_entry(db, user.id, payload)
        else:
            update_time_entry(db, entry, payload)
    except PermissionError as exc:
        push_error(request, "Error", exc)
        return _render_entry_form(request, db, values, existing_id, back_url, status_code=401)
    except (ValueError, SQLAlchemyError) as exc:
        db.rollback()
        push_error(request, "Error saving time entry", exc)
        return _render_entry_form(request, db, values, existing_id, back_url, status_code=422)

    push_toast(request, f"Time entry {'updated' if entry is not None else 'created'} successfully")
    return RedirectResponse(url=back_url, status_code=303)


@router.post("/ui/time-entries/{entry_id}/delete")
def remove_entry(
    request: Request,
    entry_id: int,
    back: str = Form(LIST_PATH),
    db: Session = Depends(get_db),
    user: User = Depends(require_ui_session),
):
    entry = get_time_entry(db, entry_id, user_id=user.id)
    if entry is None:
        push_error(request, "Error deleting time entry", "Time entry not found")
    else:
        try:
            delete_time_entry(db, entry)
        except SQLAlchemyError as exc:
            db.rollback()
            push_error(request, "Error deleting time entry", exc)
        else:
            push_toast(request, "Time entry deleted successfully")
    return RedirectResponse(url=_back_url(back), status_code=303)


@router.get("/ui/tasks/options", response_class=HTMLResponse)
def task_options(request: Request, project_id: str = Query(default=""), db: Session = Depends(get_db)):
    pid = _parse_id(project_id)
    tasks = fetch_tasks(db, pid) if pid is not None else []
    return templates.TemplateResponse(
        request, "_task_options.html", {"tasks": tasks, "selected": "", "enabled": pid is not None}
    )


# -- project dialog ----------------------------------------------------------


def _render_projects(request: Request, db: Session, form: dict, editing_id: int | None, status_code: int = 200):
    context = {"projects": fetch_projects(db), "form": form, "editing_id": editing_id}
    return templates.TemplateResponse(request, "projects.html", context, status_code=status_code)


@router.get(PROJECTS_PATH, response_class=HTMLResponse)
def projects_page(request: Request, edit: int | None = Query(default=None), db: Session = Depends(get_db)):
    form = {"name": "", "description": ""}
    editing_id = None
    if edit is not None:
        project = get_project(db, edit)
        if project is not None:
            editing_id = project.id
            form = {"name": project.name, "description": project.description or ""}
    return _render_projects(request, db, form, editing_id)


@router.post(f"{PROJECTS_PATH}/save")
def save_project(
    request: Request,
    editing_id: str = Form(""),
    name: str = Form(""),
    description: str = Form(""),
    db: Session = Depends(get_db),
):
    form = {"name": name, "description": description}
    project_id = _parse_id(editing_id)
    try:
        if project_id is None:
            create_project(db, form)
        else:
            project = get_project(db, project_id)
            if project is None:
                raise ValueError("Project not found")
            update_project(db, project, form)
    except (ValueError, SQLAlchemyError) as exc:
        db.rollback()
        push_error(request, "Error saving project", exc)
        return _render_projects(request, db, form, project_id, status_code=422)
    push_toast(request, f"Project {'updated' if project_id is not None else 'created'} successfully")
    return RedirectResponse(url=PROJECTS_PATH, status_code=303)


@router.post(PROJECTS_PATH + "/{project_id}/delete")
def remove_project(request: Request, project_id: int, db: Session = Depends(get_db)):
    project = get_project(db, project_id)
    try:
        if project is None:
            raise ValueError("Project not found")
        delete_project(db, project)
    except (ValueError, SQLAlchemyError) as exc:
        db.rollback()
        push_error(request, "Error deleting project", exc)
    else:
        push_toast(request, "Project deleted successfully")
    return RedirectResponse(url=PROJECTS_PATH, status_code=303)


# -- task dialog -------------------------------------------------------------


def _render_tasks(
    request: Request,
    db: Session,
    form: dict,
    editing_id: int | None,
    filter_project: int | None = None,
    status_code: int = 200,
):
    context = {
        "tasks": fetch_tasks(db, filter_project),
        "projects": fetch_projects(db),
        "form": form,
        "editing_id": editing_id,
        "filter_project": filter_project,
    }
    return templates.TemplateResponse(request, "tasks.html", context, status_code=status_code)


@router.get(TASKS_PATH, response_class=HTMLResponse)
def tasks_page(
    request: Request,
    edit: int | None = Query(default=None),
    project: str = Query(default=""),
    db: Session = Depends(get_db),
):
    form = {"name": "", "description": "", "project_id": ""}
    editing_id = None
    if edit is not None:
        task = get_task(db, edit)
        if task is not None:
            editing_id = task.id
            form = {"name": task.name, "description": task.description or "", "project_id": str(task.project_id)}
    return _render_tasks(request, db, form, editing_id, filter_project=_parse_id(project))


@router.post(f"{TASKS_PATH}/save")
def save_task(
    request: Request,
    editing_id: str = Form(""),
    name: str = Form(""),
    description: str = Form(""),
    project_id: str = Form(""),
    db: Session = Depends(get_db),
):
    form = {"name": name, "description": description, "project_id": project_id}
    task_id = _parse_id(editing_id)
    if not project_id.strip():
        push_toast(request, SELECT_PROJECT_MESSAGE, variant=VARIANT_DESTRUCTIVE)
        return _render_tasks(request, db, form, task_id, status_code=422)
    try:
        if task_id is None:
            create_task(db, form)
        else:
            task = get_task(db, task_id)
            if task is None:
                raise ValueError("Task not found")
            update_task(db, task, form)
    except (ValueError, SQLAlchemyError) as exc:
        db.rollback()
        push_error(request, "Error saving task", exc)
        return _render_tasks(request, db, form, task_id, status_code=422)
    push_toast(request, f"Task {'updated' if task_id is not None else 'created'} successfully")
    return RedirectResponse(url=TASKS_PATH, status_code=303)


@router.post(TASKS_PATH + "/{task_id}/delete")
def remove_task(request: Request, task_id: int, db: Session = Depends(get_db)):
    task = get_task(db, task_id)
    try:
        if task is None:
            raise ValueError("Task not found")
        delete_task(db, task)
    except (ValueError, SQLAlchemyError) as exc:
        db.rollback()
        push_error(request, "Error deleting task", exc)
    else:
        push_toast(request, "Task deleted successfully")
    return RedirectResponse(url=TASKS_PATH, status_code=303)
