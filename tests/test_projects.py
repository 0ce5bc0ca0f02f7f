"""Projects: CRUD, ordering and what deleting a project does to its children."""

import pytest

from timesheet.crud.projects import create_project, delete_project, fetch_projects, get_project, list_projects, update_project
from timesheet.crud.tasks import create_task, get_task
from timesheet.crud.time_entries import create_time_entry, get_time_entry
from timesheet.crud.users import create_user
from timesheet.services.query_cache import query_cache


def test_projects_are_listed_by_name(db_session):
    create_project(db_session, {"name": "zeta"})
    create_project(db_session, {"name": "Alpha", "description": "first"})
    create_project(db_session, {"name": "beta"})

    assert [p.name for p in list_projects(db_session)] == ["Alpha", "beta", "zeta"]


def test_name_is_required(db_session):
    with pytest.raises(ValueError):
        create_project(db_session, {"name": "   "})


def test_update_changes_fields_and_timestamp(db_session):
    project = create_project(db_session, {"name": "Acme"})
    before = project.updated_at
    updated = update_project(db_session, project, {"description": "Client work"})
    assert updated.name == "Acme"
    assert updated.description == "Client work"
    assert updated.updated_at >= before


def test_mutation_invalidates_cached_list(db_session):
    create_project(db_session, {"name": "Acme"})
    assert [p.name for p in fetch_projects(db_session)] == ["Acme"]
    assert ("projects",) in query_cache

    create_project(db_session, {"name": "Globex"})
    assert ("projects",) not in query_cache
    assert [p.name for p in fetch_projects(db_session)] == ["Acme", "Globex"]


def test_delete_removes_tasks_and_detaches_entries(db_session):
    user = create_user(db_session, "owner@example.com", "secret123")
    project = create_project(db_session, {"name": "Acme"})
    task = create_task(db_session, {"name": "Build", "project_id": project.id})
    entry = create_time_entry(
        db_session,
        user.id,
        {"project_id": project.id, "task_id": task.id, "start_time": "2024-01-01T09:00:00Z"},
    )
    project_id, task_id, entry_id = project.id, task.id, entry.id

    delete_project(db_session, project)
    db_session.expire_all()

    assert get_project(db_session, project_id) is None
    assert get_task(db_session, task_id) is None
    kept = get_time_entry(db_session, entry_id)
    assert kept is not None
    assert kept.project_id is None
    assert kept.task_id is None
