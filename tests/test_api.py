"""JSON API: auth flows, error envelope and the time entry endpoints."""

from conftest import signup


def _token(client, email="api@example.com", password="secret123"):
    client.post("/api/v1/auth/signup", json={"email": email, "password": password})
    response = client.post("/api/v1/auth/token", json={"email": email, "password": password})
    assert response.status_code == 200
    return response.json()


def _bearer(tokens):
    return {"Authorization": f"Bearer {tokens['access_token']}"}


def _project_with_task(client, headers, project="Acme", task="Build"):
    project_id = client.post("/api/v1/projects", json={"name": project}, headers=headers).json()["id"]
    task_id = client.post("/api/v1/tasks", json={"name": task, "project_id": project_id}, headers=headers).json()["id"]
    return project_id, task_id


def test_health(client):
    assert client.get("/health").json() == {"ok": True}


def test_signup_token_session_and_refresh(client):
    tokens = _token(client)
    assert tokens["token_type"] == "bearer"

    session = client.get("/api/v1/auth/session", headers=_bearer(tokens))
    assert session.status_code == 200
    assert session.json()["email"] == "api@example.com"

    refreshed = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert refreshed.status_code == 200
    assert client.get("/api/v1/auth/session", headers=_bearer(refreshed.json())).status_code == 200


def test_access_token_cannot_be_used_to_refresh(client):
    tokens = _token(client)
    response = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert response.status_code == 401


def test_duplicate_signup_conflicts(client):
    _token(client)
    response = client.post("/api/v1/auth/signup", json={"email": "API@example.com", "password": "secret123"})
    assert response.status_code == 409
    assert response.json()["message"] == "User already registered"


def test_wrong_password_is_rejected(client):
    _token(client)
    response = client.post("/api/v1/auth/token", json={"email": "api@example.com", "password": "wrong-one"})
    assert response.status_code == 401
    assert response.json()["code"] == "unauthorized"


def test_session_requires_credentials(client):
    response = client.get("/api/v1/auth/session")
    assert response.status_code == 401
    assert response.json() == {"code": "unauthorized", "message": "Authorization required"}


def test_validation_errors_use_envelope(client):
    response = client.post("/api/v1/auth/signup", json={"email": "nope", "password": "x"})
    assert response.status_code == 422
    body = response.json()
    assert body["code"] == "validation_error"
    assert body["details"]["errors"]


def test_unauthenticated_create_fails_and_inserts_nothing(client):
    response = client.post(
        "/api/v1/time-entries",
        json={"project_id": 1, "start_time": "2024-01-15T09:00:00Z"},
    )
    assert response.status_code == 401
    assert response.json()["message"] == "You must be logged in to create a time entry"

    headers = _bearer(_token(client))
    assert client.get("/api/v1/time-entries", headers=headers).json()["count"] == 0


def test_time_entry_lifecycle(client):
    headers = _bearer(_token(client))
    project_id, task_id = _project_with_task(client, headers)

    created = client.post(
        "/api/v1/time-entries",
        json={
            "project_id": project_id,
            "task_id": task_id,
            "description": "Kickoff",
            "start_time": "2024-01-15T09:00:00Z",
            "end_time": "2024-01-15T10:30:00Z",
        },
        headers=headers,
    )
    assert created.status_code == 201
    entry = created.json()
    assert entry["duration"] == 90
    assert entry["project_name"] == "Acme"
    assert entry["task_name"] == "Build"

    patched = client.patch(
        f"/api/v1/time-entries/{entry['id']}", json={"invoice_number": "INV-7"}, headers=headers
    )
    assert patched.json()["invoice_number"] == "INV-7"

    assert client.delete(f"/api/v1/time-entries/{entry['id']}", headers=headers).status_code == 200
    assert client.get(f"/api/v1/time-entries/{entry['id']}", headers=headers).status_code == 404


def test_mismatched_task_is_unprocessable(client):
    headers = _bearer(_token(client))
    acme_id, _ = _project_with_task(client, headers)
    _, foreign_task = _project_with_task(client, headers, project="Globex", task="Research")

    response = client.post(
        "/api/v1/time-entries",
        json={"project_id": acme_id, "task_id": foreign_task, "start_time": "2024-01-15T09:00:00Z"},
        headers=headers,
    )
    assert response.status_code == 422
    assert response.json()["message"] == "Task does not belong to the selected project"


def test_list_query_parameters(client):
    headers = _bearer(_token(client))
    project_id, _ = _project_with_task(client, headers)
    for n in range(12):
        client.post(
            "/api/v1/time-entries",
            json={
                "project_id": project_id,
                "description": f"entry {n}",
                "invoice_number": "INV-X" if n == 3 else None,
                "start_time": f"2024-01-{n + 1:02d}T09:00:00Z",
            },
            headers=headers,
        )

    page = client.get("/api/v1/time-entries", params={"page": 2}, headers=headers).json()
    assert page["count"] == 12
    assert page["total_pages"] == 2
    assert len(page["data"]) == 2

    found = client.get("/api/v1/time-entries", params={"q": "inv-x"}, headers=headers).json()
    assert [row["description"] for row in found["data"]] == ["entry 3"]

    oldest_first = client.get(
        "/api/v1/time-entries", params={"sort": "start_time", "order": "asc"}, headers=headers
    ).json()
    assert oldest_first["data"][0]["description"] == "entry 0"

    assert client.get("/api/v1/time-entries", params={"sort": "user_id"}, headers=headers).status_code == 422
    assert client.get("/api/v1/time-entries", params={"page": 0}, headers=headers).status_code == 422


def test_entries_of_other_users_are_invisible(client):
    owner = _bearer(_token(client, "owner@example.com"))
    intruder = _bearer(_token(client, "intruder@example.com"))
    project_id, _ = _project_with_task(client, owner)
    entry_id = client.post(
        "/api/v1/time-entries",
        json={"project_id": project_id, "start_time": "2024-01-15T09:00:00Z"},
        headers=owner,
    ).json()["id"]

    assert client.get(f"/api/v1/time-entries/{entry_id}", headers=intruder).status_code == 404
    assert client.patch(
        f"/api/v1/time-entries/{entry_id}", json={"description": "mine now"}, headers=intruder
    ).status_code == 404
    assert client.get("/api/v1/time-entries", headers=intruder).json()["count"] == 0


def test_tasks_filter_by_project(client):
    headers = _bearer(_token(client))
    acme_id, _ = _project_with_task(client, headers)
    _project_with_task(client, headers, project="Globex", task="Research")

    tasks = client.get("/api/v1/tasks", params={"project_id": acme_id}, headers=headers).json()
    assert [t["name"] for t in tasks] == ["Build"]
    assert tasks[0]["project_name"] == "Acme"


def test_session_cookie_also_authenticates_api(client):
    assert signup(client).status_code == 303
    response = client.get("/api/v1/auth/session")
    assert response.status_code == 200
    assert response.json()["email"] == "someone@example.com"
