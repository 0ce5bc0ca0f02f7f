import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["TZ"] = "UTC"
os.environ["PAGE_SIZE"] = "10"
os.environ.setdefault("APP_SECRET", "test-app-secret")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")

from timesheet.db.session import Base, SessionLocal, engine
from timesheet.services.query_cache import query_cache

# Ensure models are registered so metadata tables are created
from timesheet.models import project as project_model  # noqa: F401
from timesheet.models import task as task_model  # noqa: F401
from timesheet.models import time_entry as time_entry_model  # noqa: F401
from timesheet.models import user as user_model  # noqa: F401


@pytest.fixture(autouse=True)
def fresh_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    query_cache.clear()
    yield
    query_cache.clear()


@pytest.fixture()
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client():
    from fastapi.testclient import TestClient

    from timesheet.main import app

    with TestClient(app) as test_client:
        yield test_client


def signup(client, email="someone@example.com", password="secret123"):
    """Create an account through the HTML auth screen; the client keeps the session cookie."""

    return client.post(
        "/auth",
        data={"mode": "signup", "email": email, "password": password, "next": "/timesheet"},
        follow_redirects=False,
    )
